"""Order payloads in the shape API clients already consume.

Orders are stored with one set of lines and one shipping address. Clients
still read two historical shapes of each (`orderItems`/`items`,
`shippingAddress`/`shippingDetails`) and two total fields; they are all
derived here and nowhere else.
"""


def to_items(order_items):
    """Reduce full order lines to the compact `items` shape."""
    return [
        {"product": line["product"], "quantity": line["quantity"], "price": line.get("price", 0.0)}
        for line in order_items
    ]


def order_items_payload(order):
    return [
        {
            "product": str(item.product_id),
            "name": item.name,
            "price": item.price,
            "quantity": item.quantity,
            "image": item.image or "",
        }
        for item in order.items
    ]


def shipping_payloads(address):
    """Return (shippingDetails, shippingAddress) for one stored address."""
    full_name = phone = street = city = state = pincode = ""
    if address is not None:
        full_name = address.full_name or ""
        phone = address.phone or ""
        street = address.address or ""
        city = address.city or ""
        state = address.state or ""
        pincode = address.pincode or ""

    details = {"name": full_name, "phone": phone, "address": street, "city": city, "pincode": pincode}
    shipping_address = {
        "fullName": full_name,
        "address": street,
        "city": city,
        "state": state,
        "pincode": pincode,
    }
    return details, shipping_address


def refund_details_payload(refund):
    if refund is None:
        return None
    return {
        "refundMode": refund.refund_mode,
        "upiId": refund.upi_id or "",
        "accountHolderName": refund.account_holder_name or "",
        "accountNumber": refund.account_number or "",
        "ifscCode": refund.ifsc_code or "",
        "bankName": refund.bank_name or "",
    }


def exchange_details_payload(exchange):
    if exchange is None:
        return None
    return {
        "requestedProductName": exchange.requested_product_name,
        "requestedProductColor": exchange.requested_product_color or "",
        "requestedProductPrice": exchange.requested_product_price,
        "previousOrderAmount": exchange.previous_order_amount,
        "extraPayable": exchange.extra_payable,
    }


def return_request_payload(request):
    return {
        "_id": str(request.id),
        "requestType": request.request_type,
        "reason": request.reason or "",
        "status": request.status,
        "customerUid": str(request.customer_uid),
        "refundDetails": refund_details_payload(request.refund_details),
        "exchangeDetails": exchange_details_payload(request.exchange_details),
        "createdAt": request.created_at,
        "updatedAt": request.updated_at,
    }


def order_payload(order):
    order_items = order_items_payload(order)
    details, shipping_address = shipping_payloads(order.shipping_address)
    return {
        "_id": str(order.id),
        "id": str(order.id),
        "userId": str(order.customer_id),
        "orderItems": order_items,
        "items": to_items(order_items),
        "shippingDetails": details,
        "shippingAddress": shipping_address,
        "phone": details["phone"],
        "paymentMethod": order.payment_method,
        "paymentStatus": order.payment_status,
        "totalAmount": order.total_amount,
        "totalPrice": order.total_price,
        "orderStatus": order.status,
        "trackingId": order.tracking_id or "",
        "returnExchangeRequests": [return_request_payload(r) for r in order.return_exchange_requests],
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
        "shippedAt": order.shipped_at,
        "deliveredAt": order.delivered_at,
    }


def return_request_row(order, request):
    """One row of the admin returns listing: the request plus its order context."""
    details, _ = shipping_payloads(order.shipping_address)
    return {
        **return_request_payload(request),
        "requestId": str(request.id),
        "orderId": str(order.id),
        "userId": str(order.customer_id),
        "orderStatus": order.status,
        "totalAmount": order.total_amount,
        "customerName": details["name"],
        "phone": details["phone"],
        "orderItems": order_items_payload(order),
    }
