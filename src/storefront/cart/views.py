"""Cart payload for API clients."""


def cart_payload(cart):
    items = [
        {
            "product": str(item.product_id),
            "name": item.name or "",
            "price": item.price,
            "image": item.image or "",
            "quantity": item.quantity,
        }
        for item in cart.items
    ]
    return {
        "_id": str(cart.id),
        "userId": str(cart.customer_id),
        "items": items,
        "totalItems": sum(line["quantity"] for line in items),
        "totalPrice": sum(line["price"] * line["quantity"] for line in items),
        "updatedAt": cart.updated_at,
    }
