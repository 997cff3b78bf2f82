"""FastAPI routes for the Storefront — orders, cart and products.

Writes go through `current_domain.process`; reads go straight to the
repositories and are shaped by the `views` modules.
"""

import math

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import Principal, current_principal, require_admin
from storefront.api.schemas import (
    AddToCartRequest,
    CreateOrderRequest,
    CreateProductRequest,
    OrderStatusRequest,
    RemoveFromCartRequest,
    ReturnExchangeBody,
    ReturnStatusRequest,
    ReviewRequest,
    TrackingRequest,
    UpdateCartRequest,
    UpdateProductRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.views import cart_payload
from storefront.catalogue.management import CreateProduct, DeleteProduct, UpdateProduct
from storefront.catalogue.product import Product
from storefront.catalogue.reviews import AddProductReview
from storefront.catalogue.views import categories_payload, product_payload
from storefront.exceptions import AccessDenied
from storefront.order.analytics import DEFAULT_RETURNS_LIMIT, order_analytics, paid_revenue, return_requests
from storefront.order.checkout import PlaceOrder
from storefront.order.deletion import DeleteOrder
from storefront.order.order import Order
from storefront.order.returns import RequestReturnExchange, UpdateReturnExchangeStatus
from storefront.order.transitions import AcceptOrder, AddTrackingId, CancelOrder, UpdateOrderStatus
from storefront.order.views import order_payload, return_request_payload

order_router = APIRouter(prefix="/orders", tags=["orders"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])
product_router = APIRouter(prefix="/products", tags=["products"])


def _get(aggregate_cls, identifier, message):
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise ObjectNotFoundError(message) from None


def _order_response(order_id, message=None):
    body = {"success": True, "order": order_payload(_get(Order, order_id, "Order not found"))}
    if message:
        body["message"] = message
    return body


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
# Fixed paths are declared before `/{order_id}` so they are matched first.


@order_router.post("", status_code=201)
async def create_order(body: CreateOrderRequest, principal: Principal = Depends(current_principal)):
    address = body.shipping_address
    details = body.shipping_details
    command = PlaceOrder(
        customer_id=principal.id,
        customer_name=principal.name,
        full_name=address.full_name if address else None,
        details_name=details.name if details else None,
        phone=body.phone,
        details_phone=details.phone if details else None,
        address=(address.address if address else None) or (details.address if details else None),
        city=(address.city if address else None) or (details.city if details else None),
        state=address.state if address else None,
        pincode=(address.pincode if address else None) or (details.pincode if details else None),
        payment_method=body.payment_method or "COD",
    )
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id, "Order placed successfully")


@order_router.get("/my-orders")
async def my_orders(principal: Principal = Depends(current_principal)):
    orders = current_domain.repository_for(Order).for_customer(principal.id)
    return {"success": True, "orders": [order_payload(o) for o in orders]}


@order_router.get("/user/{user_id}")
async def orders_by_user(user_id: str, principal: Principal = Depends(current_principal)):
    if not principal.is_admin and principal.id != user_id:
        raise AccessDenied("Not authorized")
    orders = current_domain.repository_for(Order).for_customer(user_id)
    return {"success": True, "orders": [order_payload(o) for o in orders]}


@order_router.get("/analytics")
async def analytics(principal: Principal = Depends(require_admin)):
    return {"success": True, "analytics": order_analytics()}


@order_router.get("/returns")
async def list_return_requests(
    limit: int = Query(default=DEFAULT_RETURNS_LIMIT),
    principal: Principal = Depends(require_admin),
):
    rows = return_requests(limit)
    return {"success": True, "requests": rows, "total": len(rows)}


@order_router.put("/returns/{request_id}/status")
async def update_return_request_status(
    request_id: str,
    body: ReturnStatusRequest,
    principal: Principal = Depends(require_admin),
):
    command = UpdateReturnExchangeStatus(request_id=request_id, status=body.status)
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(order_id, "Return/exchange request updated")


@order_router.get("")
async def all_orders_for_admin(principal: Principal = Depends(require_admin)):
    orders = current_domain.repository_for(Order).all_orders()
    return {"success": True, "orders": [order_payload(o) for o in orders]}


@order_router.get("/all")
async def paginated_orders(
    status: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    principal: Principal = Depends(require_admin),
):
    repo = current_domain.repository_for(Order)
    orders, total = repo.paginate(status=None if status in (None, "", "all") else status, page=page, limit=limit)
    return {
        "success": True,
        "orders": [order_payload(o) for o in orders],
        "totalPages": math.ceil(total / limit),
        "currentPage": page,
        "total": total,
        "totalRevenue": paid_revenue(repo.all_orders()),
    }


@order_router.put("/{order_id}/accept")
async def accept_order(order_id: str, principal: Principal = Depends(require_admin)):
    current_domain.process(AcceptOrder(order_id=order_id), asynchronous=False)
    return _order_response(order_id, "Order accepted")


@order_router.put("/{order_id}/tracking")
async def add_tracking_id(order_id: str, body: TrackingRequest, principal: Principal = Depends(require_admin)):
    current_domain.process(AddTrackingId(order_id=order_id, tracking_id=body.tracking_id), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: OrderStatusRequest,
    principal: Principal = Depends(require_admin),
):
    current_domain.process(UpdateOrderStatus(order_id=order_id, status=body.order_status), asynchronous=False)
    return _order_response(order_id)


@order_router.put("/{order_id}/cancel")
async def cancel_order(order_id: str, principal: Principal = Depends(current_principal)):
    current_domain.process(CancelOrder(order_id=order_id, customer_id=principal.id), asynchronous=False)
    return _order_response(order_id, "Order cancelled")


@order_router.delete("/{order_id}")
async def delete_order(order_id: str, principal: Principal = Depends(require_admin)):
    _get(Order, order_id, "Order not found")
    current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    return {"success": True, "message": "Order deleted successfully"}


@order_router.post("/{order_id}/return-exchange", status_code=201)
async def request_return_exchange(
    order_id: str,
    body: ReturnExchangeBody,
    principal: Principal = Depends(current_principal),
):
    _get(Order, order_id, "Order not found")
    command = RequestReturnExchange(
        order_id=order_id,
        customer_id=principal.id,
        request_type=body.request_type,
        reason=body.reason,
        refund_mode=body.refund_mode,
        upi_id=body.upi_id,
        account_holder_name=body.account_holder_name,
        account_number=body.account_number,
        ifsc_code=body.ifsc_code,
        bank_name=body.bank_name,
        requested_product_name=body.requested_product_name,
        requested_product_color=body.requested_product_color,
        requested_product_price=body.requested_product_price,
    )
    request_id = current_domain.process(command, asynchronous=False)

    order = _get(Order, order_id, "Order not found")
    request = next(r for r in order.return_exchange_requests if str(r.id) == request_id)
    return {
        "success": True,
        "message": f"{request.request_type} request submitted",
        "request": return_request_payload(request),
        "order": order_payload(order),
    }


@order_router.get("/{order_id}")
async def get_order(order_id: str, principal: Principal = Depends(current_principal)):
    order = _get(Order, order_id, "Order not found")
    if str(order.customer_id) != principal.id and not principal.is_admin:
        raise AccessDenied("Not authorized to view this order")
    return {"success": True, "order": order_payload(order)}


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
def _cart_response(customer_id, message=None):
    cart = current_domain.repository_for(Cart).get_or_create(customer_id)
    body = {"success": True, "cart": cart_payload(cart)}
    if message:
        body["message"] = message
    return body


@cart_router.get("")
async def get_cart(principal: Principal = Depends(current_principal)):
    return _cart_response(principal.id)


@cart_router.post("/add")
async def add_to_cart(body: AddToCartRequest, principal: Principal = Depends(current_principal)):
    command = AddToCart(customer_id=principal.id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id, "Item added to cart")


@cart_router.put("/update")
async def update_cart_item(body: UpdateCartRequest, principal: Principal = Depends(current_principal)):
    command = UpdateCartQuantity(customer_id=principal.id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id, "Cart updated")


@cart_router.delete("/remove")
async def remove_from_cart(body: RemoveFromCartRequest, principal: Principal = Depends(current_principal)):
    command = RemoveFromCart(customer_id=principal.id, product_id=body.product_id)
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.id, "Item removed from cart")


@cart_router.delete("/clear")
async def clear_cart(principal: Principal = Depends(current_principal)):
    current_domain.process(ClearCart(customer_id=principal.id), asynchronous=False)
    return _cart_response(principal.id, "Cart cleared")


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
@product_router.get("")
async def list_products(
    category: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=12, ge=1),
):
    products, total = current_domain.repository_for(Product).search(
        category=category,
        search=search,
        sort=sort,
        page=page,
        limit=limit,
    )
    return {
        "success": True,
        "products": [product_payload(p) for p in products],
        "totalPages": math.ceil(total / limit),
        "currentPage": page,
        "total": total,
    }


@product_router.get("/featured")
async def featured_products():
    products = current_domain.repository_for(Product).featured()
    return {"success": True, "products": [product_payload(p) for p in products]}


@product_router.get("/categories")
async def categories():
    return {"success": True, "categories": categories_payload()}


@product_router.get("/{product_id}")
async def get_product(product_id: str):
    product = _get(Product, product_id, "Product not found")
    return {"success": True, "product": product_payload(product)}


@product_router.post("", status_code=201)
async def create_product(body: CreateProductRequest, principal: Principal = Depends(require_admin)):
    # Omitted fields fall back to the command defaults
    command = CreateProduct(**body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    product = _get(Product, result["product_id"], "Product not found")
    message = "Product created successfully" if result["created"] else "Existing product updated"
    return {"success": True, "message": message, "product": product_payload(product)}


@product_router.put("/{product_id}")
async def update_product(product_id: str, body: UpdateProductRequest, principal: Principal = Depends(require_admin)):
    _get(Product, product_id, "Product not found")
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    product = _get(Product, product_id, "Product not found")
    return {"success": True, "product": product_payload(product)}


@product_router.delete("/{product_id}")
async def delete_product(product_id: str, principal: Principal = Depends(require_admin)):
    _get(Product, product_id, "Product not found")
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return {"success": True, "message": "Product deleted successfully"}


@product_router.post("/{product_id}/review")
async def add_review(product_id: str, body: ReviewRequest, principal: Principal = Depends(current_principal)):
    _get(Product, product_id, "Product not found")
    command = AddProductReview(
        product_id=product_id,
        user_id=principal.id,
        name=principal.name,
        rating=body.rating,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return {"success": True, "message": "Review added successfully"}
