"""Checkout — turn a customer's cart into a Pending order.

The handler coordinates three aggregates: it reads the Cart, reserves stock
on each Product and creates the Order. Lines are priced at the product's
effective price at this moment and that snapshot is never recomputed.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.order import Order, PaymentMethod
from storefront.order.stock import reserve_stock
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_name = String(max_length=255)
    full_name = String(max_length=255)
    details_name = String(max_length=255)  # `name` from the shippingDetails shape
    phone = String(max_length=30)
    details_phone = String(max_length=30)
    address = String(max_length=500)
    city = String(max_length=100)
    state = String(max_length=100)
    pincode = String(max_length=20)
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)


def _first(*values):
    return next((v.strip() for v in values if v and v.strip()), "")


@storefront.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        """Place an order from the customer's cart and return its id."""
        payment_method = command.payment_method or PaymentMethod.COD.value
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError(
                {"payment_method": ["Cash on delivery (COD) is the only accepted payment method"]}
            )

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart is None or not cart.items:
            raise ValidationError({"items": ["Cart is empty"]})

        # Validate every line before touching any stock
        product_repo = current_domain.repository_for(Product)
        lines = []
        for item in cart.items:
            try:
                product = product_repo.get(item.product_id)
            except ObjectNotFoundError:
                raise ValidationError(
                    {"items": ["Some products in cart are no longer available"]}
                ) from None
            if product.stock < item.quantity:
                raise ValidationError({"stock": [f"Insufficient stock for {product.name}"]})

            lines.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "price": product.effective_price,
                    "quantity": item.quantity,
                    "image": product.primary_image,
                }
            )

        reserve_stock([(line["product_id"], line["quantity"]) for line in lines])

        order = Order.place(
            customer_id=command.customer_id,
            lines=lines,
            shipping_address={
                "full_name": _first(command.full_name, command.details_name, command.customer_name),
                "phone": _first(command.phone, command.details_phone),
                "address": _first(command.address),
                "city": _first(command.city),
                "state": _first(command.state),
                "pincode": _first(command.pincode),
            },
            payment_method=payment_method,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            customer_id=str(command.customer_id),
            total_amount=order.total_amount,
            lines=len(lines),
        )
        return str(order.id)
