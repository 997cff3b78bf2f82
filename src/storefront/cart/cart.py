"""Cart aggregate (CQRS) — one mutable cart per customer.

Each line carries a snapshot of the product's name, effective price and
image taken when the product was added. The cart is created lazily on first
access and emptied, never deleted, when the customer checks out.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(max_length=100)
    price = Float(default=0.0, min_value=0.0)
    image = Text()
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, name, price, image, quantity, available_stock):
        """Add a product, or increase the quantity of its existing line.

        `available_stock` is the product's live stock; the resulting line
        quantity may not exceed it.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if available_stock < quantity:
            raise ValidationError({"stock": ["Insufficient stock"]})

        now = datetime.now(UTC)
        existing = self.line_for(product_id)
        if existing:
            new_quantity = existing.quantity + quantity
            if new_quantity > available_stock:
                raise ValidationError({"stock": ["Insufficient stock for requested quantity"]})
            existing.quantity = new_quantity
            line_quantity = new_quantity
        else:
            self.add_items(
                CartItem(
                    product_id=product_id,
                    name=name,
                    price=price,
                    image=image,
                    quantity=quantity,
                    added_at=now,
                )
            )
            line_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                name=name,
                price=price,
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_item_quantity(self, product_id, quantity, available_stock):
        """Set a line's quantity; zero or less removes the line."""
        item = self.line_for(product_id)
        if item is None:
            raise ObjectNotFoundError("Item not found in cart")

        if quantity <= 0:
            self.remove_item(product_id)
            return

        if available_stock < quantity:
            raise ValidationError({"stock": ["Insufficient stock"]})

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Drop the line for `product_id`; removing an absent product is a no-op."""
        item = self.line_for(product_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
            )
        )

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                items_removed=removed,
                cleared_at=now,
            )
        )
