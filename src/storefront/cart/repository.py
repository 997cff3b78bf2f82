"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None

    def get_or_create(self, customer_id) -> Cart:
        """Return the customer's cart, creating and storing an empty one if needed."""
        cart = self.for_customer(customer_id)
        if cart is None:
            cart = Cart.create(customer_id=customer_id)
            self.add(cart)
        return cart
