"""Cart item management — commands and handler.

Every command addresses the cart by its owner; the cart is created on demand.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)  # <= 0 removes the line


@storefront.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        try:
            product = current_domain.repository_for(Product).get(command.product_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Product not found") from None

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.customer_id)
        cart.add_item(
            product_id=str(product.id),
            name=product.name,
            price=product.effective_price,
            image=product.primary_image,
            quantity=command.quantity if command.quantity is not None else 1,
            available_stock=product.stock,
        )
        repo.add(cart)

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            raise ObjectNotFoundError("Cart not found")

        available = 0
        if command.quantity > 0:
            try:
                product = current_domain.repository_for(Product).get(command.product_id)
            except ObjectNotFoundError:
                raise ValidationError({"stock": ["Insufficient stock"]}) from None
            available = product.stock

        cart.update_item_quantity(
            product_id=command.product_id,
            quantity=command.quantity,
            available_stock=available,
        )
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            raise ObjectNotFoundError("Cart not found")
        cart.remove_item(command.product_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            return
        cart.clear()
        repo.add(cart)
