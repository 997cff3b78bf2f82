"""Product reviews — command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Product")
class AddProductReview:
    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    name = String(max_length=100)
    rating = Integer(required=True)
    comment = Text()


@storefront.command_handler(part_of=Product)
class ProductReviewHandler:
    @handle(AddProductReview)
    def add_review(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.add_review(
            user_id=command.user_id,
            rating=command.rating,
            comment=command.comment,
            name=command.name,
        )
        repo.add(product)
