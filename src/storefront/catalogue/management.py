"""Product management — create, update and delete commands and handler."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, List, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=100)
    description = String(required=True, max_length=2000)
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)
    category = String(required=True, max_length=50)
    stock = Integer(default=0, min_value=0)
    images = List(content_type=String)
    image = Text()
    featured = Boolean(default=False)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    name = String(max_length=100)
    description = String(max_length=2000)
    price = Float(min_value=0.0)
    sale_price = Float(min_value=0.0)
    category = String(max_length=50)
    stock = Integer(min_value=0)
    images = List(content_type=String)
    image = Text()
    featured = Boolean()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductsHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        """Create a product, or update the same-named product in the category.

        Returns a dict with the product id and whether a new record was made.
        """
        repo = current_domain.repository_for(Product)

        existing = repo.find_by_name_in_category(command.name, command.category)
        if existing is not None:
            existing.update_details(
                name=command.name,
                description=command.description,
                price=command.price,
                sale_price=command.sale_price,
                stock=command.stock,
                images=command.images or None,
                image=command.image,
                featured=command.featured,
            )
            repo.add(existing)
            logger.info("Existing product updated", product_id=str(existing.id), name=existing.name)
            return {"product_id": str(existing.id), "created": False}

        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            sale_price=command.sale_price,
            category=command.category,
            stock=command.stock or 0,
            images=command.images,
            image=command.image,
            featured=bool(command.featured),
        )
        repo.add(product)
        logger.info("Product created", product_id=str(product.id), name=product.name)
        return {"product_id": str(product.id), "created": True}

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            sale_price=command.sale_price,
            category=command.category,
            stock=command.stock,
            images=command.images or None,
            image=command.image,
            featured=command.featured,
        )
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        # Hard delete: historical order lines keep their own snapshots.
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("Product deleted", product_id=str(command.product_id))
