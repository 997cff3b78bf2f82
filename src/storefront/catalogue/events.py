"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    category = String(required=True)
    price = Float(required=True)
    stock = Integer(required=True)
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductUpdated:
    """Admin edited product details, pricing or stock."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    sale_price = Float()
    stock = Integer(required=True)
    updated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Units were taken out of stock for an order being placed."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockRestored:
    """Units were put back into stock (cancellation, deletion or compensation)."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    restored_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductReviewed:
    """A customer reviewed a product; carries the recomputed aggregate rating."""

    __version__ = 1

    product_id = Identifier(required=True)
    user_id = Identifier(required=True)
    rating = Integer(required=True)
    average_rating = Float(required=True)
    num_reviews = Integer(required=True)
    reviewed_at = DateTime(required=True)
