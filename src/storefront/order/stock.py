"""Stock reconciliation between orders and the catalogue.

Reservation is all-or-nothing: lines are decremented one by one with the
conditional `Product.reserve_stock`, and if any line is refused the lines
already taken are put back before the error propagates.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def reserve_stock(lines):
    """Decrement stock for each (product_id, quantity) pair.

    Raises ValidationError naming the product when a line cannot be covered.
    """
    repo = current_domain.repository_for(Product)
    reserved = []
    try:
        for product_id, quantity in lines:
            try:
                product = repo.get(product_id)
            except ObjectNotFoundError:
                raise ValidationError(
                    {"items": ["Some products in cart are no longer available"]}
                ) from None
            product.reserve_stock(quantity)
            repo.add(product)
            reserved.append((product_id, quantity))
    except ValidationError:
        if reserved:
            logger.warning("Stock reservation failed, releasing reserved lines", lines=len(reserved))
            restore_stock(reserved)
        raise


def restore_stock(lines):
    """Increment stock for each (product_id, quantity) pair.

    Products deleted since the order was placed are skipped.
    """
    repo = current_domain.repository_for(Product)
    for product_id, quantity in lines:
        try:
            product = repo.get(product_id)
        except ObjectNotFoundError:
            logger.warning("Skipping stock restore for missing product", product_id=str(product_id))
            continue
        product.restore_stock(quantity)
        repo.add(product)
