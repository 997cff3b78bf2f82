"""Order deletion (admin). Stock comes back unless it was already released by a cancellation."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.stock import restore_stock
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class DeleteOrderHandler:
    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        restocked = order.holds_stock()
        if restocked:
            restore_stock(order.stock_lines())

        repo._dao.delete(order)
        logger.info("Order deleted", order_id=str(command.order_id), stock_restored=restocked)
