"""Order status transitions — commands and handler.

Strict paths (accept, owner cancel) go through the order's transition table.
Admin paths (tracking, status override) set the state directly. Every path
that lands on Cancelled gives the stock back first, once per checkout.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import AccessDenied
from storefront.order.order import Order, OrderStatus
from storefront.order.stock import restore_stock
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class AcceptOrder:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class AddTrackingId:
    order_id = Identifier(required=True)
    tracking_id = String(max_length=255)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(max_length=50)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class OrderTransitionsHandler:
    @handle(AcceptOrder)
    def accept_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.accept()
        repo.add(order)
        logger.info("Order accepted", order_id=str(order.id))

    @handle(AddTrackingId)
    def add_tracking_id(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.add_tracking(command.tracking_id)
        repo.add(order)
        logger.info("Tracking ID added", order_id=str(order.id), tracking_id=order.tracking_id)

    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        restock = order.restock_needed_for(command.status)
        if restock:
            restore_stock(order.stock_lines())

        previous = order.status
        order.override_status(command.status, stock_restored=restock)
        repo.add(order)
        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous,
            new_status=order.status,
            stock_restored=restock,
        )

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if str(order.customer_id) != str(command.customer_id):
            raise AccessDenied("Not authorized to cancel this order")

        order.assert_can_transition(OrderStatus.CANCELLED)
        if order.holds_stock():
            restore_stock(order.stock_lines())
        order.cancel(cancelled_by=command.customer_id)
        repo.add(order)
        logger.info("Order cancelled by customer", order_id=str(order.id))
