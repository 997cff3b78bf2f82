"""Return and exchange requests on delivered orders — commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import AccessDenied
from storefront.order.order import Order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class RequestReturnExchange:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    request_type = String(max_length=20)
    reason = Text()
    # Return refund destination
    refund_mode = String(max_length=10)
    upi_id = String(max_length=100)
    account_holder_name = String(max_length=255)
    account_number = String(max_length=50)
    ifsc_code = String(max_length=20)
    bank_name = String(max_length=255)
    # Exchange target
    requested_product_name = String(max_length=255)
    requested_product_color = String(max_length=100)
    requested_product_price = Float()


@storefront.command(part_of="Order")
class UpdateReturnExchangeStatus:
    request_id = Identifier(required=True)
    status = String(max_length=20)


@storefront.command_handler(part_of=Order)
class ReturnExchangeHandler:
    @handle(RequestReturnExchange)
    def request_return_exchange(self, command):
        """Open a request and return its id."""
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if str(order.customer_id) != str(command.customer_id):
            raise AccessDenied("Not authorized to request a return or exchange for this order")
        order.assert_delivered()

        request = order.request_return_exchange(
            customer_uid=command.customer_id,
            request_type=command.request_type,
            reason=command.reason,
            refund_details={
                "refund_mode": command.refund_mode,
                "upi_id": command.upi_id,
                "account_holder_name": command.account_holder_name,
                "account_number": command.account_number,
                "ifsc_code": command.ifsc_code,
                "bank_name": command.bank_name,
            },
            exchange_details={
                "requested_product_name": command.requested_product_name,
                "requested_product_color": command.requested_product_color,
                "requested_product_price": command.requested_product_price,
            },
        )
        repo.add(order)
        logger.info(
            "Return/exchange requested",
            order_id=str(order.id),
            request_id=str(request.id),
            request_type=request.request_type,
        )
        return str(request.id)

    @handle(UpdateReturnExchangeStatus)
    def update_return_exchange_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find_by_return_request(command.request_id)
        if order is None:
            raise ObjectNotFoundError("Return/exchange request not found")

        order.update_return_exchange_status(command.request_id, command.status)
        repo.add(order)
        logger.info(
            "Return/exchange status updated",
            order_id=str(order.id),
            request_id=str(command.request_id),
            status=command.status,
        )
        return str(order.id)
