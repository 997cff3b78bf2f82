"""Domain events for the Order aggregate.

Events are immutable facts about order state changes. They are written to
the event store alongside each committed change.
"""

from protean.fields import Boolean, DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer checked out their cart and an order was created."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts
    total_amount = Float(required=True)
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderAccepted:
    """An admin accepted a pending order."""

    __version__ = 1

    order_id = Identifier(required=True)
    accepted_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    """A tracking number was attached and the order moved to Shipped."""

    __version__ = 1

    order_id = Identifier(required=True)
    tracking_id = String(required=True)
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled through the forward-only customer path."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_by = Identifier(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An admin set the order status directly, bypassing the transition table."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    stock_restored = Boolean(default=False)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnExchangeRequested:
    """A customer asked to return or exchange a delivered order."""

    __version__ = 1

    order_id = Identifier(required=True)
    request_id = Identifier(required=True)
    request_type = String(required=True)
    customer_uid = Identifier(required=True)
    reason = Text()
    extra_payable = Float()
    requested_at = DateTime(required=True)


@storefront.event(part_of="Order")
class ReturnExchangeStatusUpdated:
    """An admin moved a return/exchange request to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    request_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_at = DateTime(required=True)
