"""Order aggregate (CQRS) — the core of the storefront.

An order is created once from a cart and its lines are never edited after
that. Prices on the lines are the effective prices at checkout time.

State Machine:
    PENDING → ACCEPTED → SHIPPED → DELIVERED
    CANCELLED reachable from any non-terminal state
    PROCESSING is a legacy value: accepted on read, never produced

Two ways to move an order:
    advance_to()       strict, follows _VALID_TRANSITIONS (customer actions, accept)
    override_status()  admin authority, any canonical status, no ordering

DELIVERED orders can carry return/exchange requests; at most one of them may
be active (Requested or Approved) at any time.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    OrderAccepted,
    OrderCancelled,
    OrderPlaced,
    OrderShipped,
    OrderStatusChanged,
    ReturnExchangeRequested,
    ReturnExchangeStatusUpdated,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    PROCESSING = "Processing"


class PaymentMethod(Enum):
    COD = "COD"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"


class RequestType(Enum):
    RETURN = "Return"
    EXCHANGE = "Exchange"


class RequestStatus(Enum):
    REQUESTED = "Requested"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    COMPLETED = "Completed"


class RefundMode(Enum):
    UPI = "UPI"
    BANK = "Bank"


# Statuses an admin may set directly
CANONICAL_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
)

ACTIVE_REQUEST_STATUSES = {RequestStatus.REQUESTED.value, RequestStatus.APPROVED.value}

# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.ACCEPTED, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.ACCEPTED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}


def _blank(value):
    return not (value or "").strip()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured once at checkout.

    This is the single stored shape; the two historical API shapes
    (`shippingAddress` and `shippingDetails`) are derived from it.
    """

    full_name = String(max_length=255, default="")
    phone = String(max_length=30, default="")
    address = String(max_length=500, default="")
    city = String(max_length=100, default="")
    state = String(max_length=100, default="")
    pincode = String(max_length=20, default="")


@storefront.value_object(part_of="Order")
class RefundDetails:
    """Where a return refund is paid: a UPI id or a bank account, never both."""

    refund_mode = String(required=True, max_length=10)
    upi_id = String(max_length=100, default="")
    account_holder_name = String(max_length=255, default="")
    account_number = String(max_length=50, default="")
    ifsc_code = String(max_length=20, default="")
    bank_name = String(max_length=255, default="")

    @invariant.post
    def refund_destination_must_match_mode(self):
        if self.refund_mode == RefundMode.UPI.value:
            if _blank(self.upi_id):
                raise ValidationError({"upi_id": ["UPI ID is required for UPI refunds"]})
            if any((self.account_holder_name, self.account_number, self.ifsc_code, self.bank_name)):
                raise ValidationError({"refund_mode": ["UPI refunds cannot carry bank details"]})
        elif self.refund_mode == RefundMode.BANK.value:
            if any(
                _blank(value)
                for value in (self.account_holder_name, self.account_number, self.ifsc_code, self.bank_name)
            ):
                raise ValidationError(
                    {"bank_details": ["Account holder name, account number, IFSC code and bank name are required"]}
                )
            if self.upi_id:
                raise ValidationError({"refund_mode": ["Bank refunds cannot carry a UPI ID"]})
        else:
            raise ValidationError({"refund_mode": ["Refund mode must be UPI or Bank"]})


@storefront.value_object(part_of="Order")
class ExchangeDetails:
    """The product a customer wants instead, and what they owe on top."""

    requested_product_name = String(required=True, max_length=255)
    requested_product_color = String(max_length=100, default="")
    requested_product_price = Float(required=True, min_value=0.0)
    previous_order_amount = Float(required=True, min_value=0.0)
    extra_payable = Float(default=0.0, min_value=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line of an order with the product snapshot taken at checkout."""

    product_id = Identifier(required=True)
    name = String(max_length=255, default="Product")
    price = Float(default=0.0, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = Text()


@storefront.entity(part_of="Order")
class ReturnExchangeRequest:
    request_type = String(required=True, choices=RequestType)
    reason = Text()
    status = String(choices=RequestStatus, default=RequestStatus.REQUESTED.value)
    customer_uid = Identifier(required=True)
    refund_details = ValueObject(RefundDetails)
    exchange_details = ValueObject(ExchangeDetails)
    created_at = DateTime()
    updated_at = DateTime()

    @property
    def is_active(self):
        return self.status in ACTIVE_REQUEST_STATUSES


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    total_amount = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_id = String(max_length=255, default="")
    return_exchange_requests = HasMany(ReturnExchangeRequest)
    has_return_requests = Boolean(default=False)
    # Set once the checkout's units have gone back to the catalogue
    stock_released = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()

    @invariant.post
    def at_most_one_active_return_request(self):
        active = [r for r in self.return_exchange_requests if r.is_active]
        if len(active) > 1:
            raise ValidationError(
                {"return_exchange": ["An active return/exchange request already exists for this order"]}
            )

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, customer_id, lines, shipping_address, payment_method=PaymentMethod.COD.value):
        """Create a Pending order from priced checkout lines.

        Args:
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, price, quantity, image.
                `price` is already the effective unit price.
            shipping_address: Dict with full_name, phone, address, city, state, pincode.
            payment_method: Only "COD" is accepted.
        """
        if not lines:
            raise ValidationError({"items": ["Cart is empty"]})
        if payment_method not in {m.value for m in PaymentMethod}:
            raise ValidationError({"payment_method": ["Cash on delivery (COD) is the only accepted payment method"]})

        now = datetime.now(UTC)
        total = sum(line["price"] * line["quantity"] for line in lines)

        order = cls(
            customer_id=customer_id,
            items=[OrderItem(**line) for line in lines],
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            total_amount=total,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                items=json.dumps(lines),
                total_amount=total,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def total_price(self):
        return self.total_amount

    def stock_lines(self):
        """(product_id, quantity) pairs, the input for stock reconciliation."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def can_transition_to(self, target_status):
        current = OrderStatus(self.status)
        return target_status in _VALID_TRANSITIONS.get(current, set())

    def assert_can_transition(self, target_status):
        """Validate that the current state allows transition to target."""
        if not self.can_transition_to(target_status):
            raise ValidationError(
                {"status": [f"Cannot transition from {self.status} to {target_status.value}"]}
            )

    def holds_stock(self):
        """True while the units decremented at checkout are still out of the catalogue.

        A cancelled order that an admin reopens keeps `stock_released`, so its
        units are never given back a second time.
        """
        return not self.stock_released and self.status != OrderStatus.CANCELLED.value

    def restock_needed_for(self, new_status):
        """True when moving to `new_status` must give the order's stock back."""
        return new_status == OrderStatus.CANCELLED.value and self.holds_stock()

    def release_stock(self):
        self.stock_released = True

    def _stamp(self, new_status, now):
        if new_status == OrderStatus.SHIPPED.value:
            self.shipped_at = now
        if new_status == OrderStatus.DELIVERED.value:
            self.delivered_at = now
        self.updated_at = now

    # -------------------------------------------------------------------
    # Strict transitions
    # -------------------------------------------------------------------
    def accept(self):
        """Accept a Pending order."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Only Pending orders can be accepted (order is {self.status})"]})
        self.assert_can_transition(OrderStatus.ACCEPTED)

        now = datetime.now(UTC)
        self.status = OrderStatus.ACCEPTED.value
        self.updated_at = now

        self.raise_(OrderAccepted(order_id=str(self.id), accepted_at=now))

    def cancel(self, cancelled_by):
        """Cancel through the transition table. Stock is restored by the caller first."""
        self.assert_can_transition(OrderStatus.CANCELLED)

        previous = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.release_stock()
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous,
                cancelled_by=str(cancelled_by),
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Admin transitions
    # -------------------------------------------------------------------
    def add_tracking(self, tracking_id):
        """Attach a tracking number; the order becomes Shipped from any state."""
        if _blank(tracking_id):
            raise ValidationError({"tracking_id": ["Tracking ID is required"]})

        now = datetime.now(UTC)
        self.tracking_id = tracking_id.strip()
        self.status = OrderStatus.SHIPPED.value
        self._stamp(OrderStatus.SHIPPED.value, now)

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                tracking_id=self.tracking_id,
                shipped_at=now,
            )
        )

    def override_status(self, new_status, stock_restored=False):
        """Set any canonical status without consulting the transition table."""
        if new_status not in {s.value for s in CANONICAL_STATUSES}:
            raise ValidationError({"order_status": ["Invalid order status"]})

        previous = self.status
        now = datetime.now(UTC)
        self.status = new_status
        if stock_restored:
            self.release_stock()
        self._stamp(new_status, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=new_status,
                stock_restored=stock_restored,
                changed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Returns & exchanges
    # -------------------------------------------------------------------
    def active_return_request(self):
        return next((r for r in self.return_exchange_requests if r.is_active), None)

    def assert_delivered(self):
        if OrderStatus(self.status) != OrderStatus.DELIVERED:
            raise ValidationError(
                {"status": ["Return or exchange can only be requested for delivered orders"]}
            )

    def request_return_exchange(
        self,
        customer_uid,
        request_type,
        reason="",
        refund_details=None,
        exchange_details=None,
    ):
        """Open a return or exchange request on a delivered order.

        Args:
            customer_uid: The requesting customer.
            request_type: "Return" or "Exchange".
            reason: Free text.
            refund_details: For returns, dict with refund_mode and either
                upi_id or the four bank fields.
            exchange_details: For exchanges, dict with requested_product_name,
                requested_product_color and requested_product_price.

        Returns:
            The created ReturnExchangeRequest.
        """
        self.assert_delivered()
        if self.active_return_request() is not None:
            raise ValidationError(
                {"return_exchange": ["An active return/exchange request already exists for this order"]}
            )

        refund = None
        exchange = None
        if request_type == RequestType.RETURN.value:
            refund = self._build_refund_details(refund_details or {})
        elif request_type == RequestType.EXCHANGE.value:
            exchange = self._build_exchange_details(exchange_details or {})
        else:
            raise ValidationError({"request_type": ["Request type must be Return or Exchange"]})

        now = datetime.now(UTC)
        request = ReturnExchangeRequest(
            request_type=request_type,
            reason=(reason or "").strip(),
            status=RequestStatus.REQUESTED.value,
            customer_uid=customer_uid,
            refund_details=refund,
            exchange_details=exchange,
            created_at=now,
            updated_at=now,
        )
        self.add_return_exchange_requests(request)
        self.has_return_requests = True
        self.updated_at = now

        self.raise_(
            ReturnExchangeRequested(
                order_id=str(self.id),
                request_id=str(request.id),
                request_type=request_type,
                customer_uid=str(customer_uid),
                reason=request.reason,
                extra_payable=exchange.extra_payable if exchange else None,
                requested_at=now,
            )
        )
        return request

    def _build_refund_details(self, data):
        mode = (data.get("refund_mode") or "").strip()
        if mode == RefundMode.UPI.value:
            return RefundDetails(refund_mode=mode, upi_id=(data.get("upi_id") or "").strip())
        if mode == RefundMode.BANK.value:
            return RefundDetails(
                refund_mode=mode,
                account_holder_name=(data.get("account_holder_name") or "").strip(),
                account_number=(data.get("account_number") or "").strip(),
                ifsc_code=(data.get("ifsc_code") or "").strip().upper(),
                bank_name=(data.get("bank_name") or "").strip(),
            )
        raise ValidationError({"refund_mode": ["Refund mode must be UPI or Bank"]})

    def _build_exchange_details(self, data):
        name = (data.get("requested_product_name") or "").strip()
        if not name:
            raise ValidationError({"requested_product_name": ["Requested product name is required"]})

        price = data.get("requested_product_price")
        if price is None:
            raise ValidationError({"requested_product_price": ["Requested product price is required"]})
        price = float(price)

        previous_amount = self.total_amount or 0.0
        if price <= previous_amount:
            raise ValidationError(
                {
                    "requested_product_price": [
                        "Exchange is only allowed for a product priced higher than the original order amount"
                    ]
                }
            )

        return ExchangeDetails(
            requested_product_name=name,
            requested_product_color=(data.get("requested_product_color") or "").strip(),
            requested_product_price=price,
            previous_order_amount=previous_amount,
            extra_payable=max(0.0, price - previous_amount),
        )

    def update_return_exchange_status(self, request_id, new_status):
        """Admin decision on a request. Any of the four statuses may be set."""
        if new_status not in {s.value for s in RequestStatus}:
            raise ValidationError({"status": ["Invalid return/exchange status"]})

        request = next((r for r in self.return_exchange_requests if str(r.id) == str(request_id)), None)
        if request is None:
            raise ObjectNotFoundError("Return/exchange request not found")

        active = self.active_return_request()
        if new_status in ACTIVE_REQUEST_STATUSES and active is not None and active.id != request.id:
            raise ValidationError(
                {"return_exchange": ["An active return/exchange request already exists for this order"]}
            )

        previous = request.status
        now = datetime.now(UTC)
        request.status = new_status
        request.updated_at = now
        self.updated_at = now

        self.raise_(
            ReturnExchangeStatusUpdated(
                order_id=str(self.id),
                request_id=str(request_id),
                previous_status=previous,
                new_status=new_status,
                updated_at=now,
            )
        )
        return request
