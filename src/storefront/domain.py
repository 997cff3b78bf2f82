"""Storefront bounded context — catalogue, cart, checkout and order lifecycle.

Handles the product catalogue with its stock counters, per-customer carts,
the checkout flow that turns a cart into an order, the order state machine
and the return/exchange workflow attached to delivered orders.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
