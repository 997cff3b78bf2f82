"""Admin read views over orders: dashboard analytics and the returns queue."""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.order.order import (
    CANONICAL_STATUSES,
    Order,
    OrderStatus,
    PaymentStatus,
    RequestStatus,
)
from storefront.order.views import return_request_row

DEFAULT_RETURNS_LIMIT = 300
MAX_RETURNS_LIMIT = 1000


def paid_revenue(orders):
    """Sum of totals over orders whose payment was captured."""
    return sum(o.total_amount or 0.0 for o in orders if o.payment_status == PaymentStatus.PAID.value)


def order_analytics(now=None):
    now = now or datetime.now(UTC)
    orders = current_domain.repository_for(Order).all_orders()

    status_counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        status_counts[order.status] = status_counts.get(order.status, 0) + 1

    # Months of the current calendar year that have orders, ascending
    buckets = {}
    for order in orders:
        if order.created_at is None or order.created_at.year != now.year:
            continue
        bucket = buckets.setdefault(order.created_at.month, {"count": 0, "revenue": 0.0})
        bucket["count"] += 1
        bucket["revenue"] += order.total_amount or 0.0
    monthly = [{"month": month, **buckets[month]} for month in sorted(buckets)]

    requests = [r for o in orders for r in o.return_exchange_requests]

    analytics = {
        "totalOrders": len(orders),
        "totalRevenue": paid_revenue(orders),
        "monthlyOrders": monthly,
        "totalReturnRequests": len(requests),
        "pendingReturnRequests": sum(1 for r in requests if r.status == RequestStatus.REQUESTED.value),
    }
    for status in CANONICAL_STATUSES:
        analytics[f"{status.value.lower()}Orders"] = status_counts[status.value]
    return analytics


def returns_limit(limit=None):
    """Number of orders the returns queue reads: default when unset or < 1, capped at the maximum."""
    if limit is None or limit < 1:
        return DEFAULT_RETURNS_LIMIT
    return min(limit, MAX_RETURNS_LIMIT)


def return_requests(limit=None):
    """Flatten the requests of the `limit` most recent orders that have any.

    One row per request, newest request first.
    """
    limit = returns_limit(limit)

    orders = current_domain.repository_for(Order).with_return_requests()[:limit]
    rows = [(r, return_request_row(o, r)) for o in orders for r in o.return_exchange_requests]
    rows.sort(key=lambda pair: pair[0].created_at or datetime.min.replace(tzinfo=UTC), reverse=True)
    return [row for _, row in rows]
