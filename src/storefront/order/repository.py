"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.utils.query import fetch_all


@storefront.repository(part_of=Order)
class OrderRepository:
    def all_orders(self) -> list[Order]:
        """Every order, newest first."""
        return fetch_all(self._dao.query.order_by("-created_at"))

    def for_customer(self, customer_id) -> list[Order]:
        return fetch_all(self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at"))

    def paginate(self, status=None, page=1, limit=20):
        """One page of orders, newest first, optionally filtered by status.

        Returns a tuple of (orders on the page, total matching orders).
        """
        queryset = self._dao.query
        if status:
            queryset = queryset.filter(status=status)
        result = queryset.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.items, result.total

    def with_return_requests(self) -> list[Order]:
        return fetch_all(self._dao.query.filter(has_return_requests=True).order_by("-created_at"))

    def find_by_return_request(self, request_id) -> Order | None:
        for order in self.with_return_requests():
            if any(str(r.id) == str(request_id) for r in order.return_exchange_requests):
                return order
        return None
