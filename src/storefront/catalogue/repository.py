"""Repository for the Product aggregate with catalogue queries."""

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.query import fetch_all

_SORT_KEYS = {
    "price-low": (lambda p: p.price, False),
    "price-high": (lambda p: p.price, True),
    "rating": (lambda p: p.rating or 0.0, True),
}


@storefront.repository(part_of=Product)
class ProductRepository:
    def all_products(self) -> list[Product]:
        return fetch_all(self._dao.query.order_by("-created_at"))

    def find_by_name_in_category(self, name: str, category: str) -> Product | None:
        """Case-insensitive exact name match within one category."""
        wanted = (name or "").strip().lower()
        candidates = fetch_all(self._dao.query.filter(category=category))
        return next((p for p in candidates if p.name.strip().lower() == wanted), None)

    def search(self, category=None, search=None, sort=None, page=1, limit=12):
        """Filter, sort and paginate the catalogue.

        Returns a tuple of (products on the page, total matching products).
        """
        products = self.all_products()

        if category and category != "all":
            products = [p for p in products if p.category == category]

        if search:
            needle = search.lower()
            products = [
                p for p in products if needle in p.name.lower() or needle in (p.description or "").lower()
            ]

        if sort in _SORT_KEYS:
            key, reverse = _SORT_KEYS[sort]
            products = sorted(products, key=key, reverse=reverse)

        total = len(products)
        start = (page - 1) * limit
        return products[start : start + limit], total

    def featured(self, limit=8) -> list[Product]:
        products = [p for p in self.all_products() if p.featured and p.stock > 0]
        return products[:limit]
