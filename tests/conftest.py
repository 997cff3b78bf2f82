import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain is initialized."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Create and persist a product; returns the stored aggregate."""
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _make(name="Voyager Cabin Trolley", price=1000.0, sale_price=None, stock=5, category="trolley-luggage", **kw):
        product = Product.create(
            name=name,
            description=kw.pop("description", f"{name} description"),
            price=price,
            sale_price=sale_price,
            category=category,
            stock=stock,
            images=kw.pop("images", [f"https://cdn.example.com/{name.lower().replace(' ', '-')}.jpg"]),
            **kw,
        )
        current_domain.repository_for(Product).add(product)
        return current_domain.repository_for(Product).get(product.id)

    return _make


@pytest.fixture()
def stock_of():
    """Read a product's current stock from the repository."""
    from protean import current_domain

    from storefront.catalogue.product import Product

    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).stock

    return _stock
