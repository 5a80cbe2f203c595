from decimal import Decimal

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        # Clear carts, orders and stored events between tests
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def stock(catalog):
    """Register a product: ``stock("prod-001", 5, price="19.99")``."""

    def _stock(product_id, quantity, price="10.00", name=None):
        return catalog.add_product(
            product_id=product_id,
            name=name or f"Product {product_id}",
            unit_price=Decimal(price),
            stock_quantity=quantity,
        )

    return _stock


@pytest.fixture(autouse=True)
def inline_notifications(monkeypatch):
    """Send order confirmations on the test thread so assertions see them."""

    def _run_now(job, *args):
        job(*args)

    monkeypatch.setattr("ordering.checkout.coordinator.send_in_background", _run_now)
