import pytest
from protean.integrations.pytest import DomainFixture

from ordering.accounts import reset_account_directory, set_account_directory
from ordering.accounts.memory_adapter import InMemoryAccountDirectory
from ordering.products import reset_catalog, set_catalog
from ordering.products.memory_adapter import InMemoryCatalog


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

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def catalog():
    """Catalog stocked with a few products; replaced per test."""
    catalog = InMemoryCatalog()
    catalog.stock("prod-mug", "Coffee Mug", 12.50, thumbnail="https://cdn.test/mug.png")
    catalog.stock("prod-tee", "T-Shirt", 25.00)
    catalog.stock("prod-lamp", "Desk Lamp", 45.00)
    catalog.stock("prod-retired", "Retired Widget", 9.99, is_active=False)
    set_catalog(catalog)
    yield catalog
    reset_catalog()


@pytest.fixture(autouse=True)
def accounts():
    directory = InMemoryAccountDirectory()
    set_account_directory(directory)
    yield directory
    reset_account_directory()


@pytest.fixture()
def shipping_address():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "address": "12 Analytical Row",
        "city": "London",
        "state": "Greater London",
        "zip_code": "N1 9GU",
        "country": "GB",
    }
