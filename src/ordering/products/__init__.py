"""Catalog wiring.

The application uses a single module-level catalog instance. Tests
install an ``InMemoryCatalog`` with ``set_catalog``.
"""

from ordering.products.port import ProductCatalog

_catalog: ProductCatalog | None = None


def get_catalog() -> ProductCatalog:
    """Return the configured catalog.

    Falls back to ``HttpCatalog`` when ``STOREFRONT_CATALOG_BASE_URL`` is
    set, and to an empty in-memory catalog otherwise.
    """
    global _catalog
    if _catalog is None:
        from shared.settings import get_settings

        settings = get_settings()
        if settings.catalog_base_url:
            from ordering.products.http_adapter import HttpCatalog

            _catalog = HttpCatalog(settings.catalog_base_url, timeout=settings.provider_timeout_seconds)
        else:
            from ordering.products.memory_adapter import InMemoryCatalog

            _catalog = InMemoryCatalog()
    return _catalog


def set_catalog(catalog: ProductCatalog) -> None:
    global _catalog
    _catalog = catalog


def reset_catalog() -> None:
    global _catalog
    _catalog = None
