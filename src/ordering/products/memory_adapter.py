"""In-memory catalog for development and tests."""

from ordering.products.port import ProductCatalog, ProductSnapshot


class InMemoryCatalog(ProductCatalog):
    def __init__(self):
        self._products: dict[str, ProductSnapshot] = {}

    def stock(self, product_id, name, price, thumbnail="", is_active=True) -> ProductSnapshot:
        """Register (or replace) a product."""
        snapshot = ProductSnapshot(
            product_id=str(product_id),
            name=name,
            price=float(price),
            thumbnail=thumbnail,
            is_active=is_active,
        )
        self._products[snapshot.product_id] = snapshot
        return snapshot

    def resolve(self, product_id: str) -> ProductSnapshot | None:
        return self._products.get(str(product_id))
