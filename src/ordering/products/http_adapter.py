"""Catalog adapter backed by a product service over HTTP.

Expects ``GET {base_url}/products/{id}`` to return a JSON document with
``name``, ``price``, ``thumbnail`` and ``isActive``.
"""

import requests
import structlog

from ordering.products.port import ProductCatalog, ProductSnapshot
from shared.errors import BadRequest

logger = structlog.get_logger(__name__)


class HttpCatalog(ProductCatalog):
    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def resolve(self, product_id: str) -> ProductSnapshot | None:
        url = f"{self.base_url}/products/{product_id}"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Catalog lookup failed", product_id=product_id, error=str(exc))
            raise BadRequest("Product catalog is unavailable", field="product_id") from exc

        if response.status_code == 404:
            return None
        if not response.ok:
            logger.error("Catalog lookup failed", product_id=product_id, status=response.status_code)
            raise BadRequest("Product catalog is unavailable", field="product_id")

        data = response.json()
        return ProductSnapshot(
            product_id=str(data.get("id", product_id)),
            name=data["name"],
            price=float(data["price"]),
            thumbnail=data.get("thumbnail") or "",
            is_active=bool(data.get("isActive", data.get("is_active", True))),
        )
