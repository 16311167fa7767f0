"""Catalog port: the single read the ordering context needs from products."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductSnapshot:
    """Product details as seen at the moment an item is added to a cart."""

    product_id: str
    name: str
    price: float
    thumbnail: str = ""
    is_active: bool = True


class ProductCatalog(ABC):
    @abstractmethod
    def resolve(self, product_id: str) -> ProductSnapshot | None:
        """Return the current snapshot for ``product_id``, or None if unknown."""
