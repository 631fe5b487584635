"""
In-memory catalog of sellable products.
"""
import logging
from typing import Iterable, Iterator, Optional

from .errors import ConfigurationError
from .models import Product
from .tier_resolver import validate_tiers

logger = logging.getLogger(__name__)


class Catalog:
    """
    Read-only set of products keyed by id, in catalog order.

    Every product's tiers are validated on construction; a bad catalog
    raises ConfigurationError and never reaches the pricing code.
    """

    def __init__(self, products: Iterable[Product]):
        self._products: dict[str, Product] = {}
        for product in products:
            if product.id in self._products:
                raise ConfigurationError(f"Duplicate product id '{product.id}' in catalog")
            tiers = validate_tiers(product.id, product.tiers)
            if tiers != product.tiers:
                product = Product(
                    id=product.id,
                    name=product.name,
                    cost=product.cost,
                    price=product.price,
                    tiers=tiers,
                    description=product.description,
                    image=product.image,
                )
            if product.price <= product.cost:
                logger.warning(f"Product '{product.id}' has no margin to split (price {product.price} <= cost {product.cost})")
            for tier in product.inconsistent_tiers():
                logger.warning(
                    f"Product '{product.id}' tier >= {tier.min_volume} hands out {tier.total} "
                    f"but the margin pool is {product.margin_pool}"
                )
            self._products[product.id] = product

        if not self._products:
            raise ConfigurationError("Catalog is empty")

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products.values())

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: str) -> bool:
        return product_id in self._products

    def __getitem__(self, product_id: str) -> Product:
        return self._products[product_id]

    def get(self, product_id: str) -> Optional[Product]:
        return self._products.get(product_id)

    def ids(self) -> list[str]:
        return list(self._products)
