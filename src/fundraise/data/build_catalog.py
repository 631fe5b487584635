"""
Catalog Builder - loads products and volume tiers from CSV.

- products.csv: id, name, description, cost, price, image
- tiers.csv: product_id, min, platform, group

Any problem that would make pricing impossible is raised as a
ConfigurationError at load time.
"""
import hashlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from ..config.settings import get_settings, Settings
from ..engine.catalog import Catalog
from ..engine.errors import ConfigurationError
from ..engine.models import Product, Tier

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = ['id', 'name', 'cost', 'price']
TIER_COLUMNS = ['product_id', 'min', 'platform', 'group']


def get_file_hash(path: Path) -> str:
    """Get SHA256 hash of a file."""
    if not path.exists():
        return ""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()[:12]


def _read_csv(path: Path, required: list[str]) -> pd.DataFrame:
    if not path.exists():
        raise ConfigurationError(f"Catalog file not found: {path}")
    try:
        df = pd.read_csv(path, dtype=str).fillna('')
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to read {path}: {e}") from e

    df.columns = [c.strip() for c in df.columns]
    for col in df.columns:
        df[col] = df[col].astype(str).str.strip()

    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{path.name} is missing column(s): {', '.join(missing)}")
    return df


def _to_number(value: str, what: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Invalid number for {what}: {value!r}") from None


def _to_threshold(value: str, what: str) -> int:
    number = _to_number(value, what)
    if not number.is_integer():
        raise ConfigurationError(f"Tier threshold for {what} must be a whole number, got {value!r}")
    return int(number)


def products_from_frames(products_df: pd.DataFrame, tiers_df: pd.DataFrame) -> list[Product]:
    """Build Product records from the two catalog tables."""
    known_ids = set(products_df['id'])
    orphan_ids = sorted(set(tiers_df['product_id']) - known_ids)
    if orphan_ids:
        raise ConfigurationError(f"tiers.csv references unknown product(s): {', '.join(orphan_ids)}")

    products = []
    for _, row in products_df.iterrows():
        product_id = row['id']
        if not product_id:
            raise ConfigurationError("products.csv has a row without an id")

        product_tiers = tiers_df[tiers_df['product_id'] == product_id]
        tiers = tuple(
            Tier(
                min_volume=_to_threshold(t['min'], product_id),
                platform=_to_number(t['platform'], f"{product_id} platform margin"),
                group=_to_number(t['group'], f"{product_id} group margin"),
            )
            for _, t in product_tiers.iterrows()
        )

        products.append(Product(
            id=product_id,
            name=row['name'] or product_id,
            cost=_to_number(row['cost'], f"{product_id} cost"),
            price=_to_number(row['price'], f"{product_id} price"),
            tiers=tiers,
            description=row.get('description', ''),
            image=row.get('image', ''),
        ))
    return products


def load_catalog(settings: Optional[Settings] = None) -> Catalog:
    """Load and validate the catalog configured in settings."""
    settings = settings or get_settings()

    products_df = _read_csv(settings.products_csv, PRODUCT_COLUMNS)
    tiers_df = _read_csv(settings.tiers_csv, TIER_COLUMNS)

    catalog = Catalog(products_from_frames(products_df, tiers_df))
    logger.info(f"Catalog loaded: {len(catalog)} products from {settings.products_csv.name}")
    return catalog


def build_catalog_report(settings: Optional[Settings] = None, verbose: bool = True) -> dict:
    """
    Validate the catalog files and summarize them.

    Args:
        settings: Optional settings override
        verbose: Print progress messages

    Returns:
        Report dictionary with status, input file hashes, metrics and warnings
    """
    settings = settings or get_settings()

    report = {
        "timestamp": datetime.now().isoformat(),
        "status": "pending",
        "input_files": {
            "products": {"path": str(settings.products_csv), "hash": get_file_hash(settings.products_csv)},
            "tiers": {"path": str(settings.tiers_csv), "hash": get_file_hash(settings.tiers_csv)},
        },
        "metrics": {},
        "warnings": [],
        "errors": []
    }

    try:
        catalog = load_catalog(settings)
    except ConfigurationError as e:
        report["errors"].append(str(e))
        report["status"] = "failed"
        if verbose:
            print(f"ERROR: {e}")
        return report

    tier_counts = {}
    for product in catalog:
        tier_counts[product.id] = len(product.tiers)
        if product.price <= product.cost:
            report["warnings"].append(f"{product.id}: price does not exceed cost")
        for tier in product.inconsistent_tiers():
            report["warnings"].append(
                f"{product.id}: tier >= {tier.min_volume} splits {tier.total} "
                f"but only {product.margin_pool} is available"
            )
        if verbose:
            thresholds = ", ".join(str(t.min_volume) for t in product.tiers)
            print(f"SUCCESS: {product.id} ({product.name}) tiers at {thresholds}")

    report["metrics"]["product_count"] = len(catalog)
    report["metrics"]["tier_counts"] = tier_counts
    report["status"] = "success"

    if verbose:
        for warning in report["warnings"]:
            print(f"WARNING: {warning}")
        print(f"\nPROCESS COMPLETE: {len(catalog)} products validated.")

    return report


if __name__ == "__main__":
    build_catalog_report()
