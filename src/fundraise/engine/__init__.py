"""Engine subpackage - tier resolution, margin split, ledger and totals."""
from .pricing_engine import PricingEngine, split
from .tier_resolver import resolve
from .catalog import Catalog
from .ledger import VolumeLedger, OrderLog, OrderConsolidator, consolidate
from .aggregator import aggregate
from .models import Product, Tier, LineItem, Split, Totals, OrderRecord, Quote
from .errors import ConfigurationError, InvalidOrderError, UpstreamPersistenceError

__all__ = [
    'PricingEngine', 'split', 'resolve', 'Catalog',
    'VolumeLedger', 'OrderLog', 'OrderConsolidator', 'consolidate', 'aggregate',
    'Product', 'Tier', 'LineItem', 'Split', 'Totals', 'OrderRecord', 'Quote',
    'ConfigurationError', 'InvalidOrderError', 'UpstreamPersistenceError',
]
