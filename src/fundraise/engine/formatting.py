"""Display helpers (fr-BE euro convention)."""

THOUSANDS_SEP = "\u202f"
CURRENCY_SEP = "\u00a0"


def format_euro(amount: float) -> str:
    """Format an amount as `1 234,50 €`."""
    sign = "-" if amount < 0 else ""
    integer, decimals = f"{abs(amount):,.2f}".split(".")
    return f"{sign}{integer.replace(',', THOUSANDS_SEP)},{decimals}{CURRENCY_SEP}€"


def format_percent(fraction: float) -> str:
    """Format a 0..1 fraction as a rounded whole percent."""
    return f"{round(fraction * 100)}%"
