"""
Centralized settings and path configuration for the fundraising engine.
"""
import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional


DEFAULT_MILESTONES = (
    (100, "Livraison gratuite"),
    (300, "50 stickers personnalisés offerts"),
    (500, "+0,20 € de marge bonus sur le prochain palier"),
)


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_data_dir() -> Path:
    """Directory holding the packaged catalog CSV files."""
    return Path(__file__).resolve().parent.parent / 'data'


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name)
    return Path(value) if value else default


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path

    # Catalog input files
    products_csv: Path
    tiers_csv: Path

    # Group context
    group_name: str = "Scouts de Namur"
    default_goal: float = 3000.0
    shop_base_url: str = "https://fundraise.app"

    # Order recording (Airtable)
    airtable_base_id: Optional[str] = None
    airtable_table_orders: Optional[str] = None
    airtable_token: Optional[str] = None
    airtable_timeout: float = 10.0

    log_level: str = "INFO"

    # Reward milestones: (total units, reward)
    milestones: tuple = field(default=DEFAULT_MILESTONES)

    @property
    def airtable_enabled(self) -> bool:
        """True when every Airtable credential is configured."""
        return bool(self.airtable_base_id and self.airtable_table_orders and self.airtable_token)

    @classmethod
    def load(cls, project_root: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and environment."""
        root = project_root or get_project_root()
        data_dir = get_data_dir()

        goal = os.environ.get('FUNDRAISE_GOAL')

        return cls(
            project_root=root,
            products_csv=_env_path('FUNDRAISE_PRODUCTS_CSV', data_dir / 'products.csv'),
            tiers_csv=_env_path('FUNDRAISE_TIERS_CSV', data_dir / 'tiers.csv'),
            group_name=os.environ.get('FUNDRAISE_GROUP_NAME', "Scouts de Namur"),
            default_goal=float(goal) if goal else 3000.0,
            shop_base_url=os.environ.get('FUNDRAISE_SHOP_URL', "https://fundraise.app"),
            airtable_base_id=os.environ.get('AIRTABLE_BASE_ID'),
            airtable_table_orders=os.environ.get('AIRTABLE_TABLE_ORDERS'),
            airtable_token=os.environ.get('AIRTABLE_TOKEN'),
            log_level=os.environ.get('FUNDRAISE_LOG_LEVEL', "INFO"),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings
