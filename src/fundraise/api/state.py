"""
Process-wide fundraiser session shared by the API routers.
"""
from ..config.settings import get_settings
from ..data.build_catalog import load_catalog
from ..services.fundraiser_service import FundraiserSession
from ..services.order_recorder import build_recorder

settings = get_settings()
catalog = load_catalog(settings)
session = FundraiserSession.from_settings(catalog, settings, recorder=build_recorder(settings))


def get_session() -> FundraiserSession:
    """FastAPI dependency returning the live session."""
    return session
