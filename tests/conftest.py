import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from fundraise.config.settings import Settings
from fundraise.data.build_catalog import load_catalog
from fundraise.services.fundraiser_service import FundraiserSession


@pytest.fixture(scope="session")
def settings():
    return Settings.load()


@pytest.fixture(scope="session")
def catalog(settings):
    """The packaged catalog: coffret, gourde, bougie."""
    return load_catalog(settings)


@pytest.fixture
def session(catalog):
    """A fresh fundraiser session with an empty ledger and no recorder."""
    return FundraiserSession(catalog, goal=1000.0, group_name="Scouts de Namur")
