"""
Exceptions raised by the margin engine and its collaborators.
"""
from typing import Optional


class FundraiseError(Exception):
    """Base class for every engine error."""


class ConfigurationError(FundraiseError):
    """The catalog cannot be used: bad tiers or unreadable files. Fatal at load time."""


class InvalidOrderError(FundraiseError):
    """An order was rejected before touching the ledger. Fix and resubmit."""


class UpstreamPersistenceError(FundraiseError):
    """The order recorder rejected the order or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail
