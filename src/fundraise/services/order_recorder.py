"""
Order Recorder - forwards validated orders to the external record store.

The engine never retries on the recorder's behalf; a failure surfaces as
UpstreamPersistenceError with the upstream status and body attached.
"""
import json
import logging
from typing import Optional
from urllib.parse import quote

import requests

from ..config.settings import Settings
from ..engine.errors import UpstreamPersistenceError
from ..engine.models import LineItem

logger = logging.getLogger(__name__)

AIRTABLE_API = "https://api.airtable.com/v0"


class OrderRecorder:
    """Interface of a persistence collaborator."""

    def record(self, buyer: str, group: str, items: list[LineItem],
               email: str = "", total: float = 0.0) -> Optional[str]:
        """Store an order and return the stored record id."""
        raise NotImplementedError


class AirtableOrderRecorder(OrderRecorder):
    """Stores one Airtable row per order; the items are kept as a JSON string."""

    def __init__(self, base_id: str, table: str, token: str, timeout: float = 10.0):
        self.base_id = base_id
        self.table = table
        self.token = token
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{AIRTABLE_API}/{self.base_id}/{quote(self.table, safe='')}"

    def record(self, buyer: str, group: str, items: list[LineItem],
               email: str = "", total: float = 0.0) -> Optional[str]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json"
        }
        payload = {
            "records": [{
                "fields": {
                    "buyer": buyer,
                    "email": email or "",
                    "group": group,
                    "items": json.dumps([item.to_dict() for item in items]),
                    "total": float(total or 0),
                }
            }]
        }

        try:
            response = requests.post(self.url, headers=headers, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Airtable unreachable: {e}")
            raise UpstreamPersistenceError("Airtable unreachable", detail=str(e)) from e

        if not response.ok:
            logger.error(f"Airtable error {response.status_code}: {response.text}")
            raise UpstreamPersistenceError(
                "Airtable error", status_code=response.status_code, detail=response.text
            )

        try:
            records = response.json().get("records") or [{}]
        except ValueError:
            logger.error(f"Airtable returned an unreadable body ({response.status_code}): {response.text}")
            raise UpstreamPersistenceError(
                "Airtable error", status_code=response.status_code, detail=response.text
            )
        record_id = records[0].get("id")
        logger.info(f"Order for {buyer} stored in Airtable as {record_id}")
        return record_id


def build_recorder(settings: Settings) -> Optional[OrderRecorder]:
    """Airtable recorder when credentials are configured, else None."""
    if not settings.airtable_enabled:
        logger.info("Airtable not configured - orders are kept in memory only")
        return None
    return AirtableOrderRecorder(
        base_id=settings.airtable_base_id,
        table=settings.airtable_table_orders,
        token=settings.airtable_token,
        timeout=settings.airtable_timeout,
    )
