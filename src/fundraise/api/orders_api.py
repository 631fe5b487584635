"""
Orders API - forwards an order to the external record store.

Responses: {"ok": true, "id": ...} on success; otherwise {"ok": false,
"error": ...} with 400 for a bad payload, 502 when the store fails and
500 for anything unexpected.
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..engine.errors import InvalidOrderError, UpstreamPersistenceError
from ..services.fundraiser_service import FundraiserSession
from .schemas import OrderIn
from .state import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orders"])


@router.post("/order")
def submit_order(order: OrderIn, session: FundraiserSession = Depends(get_session)):
    """Validate an order and store it upstream. The ledger is not touched."""
    try:
        record_id = session.submit_order(
            buyer=order.buyer,
            group=order.group,
            items=[item.to_line_item() for item in order.items],
            email=order.email,
            total=order.total,
        )
        return {"ok": True, "id": record_id}
    except InvalidOrderError as e:
        return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid payload", "detail": str(e)})
    except UpstreamPersistenceError as e:
        return JSONResponse(status_code=502, content={"ok": False, "error": str(e), "detail": e.detail})
    except Exception:
        logger.exception("Unexpected error while submitting order")
        return JSONResponse(status_code=500, content={"ok": False, "error": "Server error"})


@router.api_route("/order", methods=["GET", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def order_method_not_allowed(request: Request):
    return JSONResponse(
        status_code=405,
        content={"ok": False, "error": "Method Not Allowed"},
        headers={"Allow": "POST"},
    )
