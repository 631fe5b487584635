import logging

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config.logging_config import setup_logging
from ..engine.errors import InvalidOrderError, UpstreamPersistenceError
from ..services.fundraiser_service import FundraiserSession
from .orders_api import router as orders_router
from .schemas import CartItemIn, GoalUpdate, PaperOrderIn, QuantityDelta
from . import state
from .state import get_session

setup_logging(state.settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fundraise API",
    description="Progressive margin engine for community fundraising sales",
    version="1.0.0"
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orders_router)

logger.info(f"Serving {len(state.catalog)} products for {state.session.group_name}")


@app.exception_handler(RequestValidationError)
async def invalid_payload(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"ok": False, "error": "Invalid payload", "detail": jsonable_encoder(exc.errors())})


@app.exception_handler(InvalidOrderError)
async def invalid_order(request: Request, exc: InvalidOrderError):
    return JSONResponse(status_code=400, content={"ok": False, "error": str(exc)})


@app.exception_handler(UpstreamPersistenceError)
async def upstream_failure(request: Request, exc: UpstreamPersistenceError):
    content = {"ok": False, "error": str(exc), "detail": exc.detail}
    record = getattr(exc, "order_record", None)
    if record is not None:
        content["order"] = record.to_dict()
    return JSONResponse(status_code=502, content=content)


@app.exception_handler(Exception)
async def server_error(request: Request, exc: Exception):
    logger.exception(f"Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"ok": False, "error": "Server error"})


@app.get("/")
async def root():
    return {"status": "online", "message": "Fundraise API Active"}


@app.get("/catalog")
async def get_catalog(session: FundraiserSession = Depends(get_session)):
    return session.pricing.catalog_view(session.ledger.snapshot())


@app.get("/cart")
async def get_cart(session: FundraiserSession = Depends(get_session)):
    return session.cart_quote().to_dict()


@app.post("/cart/items")
async def add_cart_item(item: CartItemIn, session: FundraiserSession = Depends(get_session)):
    session.add_to_cart(item.product_id, item.quantity)
    return session.cart_quote().to_dict()


@app.patch("/cart/items/{product_id}")
async def update_cart_item(product_id: str, change: QuantityDelta, session: FundraiserSession = Depends(get_session)):
    session.update_qty(product_id, change.delta)
    return session.cart_quote().to_dict()


@app.post("/checkout")
async def checkout(session: FundraiserSession = Depends(get_session)):
    quote = session.checkout()
    return {"ok": True, "quote": quote.to_dict(), "totals": session.totals().to_dict()}


@app.get("/totals")
async def get_totals(session: FundraiserSession = Depends(get_session)):
    return session.totals().to_dict()


@app.put("/goal")
async def set_goal(update: GoalUpdate, session: FundraiserSession = Depends(get_session)):
    session.set_goal(update.goal)
    return session.totals().to_dict()


@app.get("/volumes")
async def get_volumes(session: FundraiserSession = Depends(get_session)):
    return session.volumes()


@app.get("/orders/paper")
async def list_paper_orders(session: FundraiserSession = Depends(get_session)):
    return [record.to_dict() for record in session.order_log]


@app.post("/orders/paper")
def encode_paper_order(order: PaperOrderIn, session: FundraiserSession = Depends(get_session)):
    record = session.encode_paper_order(
        buyer=order.buyer,
        items=[item.to_line_item() for item in order.items],
        email=order.email,
    )
    return {"ok": True, "order": record.to_dict()}


@app.get("/system/status")
async def get_status(session: FundraiserSession = Depends(get_session)):
    return {
        "engine_active": True,
        "products": len(session.catalog),
        "paper_orders": len(session.order_log),
        "recorder": type(session.recorder).__name__ if session.recorder else None,
    }
