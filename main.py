from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pymongo.errors import PyMongoError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api_docs import documentation, render_html
from app_logger import get_logger
from cart import CartStore, InMemoryCartStore, MongoCartStore
from database import db
from desk import OrderDesk
from errors import StoreError, Unauthorized, Unavailable
from order_client import OrderClient, OrderSnapshot
from schemas import DateFilter, InvoiceRequest, ReorderRequest, Scope, SortDirection, SortKey, StatusFilter, ViewConfig
from settings import settings

logger = get_logger("api")

app = FastAPI(title="Storefront Orders Dashboard API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

MAX_CACHED_SNAPSHOTS = 1000

_memory_carts = InMemoryCartStore()
# Last good snapshot per (token, scope), served when the order API is down
_snapshots: Dict[Tuple[str, str], OrderSnapshot] = {}


def _remember(key: Tuple[str, str], snapshot: OrderSnapshot) -> None:
    _snapshots.pop(key, None)
    _snapshots[key] = snapshot
    while len(_snapshots) > MAX_CACHED_SNAPSHOTS:
        _snapshots.pop(next(iter(_snapshots)))


def _strip_bearer(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    if value.lower().startswith("bearer "):
        value = value[7:].strip()
    return value or None


def get_token(
    authorization: Optional[str] = Header(None),
    token: Optional[str] = Header(None),
) -> Optional[str]:
    return _strip_bearer(authorization) or _strip_bearer(token)


def get_client(token: Optional[str] = Depends(get_token)) -> OrderClient:
    return OrderClient(settings.order_api_base_url, token, timeout=settings.request_timeout)


def get_cart_store() -> CartStore:
    if db is not None:
        return MongoCartStore(db["cart"])
    return _memory_carts


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    where = ".".join(str(p) for p in first.get("loc", ()))
    message = f"{where}: {first.get('msg', 'invalid request')}" if where else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": "validation_error", "message": message},
    )


async def load_desk(client: OrderClient, scope: Scope) -> Tuple[OrderDesk, bool]:
    """Refresh a desk; on failure fall back to the last good snapshot if any."""
    desk = OrderDesk(client, scope, settings.invoice_prefix)
    result = await desk.refresh()
    key = (client.token or "", scope)
    if result.ok:
        _remember(key, desk.snapshot)
        return desk, False

    previous = _snapshots.get(key)
    if previous is None or isinstance(result.error, Unauthorized):
        raise result.error
    logger.warning("Serving cached %s orders after failure: %s", scope, result.error.message)
    desk.snapshot = previous
    return desk, True


async def cart_owner(client: OrderClient) -> str:
    profile = await client.fetch_profile()
    owner = profile.get("_id") or profile.get("id") or profile.get("email")
    if not owner:
        raise Unavailable("Profile has no identifier")
    return str(owner)


@app.get("/")
def read_root():
    return {"message": "Storefront dashboard backend is running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "order_api": settings.order_api_base_url,
        "database": "❌ Not Available",
        "database_url": "✅ Set" if settings.database_url else "❌ Not Set",
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        if db is not None:
            response["database"] = "✅ Available"
            response["database_name"] = db.name
            response["connection_status"] = "Connected"
            try:
                collections = db.list_collection_names()
                response["collections"] = collections[:10]
                response["database"] = "✅ Connected & Working"
            except PyMongoError as e:
                response["database"] = f"⚠️  Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "⚠️  Not configured, using in-memory carts"
    except Exception as e:
        logger.exception("Database check failed")
        response["database"] = f"❌ Error: {str(e)[:50]}"
    return response


# Dashboard
@app.get("/api/dashboard/orders")
async def list_orders(
    scope: Scope = "mine",
    search: str = "",
    status: StatusFilter = "all",
    date: DateFilter = "all",
    sort: SortKey = "date",
    direction: SortDirection = "desc",
    selected: List[str] = Query([]),
    client: OrderClient = Depends(get_client),
):
    config = ViewConfig(
        search_term=search,
        status_filter=status,
        date_filter=date,
        sort_key=sort,
        sort_direction=direction,
    )
    desk, stale = await load_desk(client, scope)
    desk.select(selected)
    rows = desk.view(config)
    return {
        "success": True,
        "orders": [o.model_dump(mode="json") for o in rows],
        "stats": desk.stats(config).model_dump(),
        "selected": desk.selection.ids,
        "stale": stale,
        "fetched_at": desk.snapshot.fetched_at.isoformat(),
    }


@app.post("/api/dashboard/invoice")
async def create_invoice(payload: InvoiceRequest, client: OrderClient = Depends(get_client)):
    if not payload.order_ids:
        raise HTTPException(status_code=400, detail="No orders selected")
    desk, stale = await load_desk(client, payload.scope)
    desk.select(payload.order_ids)
    invoice = desk.invoice()
    logger.info("Generated %s for %d orders", invoice.invoice_number, len(invoice.orders))
    return {"success": True, "invoice": invoice.model_dump(mode="json"), "stale": stale}


# Cart
@app.post("/api/dashboard/reorder")
async def reorder(
    payload: ReorderRequest,
    client: OrderClient = Depends(get_client),
    store: CartStore = Depends(get_cart_store),
):
    owner = await cart_owner(client)
    desk, _ = await load_desk(client, "mine")
    try:
        report = desk.reorder(payload.order_id, store, owner)
    except PyMongoError as e:
        logger.exception("Failed to add order %s to cart", payload.order_id)
        raise Unavailable("Failed to add items to cart", cause=e) from e
    return {"success": True, "message": report.message, "report": report.model_dump()}


@app.get("/api/cart")
async def get_cart(client: OrderClient = Depends(get_client), store: CartStore = Depends(get_cart_store)):
    owner = await cart_owner(client)
    try:
        items = store.get(owner)
    except PyMongoError as e:
        logger.exception("Failed to read cart of %s", owner)
        raise Unavailable("Failed to load cart", cause=e) from e
    return {"success": True, "cart": [i.model_dump() for i in items]}


# Documentation
@app.get("/api/docs")
def api_docs(request: Request) -> Dict[str, Any]:
    return {"success": True, "documentation": documentation(str(request.base_url).rstrip("/"))}


@app.get("/api/docs/html", response_class=HTMLResponse)
def api_docs_html(request: Request):
    return HTMLResponse(render_html(documentation(str(request.base_url).rstrip("/"))))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
