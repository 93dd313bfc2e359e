import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.config import settings
from storefront.database import create_db_and_tables
from storefront.errors import (
    OrderErrorKind,
    STATUS_CODES,
    error_payload,
    internal_error_message,
)
from storefront.routes import admin_inventory, admin_orders, health, orders

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Run DB creation ONLY in local
    if settings.ENV == "local":
        create_db_and_tables()
    yield

app = FastAPI(title=f"{settings.STORE_NAME} Orders API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------- ERROR RESPONSES --------

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    code = getattr(exc, "code", None)
    if code is None and exc.status_code in STATUS_CODES:
        code = STATUS_CODES[exc.status_code].value

    body = error_payload(str(exc.detail), code)
    missing = getattr(exc, "missing_fields", None)
    if missing:
        body["missingFields"] = missing

    return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    message = "Invalid request: " + "; ".join(problems)
    return JSONResponse(
        error_payload(message, OrderErrorKind.INVALID_REQUEST.value),
        status_code=400,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        error_payload(internal_error_message(exc), OrderErrorKind.INTERNAL_ERROR.value),
        status_code=500,
    )


app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(admin_orders.router, prefix="/admin/orders", tags=["Admin Orders"])
app.include_router(admin_inventory.router, prefix="/admin/inventory", tags=["Admin Inventory"])
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/")
def root():
    return {
        "order_endpoints": [
            "/orders", "/orders/{order_number}"
        ],
        "admin_order_endpoints": [
            "/admin/orders", "/admin/orders/stats", "/admin/orders/{order_id}",
            "/admin/orders/{order_id}/status", "/admin/orders/{order_id}/payment-status",
            "/admin/orders/bulk-update"
        ],
        "admin_inventory_endpoints": [
            "/admin/inventory/low-stock"
        ],
        "health": [
            "/health/check"
        ]
    }
