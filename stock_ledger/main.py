"""
Stock Ledger Service: FastAPI application.

This is the entry point for the application.
All routers are registered here.
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stock_ledger.config import get_settings
from stock_ledger.logging_config import setup_logging
from stock_ledger.api.health import router as health_router
from stock_ledger.api.stock import router as stock_router
from stock_ledger.api.shipments import router as shipments_router

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    from stock_ledger.models import Base
    from stock_ledger.models.base import engine

    setup_logging("web")
    Base.metadata.create_all(bind=engine)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Store stock ledger for construction-site material procurement",
    lifespan=lifespan,
)


@app.middleware("http")
async def request_timeout(request: Request, call_next):
    """
    Give up waiting after REQUEST_TIMEOUT_SECONDS.

    The operation itself is not cancelled and may still commit,
    so the client is told to re-check balances before retrying.
    """
    try:
        return await asyncio.wait_for(
            call_next(request), timeout=settings.REQUEST_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError:
        logger.error(
            "Request %s %s timed out after %ss",
            request.method, request.url.path, settings.REQUEST_TIMEOUT_SECONDS,
        )
        return JSONResponse(
            status_code=504,
            content={
                "error": "Request timed out. The operation may still have "
                         "completed; re-check stock before retrying.",
            },
        )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": _describe(exc.errors())})


def _describe(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts) or "Invalid request"


# Register routers
app.include_router(health_router)
app.include_router(stock_router)
app.include_router(shipments_router)
