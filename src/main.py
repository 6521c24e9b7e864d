"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.marketplace import get_marketplace
from src.sm_common.errors import AppError
from src.sm_common.response import error_response
from src.sm_gateway.api.router import router as auth_router
from src.sm_gateway.middleware.request_log import RequestLogMiddleware
from src.sm_listing.api.router import router as listing_router
from src.sm_messaging.api.router import router as messaging_router
from src.sm_payment.api.router import router as payment_router
from src.sm_realtime.api.router import router as realtime_router
from src.sm_stats.api.router import router as stats_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the marketplace. Shutdown: drop unfired settlements."""
    market = get_marketplace()
    logger.info(
        "%s started (payment policy: %s)", settings.APP_NAME, market.engine.policy.name
    )
    yield
    await market.scheduler.shutdown()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


app.include_router(auth_router, prefix="/api/v1")
app.include_router(listing_router, prefix="/api/v1")
app.include_router(payment_router, prefix="/api/v1")
app.include_router(messaging_router, prefix="/api/v1")
app.include_router(stats_router, prefix="/api/v1")
app.include_router(realtime_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
