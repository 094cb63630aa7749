from __future__ import annotations

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from app.config.settings import settings
from app.exceptions import FailureKind, IntradayServiceError
from app.exchanges.alpha_vantage_adapter import AlphaVantageAdapter
from app.schemas.intraday import DailySummarySchema, ErrorSchema, ProblemDetailsSchema, RootSchema
from app.services.intraday_service import IntradayService

logger = logging.getLogger(__name__)
router = APIRouter()

USAGE_MESSAGE = "AlphaVantage intraday aggregator. Use /api/intraday/{symbol}"

_BAD_REQUEST_KINDS = {FailureKind.INPUT_VALIDATION, FailureKind.UPSTREAM_CLIENT}


def error_response(message: str, status_code: int = 400):
    return JSONResponse(ErrorSchema(error=message).model_dump(), status_code=status_code)


def problem_response(detail: str, status_code: int = 500):
    payload = ProblemDetailsSchema(status=status_code, detail=detail)
    return JSONResponse(payload.model_dump(), status_code=status_code, media_type="application/problem+json")


def get_intraday_service() -> IntradayService:
    adapter = AlphaVantageAdapter(
        base_url=settings.alphavantage_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    return IntradayService(adapter, settings.alphavantage_api_key)


async def _watch_disconnect(request: Request, cancel_event: asyncio.Event):
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected, cancelling upstream fetch", extra={"path": request.url.path})
            cancel_event.set()
            return
        await asyncio.sleep(settings.disconnect_poll_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name}...")
    if not settings.alphavantage_api_key:
        logger.warning("ALPHAVANTAGE_API_KEY is not configured; intraday requests will fail")
    yield
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        response = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers["x-request-id"] = request_id
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "status_code": response.status_code if response else None,
                    "latency_ms": latency_ms,
                },
            )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_: Request, exc: Exception):
        logger.error(f"Unhandled API exception: {exc}", exc_info=True)
        return problem_response("Unexpected server error")

    app.include_router(router)
    return app


@router.get("/", response_model=RootSchema)
def root():
    return RootSchema(message=USAGE_MESSAGE)


@router.get(
    "/api/intraday/{symbol}",
    response_model=list[DailySummarySchema],
    responses={400: {"model": ErrorSchema}, 500: {"model": ProblemDetailsSchema}},
)
async def intraday(symbol: str, request: Request, service: IntradayService = Depends(get_intraday_service)):
    if not symbol.strip():
        return error_response("Symbol is required.")

    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancel_event))
    try:
        return await service.get_daily_summary(symbol, cancel_event)
    except IntradayServiceError as exc:
        if exc.kind in _BAD_REQUEST_KINDS:
            return error_response(exc.failure.message)
        return problem_response(exc.failure.message)
    finally:
        cancel_event.set()
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass


api = create_app()
