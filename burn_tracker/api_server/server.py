"""
FastAPI server: read-only API over stored burn events.

GET /latest, GET /all (paginated), GET /history (date-filtered), GET /health.
Reads from the store only; never writes. Errors are returned as {"error": ...}.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from burn_tracker.api_server.formatting import format_burn_event, parse_iso
from burn_tracker.burn_logging import get_logger
from burn_tracker.config.settings import TrackerSettings, get_settings
from burn_tracker.core.exceptions import StorageError
from burn_tracker.database.models import to_iso
from burn_tracker.database.store import BurnStore, get_store

logger = get_logger(__name__)

MAX_LIMIT = 1000
DEFAULT_PAGE_LIMIT = 50
DEFAULT_HISTORY_LIMIT = 100


# -----------------------------------------------------------------------------
# Response models
# -----------------------------------------------------------------------------


class BurnEventResponse(BaseModel):
    signature: str
    timestamp: str | None = None
    action: str = "Burn"
    from_address: str | None = None
    to_address: str | None = None
    amount: str | None = Field(None, description="Burned amount in base units")
    amountFormatted: str = Field("0", description="Amount scaled by token decimals")
    token: str
    scrape_time: str | None = None


class PageResponse(BaseModel):
    count: int
    total: int
    page: int
    limit: int
    totalPages: int
    data: list[BurnEventResponse] = Field(default_factory=list)


class HistoryResponse(BaseModel):
    count: int
    data: list[BurnEventResponse] = Field(default_factory=list)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


# -----------------------------------------------------------------------------
# Helpers and dependencies
# -----------------------------------------------------------------------------


def _parse_limit(raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not (1 <= value <= MAX_LIMIT):
        raise ApiError(400, f"Invalid limit parameter. Must be between 1 and {MAX_LIMIT}.")
    return value


def _parse_page(raw: str | None) -> int:
    try:
        value = int(raw) if raw not in (None, "") else 1
    except ValueError:
        value = 0
    if value < 1:
        raise ApiError(400, "Invalid page parameter. Must be >= 1.")
    return value


def _parse_date(raw: str, name: str) -> datetime:
    try:
        return parse_iso(raw)
    except ValueError:
        raise ApiError(400, f"Invalid {name} date format. Use YYYY-MM-DD.") from None


def _end_of_day_bound(end: datetime) -> str | None:
    """Exclusive upper bound covering the whole end day; None (unbounded) at datetime.max."""
    try:
        return to_iso(end + timedelta(days=1))
    except OverflowError:
        return None


def get_store_dep(request: Request) -> BurnStore:
    """Dependency: app-scoped store, created on first use from settings."""
    store = request.app.state.store
    if store is None:
        store = get_store(request.app.state.settings.database_url)
        request.app.state.store = store
    return store


def get_settings_dep(request: Request) -> TrackerSettings:
    return request.app.state.settings


# -----------------------------------------------------------------------------
# App
# -----------------------------------------------------------------------------


def create_app(
    store: BurnStore | None = None,
    settings: TrackerSettings | None = None,
) -> FastAPI:
    app = FastAPI(title="Burn Tracker API", version="1.0.0")
    app.state.store = store
    app.state.settings = settings or get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("api_database_error", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Database error"})

    def _format(event: dict[str, Any], settings: TrackerSettings) -> dict[str, Any]:
        return format_burn_event(
            event, decimals=settings.token_decimals, default_token=settings.token_mint
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/latest", response_model=BurnEventResponse)
    def latest(
        store: BurnStore = Depends(get_store_dep),
        settings: TrackerSettings = Depends(get_settings_dep),
    ) -> Any:
        event = store.latest_burn_event()
        if event is None:
            raise ApiError(404, "No burn events found")
        return _format(event, settings)

    @app.get("/all", response_model=PageResponse)
    def all_events(
        page: str | None = None,
        limit: str | None = None,
        store: BurnStore = Depends(get_store_dep),
        settings: TrackerSettings = Depends(get_settings_dep),
    ) -> Any:
        page_num = _parse_page(page)
        limit_num = _parse_limit(limit, DEFAULT_PAGE_LIMIT)
        total = store.count_burn_events()
        rows = store.list_burn_events(offset=(page_num - 1) * limit_num, limit=limit_num)
        data = [_format(r, settings) for r in rows]
        return {
            "count": len(data),
            "total": total,
            "page": page_num,
            "limit": limit_num,
            "totalPages": -(-total // limit_num),
            "data": data,
        }

    @app.get("/history", response_model=HistoryResponse)
    def history(
        limit: str | None = None,
        start: str | None = None,
        end: str | None = None,
        store: BurnStore = Depends(get_store_dep),
        settings: TrackerSettings = Depends(get_settings_dep),
    ) -> Any:
        limit_num = _parse_limit(limit, DEFAULT_HISTORY_LIMIT)
        start_iso = to_iso(_parse_date(start, "start")) if start else None
        end_iso = _end_of_day_bound(_parse_date(end, "end")) if end else None
        rows = store.burn_events_between(start=start_iso, end=end_iso, limit=limit_num)
        data = [_format(r, settings) for r in rows]
        return {"count": len(data), "data": data}

    return app
