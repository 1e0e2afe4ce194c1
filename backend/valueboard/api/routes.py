from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from valueboard.auth.firebase_auth import FirebaseUser, get_optional_user
from valueboard.core.config import get_settings
from valueboard.core.exceptions import AccessDeniedError, NotFoundError
from valueboard.repositories.base import CollectionDao
from valueboard.repositories.factory import create_dao
from valueboard.schemas.collections import Record
from valueboard.schemas.models import ChartSeries, CounterResponse
from valueboard.services.chart_service import ChartService
from valueboard.services.counter_service import CounterService

router = APIRouter()

SETUP_HINT = (
    "Collections are missing. Run `python -m migrations.runner migrate` to apply migrations."
)

# Lazy initialization to avoid Firebase connection at import time (breaks tests)
_dao: CollectionDao | None = None


def get_dao() -> CollectionDao:
    global _dao
    if _dao is None:
        _dao = create_dao(get_settings())
    return _dao


def get_chart_service(dao: CollectionDao = Depends(get_dao)) -> ChartService:
    return ChartService(dao)


def get_counter_service(dao: CollectionDao = Depends(get_dao)) -> CounterService:
    return CounterService(dao, get_settings().counter_profile)


def _translate(exc: Exception) -> HTTPException:
    if isinstance(exc, AccessDeniedError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=SETUP_HINT)


def _counter_response(record: Record) -> CounterResponse:
    return CounterResponse(id=record.id, value=record.get("value") or 0)


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/chart-series", response_model=ChartSeries)
def chart_series(
    service: ChartService = Depends(get_chart_service),
    user: Optional[FirebaseUser] = Depends(get_optional_user),
) -> ChartSeries:
    """Quarterly labels and values for the chart, oldest first."""
    try:
        return service.get_chart_series(user)
    except (NotFoundError, AccessDeniedError) as exc:
        raise _translate(exc) from exc


@router.get("/api/counter", response_model=CounterResponse)
def get_counter(
    service: CounterService = Depends(get_counter_service),
    user: Optional[FirebaseUser] = Depends(get_optional_user),
) -> CounterResponse:
    """Current counter value. Creates the counter if it is missing."""
    try:
        return _counter_response(service.get_or_create(user))
    except (NotFoundError, AccessDeniedError) as exc:
        raise _translate(exc) from exc


@router.post("/api/counter/increment", response_model=CounterResponse)
def increment_counter(
    service: CounterService = Depends(get_counter_service),
    user: Optional[FirebaseUser] = Depends(get_optional_user),
) -> CounterResponse:
    try:
        return _counter_response(service.increment(user))
    except (NotFoundError, AccessDeniedError) as exc:
        raise _translate(exc) from exc


@router.post("/api/counter/decrement", response_model=CounterResponse)
def decrement_counter(
    service: CounterService = Depends(get_counter_service),
    user: Optional[FirebaseUser] = Depends(get_optional_user),
) -> CounterResponse:
    try:
        return _counter_response(service.decrement(user))
    except (NotFoundError, AccessDeniedError) as exc:
        raise _translate(exc) from exc
