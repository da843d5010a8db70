from collections.abc import Callable

from fastapi import APIRouter, Response, status
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from storefront.db.session import SessionLocal
from storefront.observability import log_event, metrics_store
from storefront.schemas.health import HealthResponse, ReadinessDependency, ReadinessResponse

REQUIRED_TABLES = ("orders", "notifications")

router = APIRouter(tags=["health"])


def _database_reachable() -> bool:
    with SessionLocal() as db:
        db.execute(text("SELECT 1"))
    return True


def _order_tables_present() -> bool:
    with SessionLocal() as db:
        existing = set(inspect(db.connection()).get_table_names())
    return all(table in existing for table in REQUIRED_TABLES)


READINESS_CHECKS: dict[str, Callable[[], bool]] = {
    "database": _database_reachable,
    "schema": _order_tables_present,
}


def _run_check(name: str, check: Callable[[], bool]) -> ReadinessDependency:
    try:
        healthy = check()
    except SQLAlchemyError as exc:
        metrics_store.increment("readiness_dependency_error_total")
        log_event(f"readiness_check_failed {name}:{type(exc).__name__}")
        healthy = False
    return ReadinessDependency(name=name, status="ok" if healthy else "error")


@router.get("/health", summary="Health check", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    summary="Readiness check",
    response_model=ReadinessResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ReadinessResponse}},
)
def readiness(response: Response) -> ReadinessResponse:
    dependencies = [_run_check(name, check) for name, check in READINESS_CHECKS.items()]
    if all(dep.status == "ok" for dep in dependencies):
        return ReadinessResponse(status="ok", dependencies=dependencies)

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return ReadinessResponse(status="degraded", dependencies=dependencies)
