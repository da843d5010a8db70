import logging
import time
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import allowed_origins, ensure_secure_runtime_settings, settings
from storefront.db.migration_check import assert_db_is_up_to_date, maybe_create_schema
from storefront.db.session import engine
from storefront.observability import configure_logging, log_event, metrics_store, set_request_id
from storefront.routers.admin_notifications import router as admin_notifications_router
from storefront.routers.admin_orders import router as admin_orders_router
from storefront.routers.carts import router as carts_router
from storefront.routers.checkout import router as checkout_router
from storefront.routers.health import router as health_router
from storefront.routers.metrics import router as metrics_router
from storefront.services.store import seed_data

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    import storefront.models  # noqa: F401 (register all SQLAlchemy models)

    if not settings.testing:
        configure_logging(settings.log_level)
    ensure_secure_runtime_settings()
    if settings.require_migrations:
        assert_db_is_up_to_date(engine)
    else:
        maybe_create_schema(engine)
    if settings.app_mode == "demo":
        seed_data()
    log_event(f"storefront_started mode={settings.app_mode}")
    yield


app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    description="Storefront checkout, carts and back-office order management",
    lifespan=lifespan,
)


def storefront_openapi():
    """Advertise bearer auth so Swagger UI can send admin tokens."""
    if app.openapi_schema is None:
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        schema.setdefault("components", {}).setdefault("securitySchemes", {})["BearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        # Checkout stays anonymous; only admin routes reject missing tokens.
        schema["security"] = [{"BearerAuth": []}, {}]
        app.openapi_schema = schema
    return app.openapi_schema


app.openapi = storefront_openapi

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    metrics_store.increment("database_error_total")
    log_event(
        f"database_error {request.method} {request.url.path}",
        level=logging.ERROR,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database unavailable"},
    )


@app.middleware("http")
async def request_context_middleware(request: Request, call_next) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
    set_request_id(request_id)

    started = time.perf_counter()
    response = await call_next(request)
    metrics_store.observe("http_request_duration_seconds", time.perf_counter() - started)
    metrics_store.increment("http_requests_total")
    metrics_store.increment(f"http_responses_{response.status_code // 100}xx_total")

    response.headers[REQUEST_ID_HEADER] = request_id
    log_event(
        f"http_request {request.method} {request.url.path} {response.status_code}",
        order_id=request.path_params.get("order_id"),
        cart_id=request.path_params.get("cart_id"),
    )
    return response


for router in (
    health_router,
    carts_router,
    checkout_router,
    admin_orders_router,
    admin_notifications_router,
    metrics_router,
):
    app.include_router(router)
