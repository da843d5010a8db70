from fastapi import APIRouter, Depends

from storefront.auth.dependencies import AuthContext, require_admin
from storefront.config import settings
from storefront.observability import metrics_store
from storefront.schemas.metrics import MetricsResponse

router = APIRouter(prefix="/metrics", tags=["metrics"])


@router.get("", summary="Checkout and HTTP metrics", response_model=MetricsResponse)
def metrics_endpoint(
    _auth: AuthContext = Depends(require_admin),
) -> MetricsResponse:
    snapshot = metrics_store.snapshot()
    return MetricsResponse(
        order_number_strategy=settings.order_number_strategy,
        counters=snapshot.counters,
        timings=snapshot.timings,
    )
