from pydantic import BaseModel, Field


class TimingMetricStats(BaseModel):
    count: int
    avg_s: float
    max_s: float


class MetricsResponse(BaseModel):
    order_number_strategy: str = Field(
        description="'latest' may hand out duplicate order numbers under concurrent checkouts"
    )
    counters: dict[str, int]
    timings: dict[str, TimingMetricStats]
