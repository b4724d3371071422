"""Domain models for aggregated call statistics."""

from pydantic import BaseModel, Field


class ReportTimeRange(BaseModel):
    """Earliest and latest record timestamp covered by a report."""

    start: int = Field(default=0, description="Earliest timestamp (ms)")
    end: int = Field(default=0, description="Latest timestamp (ms)")


class ProviderStats(BaseModel):
    """Statistics for a single provider."""

    total_calls: int = Field(default=0, description="Total number of calls")
    successful_calls: int = Field(default=0, description="Number of successful calls")
    failed_calls: int = Field(default=0, description="Number of failed calls")
    success_rate: float = Field(default=0.0, description="Successful / total calls")
    total_tokens: int = Field(default=0, description="Total tokens used")
    total_cost: float = Field(default=0.0, description="Total cost in USD")
    avg_latency_ms: float = Field(default=0.0, description="Mean latency (ms)")
    avg_tokens_per_call: float = Field(default=0.0, description="Mean tokens per call")
    avg_cost_per_call: float = Field(default=0.0, description="Mean cost per call")


class ModelStats(ProviderStats):
    """Statistics for a single provider:model pair."""

    prompt_tokens: int = Field(default=0, description="Total prompt tokens")
    completion_tokens: int = Field(default=0, description="Total completion tokens")
    p50_latency_ms: float = Field(default=0.0, description="Median latency (ms)")
    p95_latency_ms: float = Field(default=0.0, description="95th percentile latency")
    p99_latency_ms: float = Field(default=0.0, description="99th percentile latency")


class HourlyStats(BaseModel):
    """Calls falling into one local clock hour."""

    timestamp: int = Field(description="Start of the hour bucket (ms)")
    hour: int = Field(ge=0, le=23, description="Local hour of day")
    calls: int = Field(default=0, description="Number of calls")
    tokens: int = Field(default=0, description="Tokens used")
    avg_latency_ms: float = Field(default=0.0, description="Mean latency (ms)")
    total_cost: float = Field(default=0.0, description="Cost in USD")
    success_rate: float = Field(default=0.0, description="Successful / total calls")


class DailyStats(BaseModel):
    """Calls falling into one local calendar day."""

    timestamp: int = Field(description="Local midnight of the day (ms)")
    date: str = Field(description="Date in YYYY-MM-DD format")
    calls: int = Field(default=0, description="Number of calls")
    tokens: int = Field(default=0, description="Tokens used")
    avg_latency_ms: float = Field(default=0.0, description="Mean latency (ms)")
    total_cost: float = Field(default=0.0, description="Cost in USD")
    success_rate: float = Field(default=0.0, description="Successful / total calls")
    cost_by_provider: dict[str, float] = Field(default_factory=dict)
    tokens_by_provider: dict[str, int] = Field(default_factory=dict)


class AggregatedReport(BaseModel):
    """Statistical summary of a set of call records.

    Computed on every request and never persisted.
    """

    time_range: ReportTimeRange = Field(default_factory=ReportTimeRange)

    # Usage
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    success_rate: float = 0.0

    # Latency
    avg_latency_ms: float = 0.0
    p50_latency_ms: float = 0.0
    p95_latency_ms: float = 0.0
    p99_latency_ms: float = 0.0
    min_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    # Tokens
    total_tokens: int = 0
    total_prompt_tokens: int = 0
    total_completion_tokens: int = 0
    avg_tokens_per_call: float = 0.0

    # Cost
    total_cost: float = 0.0
    avg_cost_per_call: float = 0.0
    cost_by_provider: dict[str, float] = Field(default_factory=dict)

    # Breakdowns
    by_provider: dict[str, ProviderStats] = Field(default_factory=dict)
    by_model: dict[str, ModelStats] = Field(default_factory=dict)
    hourly_stats: list[HourlyStats] = Field(default_factory=list)
    daily_stats: list[DailyStats] = Field(default_factory=list)
