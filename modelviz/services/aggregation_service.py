"""Statistical rollups over call records.

Everything here is a pure function of its inputs: no storage access and no
side effects. Time bucketing uses the host's local time zone.
"""

import math
from collections import defaultdict
from collections.abc import Callable, Hashable, Iterable, Sequence
from typing import TypeVar

from modelviz.constants import RANGE_DURATIONS_MS
from modelviz.models.domain.call_record import CallRecord
from modelviz.models.domain.report import (
    AggregatedReport,
    DailyStats,
    HourlyStats,
    ModelStats,
    ProviderStats,
    ReportTimeRange,
)
from modelviz.types import TimeBounds, TimeRange
from modelviz.utils import (
    get_current_timestamp_ms,
    start_of_local_day_ms,
    start_of_local_hour_ms,
    to_local_datetime,
)

K = TypeVar("K", bound=Hashable)


def calculate_percentile(sorted_values: Sequence[float], percentile: float) -> float:
    """Nearest-rank percentile of an ascending sequence.

    The 1-indexed rank is ``ceil(percentile / 100 * n)`` clamped to ``[1, n]``.

    Args:
        sorted_values: Values sorted ascending
        percentile: Percentile (0-100)

    Returns:
        Selected value, or 0.0 for an empty sequence
    """
    n = len(sorted_values)
    if n == 0:
        return 0.0
    rank = math.ceil(percentile * n / 100)
    rank = min(max(rank, 1), n)
    return sorted_values[rank - 1]


def _safe_div(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def _group_by(records: Iterable[CallRecord], key: Callable[[CallRecord], K]) -> dict[K, list[CallRecord]]:
    grouped: dict[K, list[CallRecord]] = defaultdict(list)
    for record in records:
        grouped[key(record)].append(record)
    return dict(grouped)


def _provider_stats(records: list[CallRecord]) -> ProviderStats:
    total_calls = len(records)
    successful_calls = sum(1 for record in records if record.is_success)
    total_tokens = sum(record.tokens_used for record in records)
    total_cost = sum(record.estimated_cost for record in records)
    total_latency = sum(record.latency_ms for record in records)

    return ProviderStats(
        total_calls=total_calls,
        successful_calls=successful_calls,
        failed_calls=total_calls - successful_calls,
        success_rate=_safe_div(successful_calls, total_calls),
        total_tokens=total_tokens,
        total_cost=total_cost,
        avg_latency_ms=_safe_div(total_latency, total_calls),
        avg_tokens_per_call=_safe_div(total_tokens, total_calls),
        avg_cost_per_call=_safe_div(total_cost, total_calls),
    )


def _model_stats(records: list[CallRecord]) -> ModelStats:
    latencies = sorted(record.latency_ms for record in records)
    return ModelStats(
        **_provider_stats(records).model_dump(),
        prompt_tokens=sum(record.prompt_tokens for record in records),
        completion_tokens=sum(record.completion_tokens for record in records),
        p50_latency_ms=calculate_percentile(latencies, 50),
        p95_latency_ms=calculate_percentile(latencies, 95),
        p99_latency_ms=calculate_percentile(latencies, 99),
    )


def group_by_provider(records: Iterable[CallRecord]) -> dict[str, ProviderStats]:
    """Per-provider statistics keyed by provider name."""
    grouped = _group_by(records, lambda record: record.provider)
    return {provider: _provider_stats(group) for provider, group in grouped.items()}


def group_by_model(records: Iterable[CallRecord]) -> dict[str, ModelStats]:
    """Per-model statistics keyed by ``"<provider>:<model>"``."""
    grouped = _group_by(records, lambda record: f"{record.provider}:{record.model}")
    return {key: _model_stats(group) for key, group in grouped.items()}


def calculate_hourly_stats(records: Iterable[CallRecord]) -> list[HourlyStats]:
    """One entry per local clock hour that has calls, oldest first."""
    grouped = _group_by(records, lambda record: start_of_local_hour_ms(record.timestamp))

    stats = []
    for bucket_start in sorted(grouped):
        bucket = grouped[bucket_start]
        calls = len(bucket)
        successful_calls = sum(1 for record in bucket if record.is_success)
        stats.append(
            HourlyStats(
                timestamp=bucket_start,
                hour=to_local_datetime(bucket_start).hour,
                calls=calls,
                tokens=sum(record.tokens_used for record in bucket),
                avg_latency_ms=sum(record.latency_ms for record in bucket) / calls,
                total_cost=sum(record.estimated_cost for record in bucket),
                success_rate=successful_calls / calls,
            )
        )
    return stats


def calculate_daily_stats(records: Iterable[CallRecord]) -> list[DailyStats]:
    """One entry per local calendar day that has calls, oldest first."""
    grouped = _group_by(records, lambda record: start_of_local_day_ms(record.timestamp))

    stats = []
    for day_start in sorted(grouped):
        bucket = grouped[day_start]
        calls = len(bucket)
        successful_calls = sum(1 for record in bucket if record.is_success)

        cost_by_provider: dict[str, float] = defaultdict(float)
        tokens_by_provider: dict[str, int] = defaultdict(int)
        for record in bucket:
            cost_by_provider[record.provider] += record.estimated_cost
            tokens_by_provider[record.provider] += record.tokens_used

        stats.append(
            DailyStats(
                timestamp=day_start,
                date=to_local_datetime(day_start).strftime("%Y-%m-%d"),
                calls=calls,
                tokens=sum(record.tokens_used for record in bucket),
                avg_latency_ms=sum(record.latency_ms for record in bucket) / calls,
                total_cost=sum(record.estimated_cost for record in bucket),
                success_rate=successful_calls / calls,
                cost_by_provider=dict(cost_by_provider),
                tokens_by_provider=dict(tokens_by_provider),
            )
        )
    return stats


def aggregate_metrics(records: Sequence[CallRecord]) -> AggregatedReport:
    """Compute totals, rates, percentiles and breakdowns for ``records``.

    Args:
        records: Call records in any order

    Returns:
        AggregatedReport; all zeros and empty breakdowns for no records
    """
    if not records:
        return AggregatedReport()

    total_calls = len(records)
    successful_calls = sum(1 for record in records if record.is_success)

    latencies = sorted(record.latency_ms for record in records)
    timestamps = [record.timestamp for record in records]

    total_tokens = sum(record.tokens_used for record in records)
    total_cost = sum(record.estimated_cost for record in records)

    by_provider = group_by_provider(records)

    return AggregatedReport(
        time_range=ReportTimeRange(start=min(timestamps), end=max(timestamps)),
        total_calls=total_calls,
        successful_calls=successful_calls,
        failed_calls=total_calls - successful_calls,
        success_rate=successful_calls / total_calls,
        avg_latency_ms=sum(latencies) / total_calls,
        p50_latency_ms=calculate_percentile(latencies, 50),
        p95_latency_ms=calculate_percentile(latencies, 95),
        p99_latency_ms=calculate_percentile(latencies, 99),
        min_latency_ms=latencies[0],
        max_latency_ms=latencies[-1],
        total_tokens=total_tokens,
        total_prompt_tokens=sum(record.prompt_tokens for record in records),
        total_completion_tokens=sum(record.completion_tokens for record in records),
        avg_tokens_per_call=total_tokens / total_calls,
        total_cost=total_cost,
        avg_cost_per_call=total_cost / total_calls,
        cost_by_provider={
            provider: stats.total_cost for provider, stats in by_provider.items()
        },
        by_provider=by_provider,
        by_model=group_by_model(records),
        hourly_stats=calculate_hourly_stats(records),
        daily_stats=calculate_daily_stats(records),
    )


def resolve_time_range(
    time_range: TimeRange | str | tuple[int, int],
    now_ms: int | None = None,
) -> TimeBounds:
    """Turn a symbolic range or an explicit pair into absolute bounds.

    ``today`` starts at local midnight, ``all`` at the epoch; the other
    symbolic ranges look back a fixed duration from ``now_ms``.

    Raises:
        ValueError: For an unknown range name or an explicit pair with start > end
    """
    if isinstance(time_range, tuple):
        start_ms, end_ms = time_range
        if start_ms > end_ms:
            raise ValueError(f"Range start {start_ms} is after end {end_ms}")
        return int(start_ms), int(end_ms)

    if now_ms is None:
        now_ms = get_current_timestamp_ms()

    try:
        resolved = TimeRange(time_range)
    except ValueError:
        valid = [member.value for member in TimeRange]
        raise ValueError(f"Unknown time range {time_range!r}, expected one of: {valid}")

    if resolved == TimeRange.TODAY:
        return start_of_local_day_ms(now_ms), now_ms
    if resolved == TimeRange.ALL:
        return 0, now_ms
    return now_ms - RANGE_DURATIONS_MS[resolved.value], now_ms
