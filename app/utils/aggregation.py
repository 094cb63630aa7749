"""Per-day aggregation of 15-minute intraday bars."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from app.schemas.intraday import DailySummarySchema
from app.utils.validators import parse_bar_timestamp, parse_float, parse_int

AVERAGE_PRECISION = 6


@dataclass
class BarMetrics:
    high: float | None = None
    low: float | None = None
    volume: int | None = None

    def is_complete(self) -> bool:
        return self.high is not None and self.low is not None and self.volume is not None


@dataclass
class DailyAccumulator:
    high_sum: float = 0.0
    low_sum: float = 0.0
    volume_sum: int = 0
    count: int = 0

    def add(self, metrics: BarMetrics):
        self.high_sum += metrics.high
        self.low_sum += metrics.low
        self.volume_sum += metrics.volume
        self.count += 1


def extract_metrics(fields: Mapping[str, Any]) -> BarMetrics:
    """Pick high, low and volume out of one bar by field-name substring.

    Rules are tried in the order high, low, volume and the first one whose
    substring occurs in the lower-cased name owns that field, even when its
    value does not parse. A name containing both "high" and "low" therefore
    only ever feeds ``high``.
    """
    metrics = BarMetrics()
    for name, value in fields.items():
        lowered = str(name).lower()
        if "high" in lowered:
            parsed = parse_float(value)
            if parsed is not None:
                metrics.high = parsed
        elif "low" in lowered:
            parsed = parse_float(value)
            if parsed is not None:
                metrics.low = parsed
        elif "volume" in lowered:
            parsed_volume = parse_int(value)
            if parsed_volume is not None:
                metrics.volume = parsed_volume
    return metrics


def aggregate_daily(series: Mapping[str, Any]) -> dict[str, DailyAccumulator]:
    grouped: dict[str, DailyAccumulator] = {}
    for timestamp, fields in series.items():
        if not isinstance(fields, Mapping):
            continue
        ts = parse_bar_timestamp(timestamp)
        if ts is None:
            continue
        metrics = extract_metrics(fields)
        if not metrics.is_complete():
            continue

        day = ts.strftime("%Y-%m-%d")
        if day not in grouped:
            grouped[day] = DailyAccumulator()
        grouped[day].add(metrics)
    return grouped


def format_daily_results(grouped: Mapping[str, DailyAccumulator]) -> list[DailySummarySchema]:
    results = [
        DailySummarySchema(
            day=day,
            lowAverage=round(acc.low_sum / acc.count, AVERAGE_PRECISION),
            highAverage=round(acc.high_sum / acc.count, AVERAGE_PRECISION),
            volume=acc.volume_sum,
        )
        for day, acc in grouped.items()
    ]
    results.sort(key=lambda item: item.day, reverse=True)
    return results
