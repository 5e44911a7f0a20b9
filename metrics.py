"""
Growth metrics over sparse follower series.

A series maps ISO day strings to follower counts. Dates without a measurement
are absent from the mapping, so every computation here walks the known points
only and a gap never reads as a drop to zero.
"""
import calendar
import math
from datetime import date
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, List

from models import Metrics, Number, PeriodMetric

# Enough digits for the integer part of the largest float plus the decimals
ROUNDING_PRECISION = 400


def round_half_away(value: float, places: int = 1) -> float:
    """Round half away from zero (2.25 -> 2.3, -2.25 -> -2.3). Non-finite values pass through."""
    if not math.isfinite(value):
        return value
    with localcontext() as ctx:
        ctx.prec = ROUNDING_PRECISION
        exponent = Decimal(1).scaleb(-places)
        return float(Decimal(str(value)).quantize(exponent, rounding=ROUND_HALF_UP))


def growth_rate(start: Number, end: Number) -> float:
    """Percentage growth from start to end, one decimal; 0 when start is not positive or the ratio overflows."""
    if start <= 0:
        return 0.0
    rate = (end - start) / start * 100
    if not math.isfinite(rate):
        return 0.0
    return round_half_away(rate)


def period_label(start_key: str, end_key: str) -> str:
    """
    Human label for the period between two ISO days.

    Args:
        start_key: ISO day of the earlier data point
        end_key: ISO day of the later data point

    Returns:
        str: "March 2025", "March - April 2025" or "December 2024 - January 2025"
    """
    start = date.fromisoformat(start_key)
    end = date.fromisoformat(end_key)
    end_month = calendar.month_name[end.month]
    if (start.year, start.month) == (end.year, end.month):
        return f"{end_month} {end.year}"
    start_month = calendar.month_name[start.month]
    if start.year == end.year:
        return f"{start_month} - {end_month} {end.year}"
    return f"{start_month} {start.year} - {end_month} {end.year}"


def consistency_score(series: Dict[str, Number]) -> int:
    """Percentage of steps between consecutive known points that did not lose followers."""
    values = [series[key] for key in sorted(series)]
    steps = [current - previous for previous, current in zip(values, values[1:])]
    if not steps:
        return 0
    non_negative = sum(1 for step in steps if step >= 0)
    return int(round_half_away(non_negative / len(steps) * 100, places=0))


def compute_overall_metrics(series: Dict[str, Number]) -> Metrics:
    """
    Overall growth between the earliest and the latest known point.

    Args:
        series: Sparse ISO day to follower count mapping

    Returns:
        Metrics: All zero for an empty series
    """
    keys = sorted(series)
    if not keys:
        return Metrics()

    earliest = series[keys[0]]
    latest = series[keys[-1]]
    return Metrics(
        current_followers=latest,
        absolute_growth=latest - earliest,
        growth_rate=growth_rate(earliest, latest),
        consistency_score=consistency_score(series),
    )


def compute_period_metrics(series: Dict[str, Number]) -> List[PeriodMetric]:
    """
    One metric per pair of consecutive known points, in ascending order.

    Args:
        series: Sparse ISO day to follower count mapping

    Returns:
        List[PeriodMetric]: Period metrics keyed by the later date of each pair
    """
    keys = sorted(series)
    period_metrics = []
    for previous_key, current_key in zip(keys, keys[1:]):
        previous = series[previous_key]
        current = series[current_key]
        period_metrics.append(PeriodMetric(
            period=period_label(previous_key, current_key),
            period_key=current_key,
            growth=current - previous,
            growth_rate=growth_rate(previous, current),
            start_followers=previous,
            end_followers=current,
        ))
    return period_metrics
