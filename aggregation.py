from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Union

from metrics import round_half_away
from models import BusinessLine, Employee, Summary, Winner

Entity = Union[Employee, BusinessLine]


def calculate_winners(entities: Sequence[Entity]) -> List[Winner]:
    """
    Find the top grower of every period.

    Only strictly positive growth qualifies; ties keep the entity listed first.
    Periods nobody grew in have no winner.

    Args:
        entities: Employees or business lines with period metrics

    Returns:
        List[Winner]: One winner per period, most recent period first
    """
    by_period: Dict[str, List[tuple]] = {}
    for entity in entities:
        for metric in entity.period_metrics:
            by_period.setdefault(metric.period_key, [])
            if metric.growth > 0:
                by_period[metric.period_key].append((entity, metric))

    winners = []
    for period_key in sorted(by_period, reverse=True):
        candidates = sorted(by_period[period_key], key=lambda pair: pair[1].growth, reverse=True)
        if not candidates:
            continue
        entity, metric = candidates[0]
        winners.append(Winner(
            period=metric.period,
            period_key=period_key,
            name=entity.display_name,
            business_line=entity.business_line,
            linkedin_profile=entity.linkedin_profile,
            metric=metric.model_copy(),
        ))
    return winners


def _top_grower(entities: Sequence[Entity]) -> Optional[Entity]:
    top = None
    for entity in entities:
        if top is None or entity.metrics.growth_rate > top.metrics.growth_rate:
            top = entity
    return top


def compute_summary(employees: Sequence[Employee], now: Optional[datetime] = None) -> Summary:
    """
    Headline numbers across all included employees.

    Args:
        employees: Included employees
        now: Timestamp of the computation. Defaults to the current UTC time.

    Returns:
        Summary: Totals, average growth rate and top grower
    """
    now = now or datetime.now(timezone.utc)
    summary = Summary(last_updated=now.isoformat())
    if not employees:
        return summary

    summary.total_employees = len(employees)
    summary.total_followers = sum(e.metrics.current_followers or 0 for e in employees)
    rates = [e.metrics.growth_rate for e in employees]
    summary.avg_growth_rate = round_half_away(sum(rates) / len(rates))

    top = _top_grower(employees)
    summary.top_grower = (top.display_name or None) if top else None
    return summary
