"""
Business-line totals read from the secondary summary sheet.

The sheet is laid out for people, not machines: a row naming a business line
opens a block, and the block's "Total" row (second column) holds one follower
total per month from a fixed column onwards.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from metrics import compute_overall_metrics, compute_period_metrics
from models import BusinessLine, Employee, Number
from roster import coerce_number

logger = logging.getLogger(__name__)


def month_key(start_year: int, start_month: int, offset: int) -> str:
    """ISO day of the first of the month ``offset`` months after the start month."""
    months = start_month - 1 + offset
    return date(start_year + months // 12, months % 12 + 1, 1).isoformat()


def _match_keyword(cell: Any, keywords: Sequence[str]) -> Optional[str]:
    text = str(cell or "").lower()
    if not text:
        return None
    for keyword in keywords:
        if keyword.lower() in text:
            return keyword
    return None


def _is_total_row(row: Sequence[Any]) -> bool:
    return len(row) > 1 and str(row[1] or "").strip().lower() == "total"


def parse_business_line_totals(
    rows: Sequence[Sequence[Any]],
    keywords: Sequence[str],
    start_column: int = 2,
    start_year: int = 2025,
    start_month: int = 3,
) -> Dict[str, Dict[str, Number]]:
    """
    Extract the monthly totals series of each business line.

    Args:
        rows: Every row of the totals sheet, header row included
        keywords: Business-line names to look for in the first column
        start_column: Index of the first monthly column
        start_year: Year of the first monthly column
        start_month: Month of the first monthly column

    Returns:
        Dict[str, Dict[str, Number]]: Business line name to its sparse monthly series,
        in the order the lines appear. Only the first totals row of a line is used.
    """
    totals: Dict[str, Dict[str, Number]] = {}
    current = None
    for row in rows:
        if not row:
            continue
        matched = _match_keyword(row[0], keywords)
        if matched:
            current = matched
        if current is None or not _is_total_row(row) or current in totals:
            continue

        series = {}
        for offset, cell in enumerate(row[start_column:]):
            count = coerce_number(cell)
            if count is not None:
                series[month_key(start_year, start_month, offset)] = count
        if series:
            totals[current] = series
    return totals


def count_employees(name: str, employees: Sequence[Employee]) -> int:
    """
    Employees whose business line loosely matches ``name``.

    A match is case-insensitive containment in either direction, so "Tech" and
    "Technology" match each other.
    """
    line = name.lower()
    count = 0
    for employee in employees:
        label = employee.business_line.lower()
        if label and (label in line or line in label):
            count += 1
    return count


def build_business_lines(
    rows: Sequence[Sequence[Any]],
    employees: Sequence[Employee],
    keywords: Sequence[str],
    start_column: int = 2,
    start_year: int = 2025,
    start_month: int = 3,
) -> List[BusinessLine]:
    """
    Business lines with metrics and employee counts.

    Args:
        rows: Every row of the totals sheet
        employees: Included employees, used for the employee counts
        keywords: Business-line names to look for
        start_column: Index of the first monthly column
        start_year: Year of the first monthly column
        start_month: Month of the first monthly column

    Returns:
        List[BusinessLine]: Lines that have at least one monthly total
    """
    totals = parse_business_line_totals(
        rows,
        keywords,
        start_column=start_column,
        start_year=start_year,
        start_month=start_month,
    )
    business_lines = [
        BusinessLine(
            name=name,
            followers=series,
            metrics=compute_overall_metrics(series),
            period_metrics=compute_period_metrics(series),
            employee_count=count_employees(name, employees),
        )
        for name, series in totals.items()
    ]
    logger.info(f"Built {len(business_lines)} business lines", extra={"lines": list(totals)})
    return business_lines
