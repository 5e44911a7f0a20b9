import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from header_parser import HeaderLayout
from metrics import compute_overall_metrics, compute_period_metrics
from models import Employee, Number

logger = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


def coerce_number(value: Any) -> Optional[Number]:
    """
    Convert a cell to a follower count.

    Empty, non-numeric and non-finite cells mean "not measured" and yield None,
    which is different from a measured zero.

    Args:
        value: Raw cell value

    Returns:
        Optional[Number]: int for integral values, float otherwise, or None
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number) if number.is_integer() else number


def rows_to_frame(headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> pd.DataFrame:
    """
    Build a DataFrame of header-keyed records.

    Missing trailing cells become empty strings. When a header repeats, the
    value of its last occurrence is kept.

    Args:
        headers: Header row
        rows: Data rows, possibly shorter than the header row

    Returns:
        pd.DataFrame: One row per data row, values kept as Python objects
    """
    records = []
    for row in rows:
        record = {}
        for index, header in enumerate(headers):
            record[header] = row[index] if index < len(row) else ""
        records.append(record)

    columns = list(dict.fromkeys(headers))
    return pd.DataFrame(records, columns=columns, dtype=object)


def _text(record: Dict[str, Any], identity: Dict[str, str], field_name: str) -> str:
    header = identity.get(field_name)
    if header is None:
        return ""
    value = record.get(header, "")
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return str(value).strip()


def is_included(first_name: str, last_name: str, status: str) -> bool:
    """Keep named rows whose status is empty or "active"."""
    if not first_name and not last_name:
        return False
    if status and status.lower() != "active":
        return False
    return True


def build_employee(record: Dict[str, Any], layout: HeaderLayout) -> Employee:
    followers = {}
    for column in layout.date_columns:
        count = coerce_number(record.get(column.header))
        if count is not None:
            followers[column.iso_date] = count

    return Employee(
        first_name=_text(record, layout.identity, "first_name"),
        last_name=_text(record, layout.identity, "last_name"),
        business_line=_text(record, layout.identity, "business_line") or UNASSIGNED,
        status=_text(record, layout.identity, "status"),
        linkedin_profile=_text(record, layout.identity, "linkedin_profile"),
        followers=followers,
        metrics=compute_overall_metrics(followers),
        period_metrics=compute_period_metrics(followers),
    )


def normalize_employees(
    layout: HeaderLayout,
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
) -> List[Employee]:
    """
    Turn roster rows into employees with metrics.

    Rows without a name, rows with a non-active status and employees without any
    follower data point are left out.

    Args:
        layout: Classified header row
        headers: Header row
        rows: Data rows

    Returns:
        List[Employee]: Included employees in sheet order
    """
    if not headers:
        return []

    df = rows_to_frame(headers, rows)
    employees = []
    dropped = {"unnamed_or_inactive": 0, "no_data": 0}
    for _, row in df.iterrows():
        record = row.to_dict()
        first_name = _text(record, layout.identity, "first_name")
        last_name = _text(record, layout.identity, "last_name")
        status = _text(record, layout.identity, "status")
        if not is_included(first_name, last_name, status):
            dropped["unnamed_or_inactive"] += 1
            continue

        employee = build_employee(record, layout)
        if not employee.followers:
            dropped["no_data"] += 1
            continue
        employees.append(employee)

    logger.info(
        f"Normalized {len(employees)} employees from {len(df)} rows",
        extra={"dropped": dropped, "date_columns": len(layout.date_columns)},
    )
    return employees
