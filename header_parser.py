"""
Classification of roster sheet headers.

Headers are split into identity columns (name, status, business line, profile
link) and time-series columns whose header text resolves to a calendar date.
Headers that are neither are ignored.
"""
import logging
import re
import warnings
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence

import pandas as pd

from config import HeaderMode

logger = logging.getLogger(__name__)

MONTHS = [
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
]

# Accepted header spellings per logical field, in priority order
IDENTITY_ALIASES: Dict[str, Sequence[str]] = {
    "first_name": ("First name (legal)", "First Name", "First name"),
    "last_name": ("Last name (legal)", "Last Name", "Last name"),
    "business_line": ("Business Line", "Business line", "Business", "BusinessLine"),
    "status": ("Status",),
    "linkedin_profile": ("LinkedIn profile", "Linkedin profile", "LinkedIn"),
}

IDENTITY_LABELS = frozenset({
    "first name (legal)",
    "last name (legal)",
    "first name",
    "last name",
    "linkedin profile",
    "linkedin",
    "status",
    "business line",
    "business",
    "businessline",
})

ORDINAL_RE = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)\b", re.IGNORECASE)
MDY_RE = re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})\b")
YMD_RE = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
MONTH_RE = re.compile(
    r"\b(jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b",
    re.IGNORECASE,
)
PAREN_RE = re.compile(r"\(([^)]*)\)")
DAY_RE = re.compile(r"\b(\d{1,2})\b")
YEAR_RE = re.compile(r"\b(20\d{2})\b")


@dataclass(frozen=True)
class DateColumn:
    """A time-series column: its header text and the ISO day it resolves to."""
    header: str
    iso_date: str


@dataclass
class HeaderLayout:
    """Classified header row."""
    identity: Dict[str, str] = field(default_factory=dict)
    date_columns: List[DateColumn] = field(default_factory=list)


def is_identity_header(header: str) -> bool:
    return str(header or "").strip().lower() in IDENTITY_LABELS


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _month_index(token: str) -> int:
    return [m[:3] for m in MONTHS].index(token[:3].lower()) + 1


def parse_month_name(header: str, default_year: int) -> Optional[date]:
    """
    Resolve a header that is exactly a month name to the first of that month.

    Args:
        header: Raw header text
        default_year: Year assigned to the month

    Returns:
        Optional[date]: First day of the month, or None if the header is not a month name
    """
    raw = str(header or "").strip().lower()
    if raw in MONTHS:
        return date(default_year, MONTHS.index(raw) + 1, 1)
    return None


def find_default_year(headers: Iterable[str], today: Optional[date] = None) -> int:
    """First 20xx year mentioned in any header, else the current year."""
    for header in headers:
        match = YEAR_RE.search(str(header or ""))
        if match:
            return int(match.group(1))
    return (today or date.today()).year


def _parse_month_phrase(text: str, default_year: int) -> Optional[date]:
    # Parenthesised text usually carries the real date of the column
    candidates = PAREN_RE.findall(text) + [text]
    for candidate in candidates:
        month = MONTH_RE.search(candidate)
        if not month:
            continue
        day = DAY_RE.search(candidate)
        year = YEAR_RE.search(candidate)
        return _safe_date(
            int(year.group(1)) if year else default_year,
            _month_index(month.group(1)),
            int(day.group(1)) if day else 1,
        )
    return None


def _parse_generic(text: str) -> Optional[date]:
    if not any(ch.isdigit() for ch in text):
        return None
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        parsed = pd.to_datetime(text, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


def parse_freeform_date(header: str, default_year: int) -> Optional[date]:
    """
    Resolve a loosely written header such as "Followers (18th March 2025)" to a date.

    Strategies, in order: M/D/Y, Y-M-D, a month name with optional day and year,
    and finally a generic date parse.

    Args:
        header: Raw header text
        default_year: Year used when the header names a month without a year

    Returns:
        Optional[date]: Resolved date, or None when nothing matches
    """
    text = ORDINAL_RE.sub(r"\1", str(header or "").strip())
    if not text:
        return None

    match = MDY_RE.search(text)
    if match:
        month, day, year = (int(part) for part in match.groups())
        if year < 100:
            year += 2000
        return _safe_date(year, month, day)

    match = YMD_RE.search(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
        return _safe_date(year, month, day)

    if MONTH_RE.search(text):
        return _parse_month_phrase(text, default_year)

    return _parse_generic(text)


def resolve_identity_columns(headers: Sequence[str]) -> Dict[str, str]:
    """
    Pick the header used for each identity field.

    Args:
        headers: Header row

    Returns:
        Dict[str, str]: Field name to the header text found in the sheet
    """
    by_label = {}
    for header in headers:
        text = str(header or "").strip()
        if text:
            by_label.setdefault(text.lower(), str(header))

    identity = {}
    for field_name, aliases in IDENTITY_ALIASES.items():
        for alias in aliases:
            if alias.lower() in by_label:
                identity[field_name] = by_label[alias.lower()]
                break
    return identity


def classify_headers(
    headers: Sequence[str],
    mode: HeaderMode = HeaderMode.FREEFORM,
    default_year: int = 2025,
    today: Optional[date] = None,
) -> HeaderLayout:
    """
    Split the header row into identity columns and date columns.

    Two headers resolving to the same date keep the later one. Date columns are
    returned in ascending date order.

    Args:
        headers: Header row of the roster sheet
        mode: Header parsing strategy
        default_year: Year for bare month names in month-name mode
        today: Reference day for the current-year fallback in freeform mode

    Returns:
        HeaderLayout: Identity columns and sorted date columns
    """
    if mode == HeaderMode.FREEFORM:
        year = find_default_year(headers, today=today)
    else:
        year = default_year

    by_date: Dict[str, DateColumn] = {}
    skipped = []
    for header in headers:
        text = str(header or "").strip()
        if not text or is_identity_header(text):
            continue
        if mode == HeaderMode.MONTH_NAME:
            resolved = parse_month_name(text, year)
        else:
            resolved = parse_freeform_date(text, year)
        if resolved is None:
            skipped.append(text)
            continue
        iso_date = resolved.isoformat()
        by_date[iso_date] = DateColumn(header=str(header), iso_date=iso_date)

    if skipped:
        logger.info("Ignoring headers without a date", extra={"headers": skipped})

    return HeaderLayout(
        identity=resolve_identity_columns(headers),
        date_columns=sorted(by_date.values(), key=lambda column: column.iso_date),
    )
