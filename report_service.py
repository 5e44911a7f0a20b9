import logging
import time
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from googleapiclient.errors import HttpError

from aggregation import calculate_winners, compute_summary
from business_lines import build_business_lines
from config import Settings
from header_parser import classify_headers
from models import BusinessLine, Employee, ReportResponse, WinnerGroups
from roster import normalize_employees
from sheets_client import RawSheet, fetch_sheet, get_sheets_service
from utils.result import INTERNAL_ERROR, Result

# Configure logger with more structured format
logger = logging.getLogger(__name__)

SheetFetcher = Callable[[str], RawSheet]


class LogContext:
    """Context manager for tracking and logging operation metrics"""
    def __init__(self, operation_name: str, **kwargs):
        self.operation_name = operation_name
        self.start_time = None
        self.request_id = kwargs.get('request_id', str(uuid.uuid4())[:8])
        self.extra = {key: value for key, value in kwargs.items() if key != 'request_id'}

    def __enter__(self):
        self.start_time = time.time()
        logger.info(f"Starting {self.operation_name}", extra={"request_id": self.request_id, **self.extra})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration = time.time() - self.start_time
        if exc_type:
            logger.error(
                f"Failed {self.operation_name} in {duration:.2f}s: {str(exc_val)}",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )
        else:
            logger.info(
                f"Completed {self.operation_name} in {duration:.2f}s",
                extra={"request_id": self.request_id, "duration": duration, **self.extra}
            )


def http_error_code(error: HttpError) -> str:
    status = getattr(error, "status_code", None) or getattr(error.resp, "status", None)
    return str(status) if status else INTERNAL_ERROR


def http_error_details(error: HttpError) -> str:
    reason = getattr(error, "reason", None)
    return reason or str(error)


class ReportProcessor:
    """
    Builds the follower growth report from the roster spreadsheet.

    The processor runs the whole request in order: fetch the roster, classify
    its headers, normalize rows into employees, optionally fetch and aggregate
    business-line totals, then rank winners and summarise.
    """

    def __init__(self, settings: Settings, fetcher: Optional[SheetFetcher] = None):
        """
        Args:
            settings: Validated settings
            fetcher: Callable fetching one A1 range. Defaults to the Google Sheets API.
        """
        self.settings = settings
        self._fetcher = fetcher

    def _fetch(self, range_name: str) -> RawSheet:
        if self._fetcher is None:
            service = get_sheets_service(self.settings)
            self._fetcher = lambda name: fetch_sheet(service, self.settings.sheet_id, name)
        return self._fetcher(range_name)

    def build_report(self, now: Optional[datetime] = None) -> Result[ReportResponse]:
        """
        Fetch the sheets and compute the report.

        Args:
            now: Timestamp recorded in the summary. Defaults to the current UTC time.

        Returns:
            Result[ReportResponse]: The report, or a failure with an error code
        """
        request_id = str(uuid.uuid4())[:8]
        log_context = {
            "request_id": request_id,
            "employees_range": self.settings.employees_range,
            "header_mode": self.settings.header_mode.value,
        }
        logger.info("Building follower report", extra=log_context)

        try:
            with LogContext("roster fetch", **log_context):
                roster = self._fetch(self.settings.employees_range)

            with LogContext("roster transform", **log_context):
                employees = self._build_employees(roster)

            business_lines = None
            if self.settings.include_business_lines:
                business_lines = self._build_business_lines(employees, log_context)

            report = self._assemble(employees, business_lines, now)
            logger.info(
                f"Built report with {len(employees)} employees",
                extra={**log_context, "business_lines": len(business_lines or [])}
            )
            return Result.ok(report)

        except HttpError as e:
            logger.exception("Sheets API request failed", extra=log_context)
            return Result.fail(http_error_details(e), code=http_error_code(e))
        except Exception as e:
            logger.exception("Unexpected error while building report", extra=log_context)
            return Result.server_error(str(e) or "Unknown error")

    def _build_employees(self, roster: RawSheet) -> List[Employee]:
        layout = classify_headers(
            roster.headers,
            mode=self.settings.header_mode,
            default_year=self.settings.default_year,
        )
        return normalize_employees(layout, roster.headers, roster.rows)

    def _build_business_lines(self, employees: List[Employee], log_context: dict) -> List[BusinessLine]:
        # Business-line totals are optional: a failure here leaves the list empty
        try:
            with LogContext("business line fetch", **log_context):
                totals_sheet = self._fetch(self.settings.business_lines_range)
        except Exception as e:
            logger.warning(
                f"Skipping business lines, fetch failed: {e}",
                extra=log_context,
                exc_info=True,
            )
            return []

        return build_business_lines(
            totals_sheet.all_rows(),
            employees,
            self.settings.business_line_keywords,
            start_column=self.settings.totals_start_column,
            start_year=self.settings.totals_start_year,
            start_month=self.settings.totals_start_month,
        )

    def _assemble(
        self,
        employees: List[Employee],
        business_lines: Optional[List[BusinessLine]],
        now: Optional[datetime],
    ) -> ReportResponse:
        employee_winners = calculate_winners(employees)
        if business_lines is None:
            monthly_winners = employee_winners
        else:
            monthly_winners = WinnerGroups(
                employees=employee_winners,
                business_lines=calculate_winners(business_lines),
            )
        return ReportResponse(
            employees=employees,
            business_lines=business_lines,
            monthly_winners=monthly_winners,
            summary=compute_summary(employees, now=now),
        )
