import os
from enum import Enum
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from utils.result import Result

ENV_VARS_MISSING = "ENV_VARS_MISSING"
ENV_VARS_INVALID = "ENV_VARS_INVALID"

# Required variables, in the order they are reported when missing
REQUIRED_ENV_VARS = (
    ("GOOGLE_SHEET_ID", "sheet_id"),
    ("GOOGLE_SERVICE_ACCOUNT_EMAIL", "service_account_email"),
    ("GOOGLE_PRIVATE_KEY", "private_key"),
)

OPTIONAL_ENV_VARS = (
    ("EMPLOYEES_RANGE", "employees_range"),
    ("BUSINESS_LINES_RANGE", "business_lines_range"),
    ("HEADER_MODE", "header_mode"),
    ("INCLUDE_BUSINESS_LINES", "include_business_lines"),
    ("DEFAULT_YEAR", "default_year"),
)

DEFAULT_BUSINESS_LINE_KEYWORDS = [
    "Technology",
    "Product",
    "Marketing",
    "Sales",
    "Operations",
    "Finance",
    "People",
    "Legal",
]


class ConfigurationError(Exception):
    """Raised when the service cannot be configured from its environment."""

    def __init__(self, message: str, code: str = ENV_VARS_MISSING):
        super().__init__(message)
        self.code = code


class HeaderMode(str, Enum):
    """How time-series column headers are turned into dates."""

    MONTH_NAME = "month_name"
    FREEFORM = "freeform"


class Settings(BaseModel):
    """
    Service configuration, built once at process start.

    Attributes:
        sheet_id: Spreadsheet identifier of the roster workbook
        service_account_email: Client email of the Google service account
        private_key: PEM private key of the service account
        employees_range: A1 range holding the employee roster
        business_lines_range: A1 range holding the business-line totals
        header_mode: Date header parsing strategy
        include_business_lines: Whether the business-line totals are fetched and aggregated
        default_year: Year given to bare month headers in month-name mode
        business_line_keywords: Business-line names recognised in the totals sheet
        totals_start_column: First column holding monthly totals
        totals_start_year: Year of the first monthly totals column
        totals_start_month: Month of the first monthly totals column
    """
    sheet_id: str = Field(min_length=1)
    service_account_email: str = Field(min_length=1)
    private_key: str = Field(min_length=1)
    employees_range: str = "Employees!A1:ZZ2000"
    business_lines_range: str = "Business Lines!A1:ZZ500"
    header_mode: HeaderMode = HeaderMode.FREEFORM
    include_business_lines: bool = True
    default_year: int = Field(default=2025, ge=1900, le=9999)
    business_line_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_BUSINESS_LINE_KEYWORDS))
    totals_start_column: int = Field(default=2, ge=0)
    totals_start_year: int = 2025
    totals_start_month: int = Field(default=3, ge=1, le=12)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            Settings: Validated settings

        Raises:
            ConfigurationError: If a required variable is absent or a value is invalid
        """
        environ = os.environ if environ is None else environ

        missing = [name for name, _ in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                code=ENV_VARS_MISSING,
            )

        values = {field: environ[name] for name, field in REQUIRED_ENV_VARS}
        # Keys stored in env files carry escaped newlines
        values["private_key"] = values["private_key"].replace("\\n", "\n")
        for name, field in OPTIONAL_ENV_VARS:
            if environ.get(name):
                values[field] = environ[name]

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}", code=ENV_VARS_INVALID) from e


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Result[Settings]:
    """
    Load settings without raising, so startup never fails on bad configuration.

    Args:
        environ: Mapping to read from. Defaults to os.environ.

    Returns:
        Result[Settings]: Settings, or a configuration failure carrying its error code
    """
    try:
        return Result.ok(Settings.from_env(environ))
    except ConfigurationError as e:
        return Result.config_error(str(e), code=e.code)
