import logging
from dataclasses import dataclass, field
from typing import Any, List

from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from config import Settings

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass
class RawSheet:
    """
    Values of one named range: the first row as headers, the rest as data rows.

    Rows may be shorter than the header row when trailing cells are empty.
    """
    headers: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)

    def all_rows(self) -> List[List[Any]]:
        """Header row followed by the data rows, for sheets without a real header."""
        if not self.headers and not self.rows:
            return []
        return [list(self.headers)] + self.rows


def get_sheets_service(settings: Settings):
    """
    Build a read-only Google Sheets service from the configured service account.

    Args:
        settings: Validated settings carrying the service account email and key

    Returns:
        googleapiclient Resource for the Sheets v4 API
    """
    service_account_info = {
        "type": "service_account",
        "client_email": settings.service_account_email,
        "private_key": settings.private_key,
        "token_uri": TOKEN_URI,
    }
    creds = Credentials.from_service_account_info(service_account_info, scopes=SCOPES)
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def fetch_sheet(service, spreadsheet_id: str, range_name: str) -> RawSheet:
    """
    Fetch one named range as unformatted values.

    Errors from the API (googleapiclient.errors.HttpError) propagate to the caller.

    Args:
        service: Sheets API resource
        spreadsheet_id: Spreadsheet identifier
        range_name: A1 notation range, e.g. "Employees!A1:ZZ2000"

    Returns:
        RawSheet: Header row and data rows, both empty when the range has no values
    """
    logger.info("Fetching sheet range", extra={"range": range_name})
    resp = service.spreadsheets().values().get(
        spreadsheetId=spreadsheet_id,
        range=range_name,
        valueRenderOption="UNFORMATTED_VALUE",
        dateTimeRenderOption="FORMATTED_STRING",
    ).execute()

    values = resp.get("values", []) if resp else []
    if not values:
        logger.warning("Sheet range returned no values", extra={"range": range_name})
        return RawSheet()

    headers = ["" if cell is None else str(cell) for cell in values[0]]
    rows = [list(row) for row in values[1:]]
    logger.info(
        "Fetched sheet range",
        extra={"range": range_name, "column_count": len(headers), "row_count": len(rows)},
    )
    return RawSheet(headers=headers, rows=rows)
