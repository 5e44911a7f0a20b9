from fastapi import FastAPI, Request, Response, status
import os
import logging
from datetime import datetime, timezone
from dotenv import load_dotenv
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import load_settings
from report_service import ReportProcessor

# Load a local .env file before the settings are read
load_dotenv()

# Create logs directory if it doesn't exist
log_dir = os.getenv("LOG_DIR") or os.path.join(os.path.dirname(os.path.abspath(__file__)), "logs")
os.makedirs(log_dir, exist_ok=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Add file handler to write logs to file
log_file_path = os.path.join(log_dir, f"app_{datetime.now().strftime('%Y%m%d')}.log")
file_handler = logging.FileHandler(log_file_path)
file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
logging.getLogger().addHandler(file_handler)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
FETCH_ERROR_MESSAGE = "Failed to fetch employee data"

# Settings are read once; a configuration failure is reported on every request
settings_result = load_settings()
if settings_result.is_failure():
    logger.error(f"Service is not configured: {settings_result.error}")

# Initialize FastAPI app with metadata
app = FastAPI(
    title="Follower Growth Report API",
    description="API reporting employee and business-line follower growth from Google Sheets",
    version="2.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.middleware("http")
async def add_cors_headers(request: Request, call_next):
    """Allow cross-origin GET requests on every response."""
    response = await call_next(request)
    for header, value in CORS_HEADERS.items():
        response.headers[header] = value
    return response


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Methods outside the route's list get the report endpoint's own 405 body."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED and request.url.path == "/api/employees":
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": "Method not allowed"}
        )
    return await http_exception_handler(request, exc)


def get_report_processor() -> ReportProcessor:
    return ReportProcessor(settings_result.data)


# API Endpoints
@app.api_route(
    "/api/employees",
    methods=["GET", "OPTIONS", "HEAD", "POST", "PUT", "PATCH", "DELETE"],
    tags=["Reports"]
)
def get_employee_report(request: Request):
    """
    Get the follower growth report.

    Reads the roster (and, when enabled, the business-line totals) from the
    configured spreadsheet and returns per-employee metrics, monthly winners
    and a summary.

    Returns:
        dict: JSON response with:
            - employees: Included employees with their series and metrics
            - businessLines: Business lines with metrics (only with business-line aggregation)
            - monthlyWinners: Winners per period, grouped by entity kind when business lines are on
            - summary: Totals, average growth rate and top grower
    """
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_200_OK)
    if request.method != "GET":
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": "Method not allowed"}
        )

    if settings_result.is_failure():
        logger.error(f"Rejecting report request: {settings_result.error}")
        return JSONResponse(
            status_code=settings_result.status_code.value,
            content=settings_result.to_error_body(FETCH_ERROR_MESSAGE)
        )

    result = get_report_processor().build_report()

    # Single exit point
    if result.is_failure():
        logger.error(f"[employees API] Error: {result}")
        return JSONResponse(
            status_code=result.status_code.value,
            content=result.to_error_body(FETCH_ERROR_MESSAGE)
        )
    return result.data.to_payload()


@app.get("/api/hello", tags=["Health"])
def hello():
    """Liveness check."""
    return {"ok": True, "now": datetime.now(timezone.utc).isoformat()}


# Run the application if executed directly
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Follower Growth Report API in development mode.")
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
