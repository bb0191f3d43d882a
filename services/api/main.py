"""FastAPI application for the invoice ledger.

Production-ready API with:
- Health and readiness checks for Kubernetes
- Filtered, sorted, paginated invoice table
- CSV download of the filtered collection
- Invoice scanning through the extraction provider
- Column customization
- Prometheus metrics for monitoring

Based on FastAPI best practices:
https://fastapi.tiangolo.com/
"""

import logging
import time
from datetime import date
from typing import Literal

from fastapi import FastAPI, File, HTTPException, Query, Request, Response, UploadFile, status
from pydantic import BaseModel

from services.api import metrics
from services.api.workspace import InvoiceWorkspace
from services.extraction.base import to_data_uri
from services.extraction.factory import create_extraction_service
from services.ledger.collection import RecordNotFoundError
from services.ledger.columns import ColumnDescriptor
from services.ledger.filters import DateRange, FilterState
from services.ledger.paging import clamp_page, total_pages
from services.ledger.schema import InvoiceRecord
from services.ledger.service import LedgerService, LedgerView
from services.shared.config import get_settings

settings = get_settings()
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Invoice Ledger",
    description="Invoice table, scanning, and CSV export API",
    version=settings.service_version,
)

workspace = InvoiceWorkspace()
ledger_service = LedgerService(settings)
extraction_service = create_extraction_service(settings)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Middleware to collect request metrics.

    Tracks:
    - Request count by method, endpoint, and status
    - Request duration by method and endpoint
    """
    # Skip metrics for /metrics endpoint itself
    if request.url.path == "/metrics":
        return await call_next(request)

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    metrics.http_requests_total.labels(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
    ).inc()

    metrics.http_request_duration_seconds.labels(
        method=request.method,
        endpoint=request.url.path,
    ).observe(duration)

    return response


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool


class ScanResponse(BaseModel):
    """Invoice scan response."""

    invoice: InvoiceRecord
    provider: str


class VisibilityUpdate(BaseModel):
    """Column visibility toggle."""

    is_visible: bool


def _filter_state(search: str, start: date | None, end: date | None) -> FilterState:
    """Build filter state from query parameters.

    Raises:
        HTTPException: 400 if an end date is given without a start date
    """
    if end is not None and start is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'end' requires 'start'",
        )
    date_range = DateRange(start=start, end=end) if start is not None else None
    return FilterState(search=search, date_range=date_range)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check() -> HealthResponse:
    """Health check endpoint for liveness probe.

    Returns:
        Health status information
    """
    return HealthResponse(
        status="healthy", version=settings.service_version, service=settings.service_name
    )


@app.get("/ready", response_model=ReadinessResponse, tags=["Health"])
def readiness_check() -> ReadinessResponse:
    """Readiness check endpoint for Kubernetes readiness probe.

    Returns:
        Readiness status
    """
    return ReadinessResponse(ready=True)


@app.get("/metrics", tags=["Monitoring"])
def get_metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns:
        Prometheus metrics in text format
    """
    metrics_data, content_type = metrics.get_metrics()
    return Response(content=metrics_data, media_type=content_type)


@app.get("/api/v1/invoices", response_model=LedgerView, tags=["Invoices"])
def list_invoices(
    search: str = Query("", description="Matches customer name or invoice number"),
    start: date | None = Query(None, description="First day of the date range (inclusive)"),
    end: date | None = Query(None, description="Last day of the date range (inclusive)"),
    page: int = Query(1, description="Page number; clamped into the available pages"),
) -> LedgerView:
    """Return one page of the invoice table.

    Records are filtered, sorted newest first (invalid dates last), and sliced
    into pages of ``APP_PAGE_SIZE``. Cells are formatted exactly as the CSV
    export writes them.

    Raises:
        HTTPException: 400 if ``end`` is given without ``start``
    """
    filters = _filter_state(search, start, end)
    selected = ledger_service.select(workspace.records, filters)
    page = clamp_page(page, total_pages(len(selected), settings.page_size))
    return ledger_service.render_page(selected, workspace.columns, page)


@app.get("/api/v1/invoices/export", tags=["Invoices"])
def export_invoices(
    search: str = Query("", description="Matches customer name or invoice number"),
    start: date | None = Query(None, description="First day of the date range (inclusive)"),
    end: date | None = Query(None, description="Last day of the date range (inclusive)"),
) -> Response:
    """Download every invoice matching the filters as CSV.

    Pagination is ignored. The file starts with a UTF-8 byte order mark and
    uses the configured decimal separator for currency and percentage cells.

    ## Usage Example

    ```bash
    curl -OJ "http://localhost:8000/api/v1/invoices/export?search=acme"
    ```

    Raises:
        HTTPException: 400 if ``end`` is given without ``start``
    """
    filters = _filter_state(search, start, end)
    export = ledger_service.export(workspace.records, workspace.columns, filters)

    metrics.invoice_exports_total.inc()
    metrics.exported_rows.observe(export.row_count)

    return Response(
        content=export.encode(),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


@app.post(
    "/api/v1/invoices",
    response_model=InvoiceRecord,
    status_code=status.HTTP_201_CREATED,
    tags=["Invoices"],
)
def create_invoice(invoice: InvoiceRecord) -> InvoiceRecord:
    """Add a manually entered invoice.

    Any ``id`` in the body is ignored; the service assigns one together with
    the owner.
    """
    return workspace.create(invoice, owner_id=settings.default_owner_id)


@app.put("/api/v1/invoices/{invoice_id}", response_model=InvoiceRecord, tags=["Invoices"])
def replace_invoice(invoice_id: str, invoice: InvoiceRecord) -> InvoiceRecord:
    """Replace an invoice wholesale.

    Raises:
        HTTPException: 404 if the invoice does not exist
    """
    try:
        return workspace.replace(invoice_id, invoice)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@app.delete(
    "/api/v1/invoices/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Invoices"],
)
def delete_invoice(invoice_id: str) -> Response:
    """Delete an invoice.

    Raises:
        HTTPException: 404 if the invoice does not exist
    """
    try:
        workspace.remove(invoice_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.post(
    "/api/v1/invoices/scan",
    response_model=ScanResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Invoices"],
)
async def scan_invoice(
    file: UploadFile = File(..., description="Invoice image (PNG, JPEG, etc.)"),  # noqa: B008
) -> ScanResponse:
    """Scan an invoice image and add the extracted invoice to the ledger.

    ## Usage Example

    ```bash
    curl -X POST "http://localhost:8000/api/v1/invoices/scan" \\
      -F "file=@invoice.png"
    ```

    ## Requirements

    - **File Types**: any ``image/*`` content type
    - **Max Size**: 10MB (configurable via ``APP_MAX_UPLOAD_BYTES``)
    - **Extraction**: Requires `OPENAI_API_KEY` environment variable

    ## Error Handling

    - Returns 400 if file is invalid, empty, or wrong type
    - Returns 413 if file exceeds the upload limit
    - Returns 502 if the extraction provider fails

    Args:
        file: Invoice image to scan (required)

    Returns:
        The stored invoice and the provider that extracted it

    Raises:
        HTTPException: If the file is invalid or extraction fails
    """
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No filename provided")

    if not file.content_type or not file.content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type: {file.content_type}. Only images are supported.",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")

    metrics.scan_upload_size_bytes.observe(len(content))

    if len(content) > settings.max_upload_bytes:
        metrics.invoice_scans_total.labels(status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {settings.max_upload_bytes} bytes",
        )

    extraction_start = time.time()
    result = extraction_service.extract_invoice(to_data_uri(content, file.content_type))
    metrics.extraction_processing_duration_seconds.observe(time.time() - extraction_start)

    if not result.success or result.invoice is None:
        metrics.invoice_scans_total.labels(status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Invoice extraction failed: {result.error}",
        )

    metrics.invoice_scans_total.labels(status="success").inc()
    record = workspace.create(result.invoice.to_draft(), owner_id=settings.default_owner_id)
    return ScanResponse(invoice=record, provider=result.provider)


@app.get("/api/v1/columns", response_model=list[ColumnDescriptor], tags=["Columns"])
def list_columns() -> list[ColumnDescriptor]:
    """Return the column configuration in display order."""
    return list(workspace.columns)


@app.put("/api/v1/columns", response_model=list[ColumnDescriptor], tags=["Columns"])
def replace_columns(columns: list[ColumnDescriptor]) -> list[ColumnDescriptor]:
    """Replace the whole column configuration (order and visibility)."""
    return list(workspace.set_columns(columns))


@app.post("/api/v1/columns/{key}/move", response_model=list[ColumnDescriptor], tags=["Columns"])
def move_column(
    key: str,
    direction: Literal["up", "down"] = Query(..., description="'up' moves towards the front"),
) -> list[ColumnDescriptor]:
    """Move a column one position. Moving past either end is a no-op.

    Raises:
        HTTPException: 404 if no column has that key
    """
    try:
        return list(workspace.move_column(key, direction))
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown column: {key}"
        ) from e


@app.put(
    "/api/v1/columns/{key}/visibility",
    response_model=list[ColumnDescriptor],
    tags=["Columns"],
)
def set_column_visibility(key: str, update: VisibilityUpdate) -> list[ColumnDescriptor]:
    """Show or hide a column.

    Raises:
        HTTPException: 404 if no column has that key
    """
    try:
        return list(workspace.set_column_visibility(key, update.is_visible))
    except KeyError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown column: {key}"
        ) from e
