"""Main entry point for the Toolverse utility API."""
import json
import logging
from dataclasses import asdict
from datetime import date
from typing import List, Optional
from fastapi import FastAPI, File, Form, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from config import (
    CORS_ORIGINS,
    DEFAULT_IMAGE_QUALITY,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_UPLOAD_BYTES,
    MAX_UPLOAD_MB,
    PORT,
    SPLIT_ARCHIVE_NAME,
)
from logger import setup_logging
from models.api import AgeResult, DateDiffResult, PreviewPage, PreviewResponse
from models.artifact import Download
from models.selection import PageSelection, RangeMode, SelectionMode
from services.date_calculator import DateCalculator, parse_date
from services.document_assembler import DocumentAssembler
from services.document_loader import DocumentLoader
from services.errors import InvalidInputError, ToolServiceError, UpstreamError
from services.image_converter import ImageConverter
from services.image_pdf_builder import ImagePdfBuilder
from services.ip_lookup import IPLookupClient
from services.output_packager import OutputPackager
from services.page_session import PageSession

# Initialize logging
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Toolverse",
    description="Date, image, PDF and IP utilities",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Failed-Files"],
)

# Initialize services (will be done on startup)
document_loader: DocumentLoader = None
document_assembler: DocumentAssembler = None
output_packager: OutputPackager = None
image_converter: ImageConverter = None
image_pdf_builder: ImagePdfBuilder = None
date_calculator: DateCalculator = None
ip_client: IPLookupClient = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup."""
    global document_loader, document_assembler, output_packager
    global image_converter, image_pdf_builder, date_calculator, ip_client

    if LOG_FORMAT == "json":
        setup_logging(LOG_LEVEL)

    logger.info("Initializing Toolverse services...")

    try:
        document_loader = DocumentLoader()
        document_assembler = DocumentAssembler()
        output_packager = OutputPackager()
        logger.info("Initialized PDF workflow")

        image_converter = ImageConverter(output_packager)
        image_pdf_builder = ImagePdfBuilder()
        logger.info("Initialized image tools")

        date_calculator = DateCalculator()
        ip_client = IPLookupClient()

        logger.info("All services initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize services: {e}", exc_info=True)
        raise


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Toolverse API"}


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "service": "toolverse",
        "version": "1.0.0"
    }


# ---------------------------------------------------------------------------
# IP lookup
# ---------------------------------------------------------------------------

@app.get("/api/ip-proxy")
def ip_proxy(ip: Optional[str] = Query(None)):
    """Proxy a geolocation lookup for `ip` so the API token stays server-side."""
    if not ip:
        return JSONResponse({"error": "Missing IP"}, status_code=400)

    try:
        return JSONResponse(ip_client.lookup(ip))
    except InvalidInputError as e:
        return JSONResponse({"error": e.error.message}, status_code=400)
    except UpstreamError:
        return JSONResponse({"error": "Failed to fetch data"}, status_code=500)


@app.get("/api/ip/me")
def my_ip():
    """Geolocation of the address this service calls out from."""
    try:
        return JSONResponse(ip_client.lookup_self())
    except UpstreamError:
        return JSONResponse({"error": "Failed to fetch data"}, status_code=500)


# ---------------------------------------------------------------------------
# PDF tools
# ---------------------------------------------------------------------------

@app.post("/api/pdf/preview", response_model=PreviewResponse)
def pdf_preview(file: UploadFile = File(...)):
    """Page count and one thumbnail per page, for manual selection and reordering."""
    try:
        data = _read_upload(file)
        session = PageSession()
        source = session.load(document_loader, data, file.filename, file.content_type, with_previews=True)

        return PreviewResponse(
            filename=source.filename,
            page_count=source.page_count,
            pages=[
                PreviewPage(
                    page_number=preview.page_number,
                    width=preview.width,
                    height=preview.height,
                    image=preview.data_url()
                )
                for preview in source.previews
            ]
        )
    except ToolServiceError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected_error("rendering PDF preview", e)


@app.post("/api/pdf/split")
def pdf_split(
    file: UploadFile = File(...),
    mode: str = Form("all"),
    range_expression: str = Form("", alias="range"),
    rangeMode: str = Form("group"),
    pages: str = Form("[]"),
):
    """
    Split a PDF.

    Modes:
    - all: one PDF per page
    - range: `range` expression such as "1-3,5"; `rangeMode` "group" merges
      everything into merged.pdf, "each" makes one PDF per page
    - manual: `pages` is a JSON list of zero-based page indices

    Several outputs are returned as split-pages.zip.
    """
    try:
        selection = _build_selection(mode, range_expression, rangeMode, pages)
        data = _read_upload(file)

        session = PageSession()
        session.load(document_loader, data, file.filename, file.content_type)
        session.run_split(document_assembler, selection)

        return _download_response(session.download(output_packager, SPLIT_ARCHIVE_NAME))
    except ToolServiceError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected_error("splitting PDF", e)


@app.post("/api/pdf/reorder")
def pdf_reorder(file: UploadFile = File(...), pagesOrder: str = Form(...)):
    """Rebuild a PDF with its pages in `pagesOrder` (JSON list of original 1-based page numbers)."""
    try:
        try:
            order = json.loads(pagesOrder)
        except ValueError as e:
            raise InvalidInputError("pagesOrder must be a JSON array of page numbers") from e
        if not isinstance(order, list):
            raise InvalidInputError("pagesOrder must be a JSON array of page numbers")

        data = _read_upload(file)

        session = PageSession()
        session.load(document_loader, data, file.filename, file.content_type)
        artifact = session.run_reorder(document_assembler, order)

        return _download_response(Download(artifact.name, artifact.content, artifact.media_type))
    except ToolServiceError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected_error("reordering PDF", e)


# ---------------------------------------------------------------------------
# Image tools
# ---------------------------------------------------------------------------

@app.post("/api/image/convert")
def image_convert(files: List[UploadFile] = File(...), target_format: str = Form("PNG", alias="format")):
    """Convert one or more images; several results come back as converted_images.zip."""
    try:
        uploads = []
        for upload in files:
            if not _is_image(upload):
                raise InvalidInputError("Only image files are supported", {"filename": upload.filename})
            uploads.append((upload.filename, _read_upload(upload)))

        items = image_converter.convert_batch(uploads, target_format)
        download = image_converter.download(items)

        failed = [item.filename for item in items if item.status == "error"]
        headers = {"X-Failed-Files": json.dumps(failed)} if failed else None
        return _download_response(download, headers)
    except ToolServiceError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected_error("converting images", e)


@app.post("/api/image/to-pdf")
def image_to_pdf(
    files: List[UploadFile] = File(...),
    pageSize: str = Form("auto"),
    quality: int = Form(DEFAULT_IMAGE_QUALITY),
    resizeRatio: int = Form(100),
    filename: str = Form("converted"),
):
    """Pack images into one PDF, one image per page, in upload order."""
    try:
        uploads = []
        for upload in files:
            if not _is_image(upload):
                raise InvalidInputError("Only image files are supported", {"filename": upload.filename})
            uploads.append((upload.filename, _read_upload(upload)))

        artifact = image_pdf_builder.build(
            uploads,
            page_size=pageSize,
            quality=quality,
            resize_ratio=resizeRatio,
            filename=filename
        )
        return _download_response(Download(artifact.name, artifact.content, artifact.media_type))
    except ToolServiceError as e:
        return _error_response(e)
    except Exception as e:
        return _unexpected_error("creating PDF from images", e)


# ---------------------------------------------------------------------------
# Date tools
# ---------------------------------------------------------------------------

@app.get("/api/date/age", response_model=AgeResult)
async def date_age(birth: str = Query(...), target: Optional[str] = Query(None)):
    """Age on `target` (default today) for someone born on `birth`."""
    try:
        birth_date = parse_date(birth, "birth")
        target_date = parse_date(target, "target") if target else None
        return date_calculator.age(birth_date, target_date)
    except ToolServiceError as e:
        return _error_response(e)


@app.get("/api/date/diff", response_model=DateDiffResult)
async def date_diff(start: str = Query(...), end: Optional[str] = Query(None)):
    """Difference between two dates; `end` defaults to today."""
    try:
        start_date = parse_date(start, "start")
        end_date = parse_date(end, "end") if end else date.today()
        return date_calculator.diff(start_date, end_date)
    except ToolServiceError as e:
        return _error_response(e)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_upload(upload: UploadFile) -> bytes:
    data = upload.file.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise InvalidInputError(
            f"File exceeds the {MAX_UPLOAD_MB}MB limit",
            {"filename": upload.filename, "size": len(data)}
        )
    return data


def _is_image(upload: UploadFile) -> bool:
    """Browsers label images image/*; unlabeled uploads are left to the decoder."""
    content_type = (upload.content_type or "").lower()
    return not content_type or content_type.startswith("image/") or content_type == "application/octet-stream"


def _build_selection(mode: str, range_expression: str, range_mode: str, pages: str) -> PageSelection:
    try:
        selection_mode = SelectionMode(mode.lower())
    except ValueError as e:
        raise InvalidInputError(f"Unknown split mode: {mode}", {"supported": [m.value for m in SelectionMode]}) from e

    if selection_mode == SelectionMode.ALL:
        return PageSelection.all()

    if selection_mode == SelectionMode.RANGE:
        try:
            return PageSelection.range(range_expression, RangeMode(range_mode.lower()))
        except ValueError as e:
            raise InvalidInputError(f"Unknown range mode: {range_mode}") from e

    try:
        indices = json.loads(pages or "[]")
    except ValueError as e:
        raise InvalidInputError("pages must be a JSON array of page indices") from e
    if not isinstance(indices, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in indices):
        raise InvalidInputError("pages must be a JSON array of page indices")
    return PageSelection.manual(indices)


def _download_response(download: Download, headers: Optional[dict] = None) -> Response:
    response_headers = {"Content-Disposition": f'attachment; filename="{download.filename}"'}
    if headers:
        response_headers.update(headers)
    return Response(content=download.content, media_type=download.media_type, headers=response_headers)


def _error_response(e: ToolServiceError) -> JSONResponse:
    logger.warning(f"{e.error.code}: {e.error.message}")
    return JSONResponse({"error": asdict(e.error)}, status_code=e.status_code)


def _unexpected_error(action: str, e: Exception) -> JSONResponse:
    logger.error(f"Unexpected error {action}: {e}", exc_info=True)
    return JSONResponse(
        {"error": {"code": "UNKNOWN_ERROR", "message": f"Internal server error: {str(e)}", "details": {}}},
        status_code=500
    )


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Starting Toolverse API on port {PORT}")
    uvicorn.run(app, host="0.0.0.0", port=PORT)
