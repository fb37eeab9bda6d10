"""Document loading service for PDF processing."""
import logging
from typing import Callable, List, Optional
import fitz  # PyMuPDF

from config import PREVIEW_SCALE
from models.document import PagePreview, SourceDocument
from models.progress import Progress
from services.errors import DocumentLoadError, InvalidInputError, LoadCancelledError

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"


def is_pdf(filename: str, content_type: Optional[str] = None) -> bool:
    """Accept a file when either its MIME type or its extension says PDF."""
    if content_type and content_type.split(";")[0].strip().lower() == PDF_MEDIA_TYPE:
        return True
    return bool(filename) and filename.lower().endswith(".pdf")


class DocumentLoader:
    """Opens an uploaded PDF, counts its pages and renders thumbnails."""

    def __init__(self, preview_scale: float = PREVIEW_SCALE):
        """
        Initialize DocumentLoader.

        Args:
            preview_scale: Render scale for page thumbnails (1.0 = 72 dpi)
        """
        self.preview_scale = preview_scale

    def load(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        with_previews: bool = False,
        progress: Optional[Progress] = None,
        is_cancelled: Optional[Callable[[], bool]] = None,
    ) -> SourceDocument:
        """
        Load a single PDF file and optionally rasterize every page.

        Args:
            data: Raw file bytes
            filename: Original filename
            content_type: MIME type reported by the client, if any
            with_previews: Render one thumbnail per page
            progress: Updated after each rendered page
            is_cancelled: Checked between pages; a True result aborts the load

        Returns:
            SourceDocument with page count and previews

        Raises:
            InvalidInputError: If the file is not a PDF or is empty
            DocumentLoadError: If parsing or rendering fails
            LoadCancelledError: If is_cancelled() turned True mid-load
        """
        if not is_pdf(filename, content_type):
            logger.warning(f"Rejected non-PDF upload: {filename} ({content_type})")
            raise InvalidInputError("Only PDF files are supported", {"filename": filename})
        if not data:
            raise InvalidInputError("Uploaded file is empty", {"filename": filename})

        if progress:
            progress.reset()

        try:
            pdf_document = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to open PDF {filename}: {str(e)}")
            raise DocumentLoadError("Could not read the PDF file", {"filename": filename}) from e

        try:
            if pdf_document.needs_pass:
                raise DocumentLoadError("Encrypted PDFs are not supported", {"filename": filename})

            page_count = pdf_document.page_count
            if page_count == 0:
                raise DocumentLoadError("PDF has no pages", {"filename": filename})

            previews: List[PagePreview] = []
            if with_previews:
                previews = self._render_previews(pdf_document, filename, progress, is_cancelled)
            elif progress:
                progress.update(1, 1)

            logger.info(f"Loaded {filename}: {page_count} pages")
            return SourceDocument(
                filename=filename,
                data=data,
                page_count=page_count,
                previews=previews,
            )
        except (DocumentLoadError, LoadCancelledError):
            raise
        except Exception as e:
            logger.error(f"Failed to load PDF {filename}: {str(e)}", exc_info=True)
            raise DocumentLoadError("Could not render the PDF file", {"filename": filename}) from e
        finally:
            pdf_document.close()

    def _render_previews(
        self,
        pdf_document,
        filename: str,
        progress: Optional[Progress],
        is_cancelled: Optional[Callable[[], bool]],
    ) -> List[PagePreview]:
        matrix = fitz.Matrix(self.preview_scale, self.preview_scale)
        total = pdf_document.page_count
        previews = []

        for page_num in range(total):
            if is_cancelled and is_cancelled():
                logger.info(f"Load of {filename} superseded after {page_num} pages")
                raise LoadCancelledError("Load superseded by a newer file", {"filename": filename})

            pixmap = pdf_document[page_num].get_pixmap(matrix=matrix, alpha=False)
            previews.append(PagePreview(
                page_number=page_num + 1,  # 1-indexed
                image=pixmap.tobytes("png"),
                width=pixmap.width,
                height=pixmap.height,
            ))

            if progress:
                progress.update(page_num + 1, total)
            logger.debug(f"Rendered page {page_num + 1}/{total} of {filename}")

        return previews
