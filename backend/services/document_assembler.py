"""Document assembler: copies selected pages into new PDF documents."""
import logging
import time
from typing import List, Optional
import fitz  # PyMuPDF

from config import REORDER_FILE_PREFIX
from models.artifact import OutputArtifact
from models.document import SourceDocument
from models.progress import Progress
from models.selection import PageSelection
from services.errors import AssemblyError, EmptySelectionError
from services.page_selection import PageSelectionResolver

logger = logging.getLogger(__name__)

MERGED_FILENAME = "merged.pdf"


def page_filename(index: int) -> str:
    """Name of a single-page output for zero-based `index`."""
    return f"page-{index + 1}.pdf"


def reorder_filename(timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{REORDER_FILE_PREFIX}_{timestamp_ms}.pdf"


class DocumentAssembler:
    """Builds output PDFs from page selections of a source document."""

    def __init__(self, resolver: Optional[PageSelectionResolver] = None):
        self.resolver = resolver or PageSelectionResolver()

    def split(
        self,
        source: SourceDocument,
        selection: PageSelection,
        progress: Optional[Progress] = None,
    ) -> List[OutputArtifact]:
        """
        Split a document according to the selection.

        All and Manual modes, and Range/each, produce one `page-{n}.pdf` per
        selected page. Range/group produces a single `merged.pdf` with the
        pages in token order.

        Returns:
            Artifacts for this run; nothing is returned if any unit fails

        Raises:
            RangeExpressionError, EmptySelectionError: Invalid selection
            AssemblyError: Copying or saving a page failed
        """
        resolved = self.resolver.resolve(selection, source.page_count)
        indices = resolved.flatten()
        if not indices:
            raise EmptySelectionError(
                f"No selected page is within the document (pages 1-{source.page_count})",
                {"page_count": source.page_count},
            )

        if progress:
            progress.reset()

        with self._open_source(source) as original:
            if resolved.merged:
                artifacts = [self._build(original, indices, MERGED_FILENAME)]
                if progress:
                    progress.update(1, 1)
            else:
                artifacts = []
                for done, index in enumerate(indices, start=1):
                    artifacts.append(self._build(original, [index], page_filename(index)))
                    if progress:
                        progress.update(done, len(indices))
                    logger.debug(f"Extracted page {index + 1} ({done}/{len(indices)})")

        logger.info(
            f"Split {source.filename} ({selection.mode.value}) into {len(artifacts)} file(s)",
            extra={"tool": "pdf-split", "pages": len(indices)},
        )
        return artifacts

    def reorder(
        self,
        source: SourceDocument,
        pages_order: List[int],
        progress: Optional[Progress] = None,
        timestamp_ms: Optional[int] = None,
    ) -> OutputArtifact:
        """
        Recombine a document with its pages in a new order.

        Args:
            source: Loaded source document
            pages_order: Original 1-based page numbers in the new order
            progress: Updated after each copied page
            timestamp_ms: Suffix for the output name (defaults to now)

        Returns:
            Single artifact named `toolverse-reordered_{timestamp}.pdf`
        """
        indices = self.resolver.validate_order(pages_order, source.page_count)

        if progress:
            progress.reset()

        with self._open_source(source) as original:
            artifact = self._build(original, indices, reorder_filename(timestamp_ms), progress)

        logger.info(
            f"Reordered {source.filename}: {len(indices)} pages",
            extra={"tool": "pdf-reorder", "pages": len(indices)},
        )
        return artifact

    def _open_source(self, source: SourceDocument):
        try:
            return fitz.open(stream=source.data, filetype="pdf")
        except Exception as e:
            logger.error(f"Failed to reopen {source.filename}: {str(e)}")
            raise AssemblyError("Could not read the PDF file", {"filename": source.filename}) from e

    def _build(
        self,
        original,
        indices: List[int],
        name: str,
        progress: Optional[Progress] = None,
    ) -> OutputArtifact:
        """Copy `indices` from `original` into a new document, in that order."""
        try:
            with fitz.open() as new_pdf:
                for done, index in enumerate(indices, start=1):
                    new_pdf.insert_pdf(original, from_page=index, to_page=index)
                    if progress:
                        progress.update(done, len(indices))
                content = new_pdf.tobytes(garbage=3, deflate=True)
        except Exception as e:
            logger.error(f"Failed to assemble {name}: {str(e)}", exc_info=True)
            raise AssemblyError("Failed to split the PDF", {"output": name}) from e

        return OutputArtifact(name=name, content=content)
