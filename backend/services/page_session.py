"""Per-session state for the PDF split and reorder tools."""
import logging
from typing import List, Optional, Tuple

from models.artifact import Download, OutputArtifact
from models.document import SourceDocument
from models.progress import Progress
from models.selection import PageSelection
from services.document_assembler import DocumentAssembler
from services.document_loader import DocumentLoader
from services.errors import InvalidInputError
from services.output_packager import OutputPackager
from services.reorder_client import ReorderClient

logger = logging.getLogger(__name__)


class PageSession:
    """
    Owns one uploaded document and everything derived from it.

    Every new load or removal bumps `generation`; a load that finishes after
    its generation was superseded is discarded instead of replacing the
    current document.
    """

    def __init__(self):
        self.generation = 0
        self.source: Optional[SourceDocument] = None
        self.order: List[int] = []  # original 1-based page numbers, display order
        self.checked_pages: set = set()
        self.artifacts: List[OutputArtifact] = []
        self.load_progress = Progress()
        self.run_progress = Progress()

    def load(
        self,
        loader: DocumentLoader,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
        with_previews: bool = False,
    ) -> Optional[SourceDocument]:
        """
        Load a new file, replacing the current document wholesale.

        Returns:
            The loaded document, or None if a newer load superseded this one

        Raises:
            InvalidInputError, DocumentLoadError: The load failed; the session is left empty
        """
        self.generation += 1
        generation = self.generation
        self._clear()

        source = loader.load(
            data,
            filename,
            content_type=content_type,
            with_previews=with_previews,
            progress=self.load_progress,
            is_cancelled=lambda: generation != self.generation,
        )

        if generation != self.generation:
            logger.info(f"Discarding stale load of {filename} (generation {generation})")
            return None

        self.source = source
        self.order = list(range(1, source.page_count + 1))
        return source

    def remove(self) -> None:
        """Discard the document and any in-flight load."""
        self.generation += 1
        self._clear()

    def toggle_page(self, index: int) -> None:
        """Check or uncheck a zero-based page for manual selection."""
        self._require_source()
        if not 0 <= index < self.source.page_count:
            raise InvalidInputError(f"Page index {index} is outside the document")
        self.checked_pages ^= {index}

    def manual_selection(self) -> PageSelection:
        return PageSelection.manual(self.checked_pages)

    def move_page(self, old_position: int, new_position: int) -> None:
        """Move the thumbnail at `old_position` to `new_position` (drag and drop)."""
        self._require_source()
        size = len(self.order)
        if not (0 <= old_position < size and 0 <= new_position < size):
            raise InvalidInputError("Position is outside the page list")
        page = self.order.pop(old_position)
        self.order.insert(new_position, page)

    def pages_order(self) -> List[int]:
        """Current on-screen order as original 1-based page numbers."""
        return list(self.order)

    def run_split(self, assembler: DocumentAssembler, selection: PageSelection) -> List[OutputArtifact]:
        """Run a split; artifacts of earlier runs survive a failed run."""
        self._require_source()
        artifacts = assembler.split(self.source, selection, progress=self.run_progress)
        self.artifacts = artifacts
        return artifacts

    def run_reorder(self, assembler: DocumentAssembler, pages_order: Optional[List[int]] = None) -> OutputArtifact:
        self._require_source()
        order = self.pages_order() if pages_order is None else pages_order
        artifact = assembler.reorder(self.source, order, progress=self.run_progress)
        self.artifacts = [artifact]
        return artifact

    def submit_reorder(self, client: ReorderClient) -> Tuple[str, bytes]:
        """Send the document and the on-screen page order to the reorder server."""
        self._require_source()
        return client.reorder(self.source.data, self.source.filename, self.pages_order())

    def download(self, packager: OutputPackager, archive_name: str) -> Download:
        return packager.package(self.artifacts, archive_name)

    def _require_source(self) -> None:
        if self.source is None:
            raise InvalidInputError("No PDF file has been loaded")

    def _clear(self) -> None:
        self.source = None
        self.order = []
        self.checked_pages = set()
        self.artifacts = []
        self.load_progress.reset()
        self.run_progress.reset()
