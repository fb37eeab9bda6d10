"""Unit tests for PageSession."""
import pytest
from unittest.mock import Mock

from helpers import make_pdf, page_texts
from models.document import SourceDocument
from models.selection import PageSelection
from services.document_assembler import DocumentAssembler
from services.document_loader import DocumentLoader
from services.errors import AssemblyError, DocumentLoadError, InvalidInputError, LoadCancelledError
from services.output_packager import OutputPackager
from services.page_session import PageSession


@pytest.fixture
def session():
    return PageSession()


@pytest.fixture
def loader():
    return DocumentLoader()


class TestPageSession:
    """Test suite for PageSession."""

    def test_load_sets_initial_order(self, session, loader, three_page_pdf):
        source = session.load(loader, three_page_pdf, "doc.pdf")

        assert source is session.source
        assert session.pages_order() == [1, 2, 3]
        assert session.load_progress.percent == 100

    def test_new_load_replaces_document(self, session, loader, three_page_pdf, five_page_pdf):
        session.load(loader, three_page_pdf, "a.pdf")
        session.toggle_page(1)

        session.load(loader, five_page_pdf, "b.pdf")

        assert session.source.filename == "b.pdf"
        assert session.checked_pages == set()
        assert session.generation == 2

    def test_failed_load_leaves_session_empty(self, session, loader, three_page_pdf):
        session.load(loader, three_page_pdf, "a.pdf")

        with pytest.raises(DocumentLoadError):
            session.load(loader, b"garbage", "broken.pdf")

        assert session.source is None
        assert session.pages_order() == []

    def test_rejected_file_type(self, session, loader):
        with pytest.raises(InvalidInputError):
            session.load(loader, b"GIF89a", "cat.gif", "image/gif")
        assert session.source is None

    def test_stale_load_discarded(self, session):
        """A load that completes after the session moved on never replaces the document."""
        loader = Mock()

        def finish_late(*args, **kwargs):
            session.remove()
            return SourceDocument(filename="old.pdf", data=b"", page_count=2)

        loader.load.side_effect = finish_late

        assert session.load(loader, b"%PDF", "old.pdf") is None
        assert session.source is None

    def test_remove_cancels_preview_render(self, session, loader):
        """Removing the file mid-render stops the loader before the next page."""
        def on_progress(percent):
            if percent > 0:
                session.remove()

        session.load_progress.listener = on_progress

        with pytest.raises(LoadCancelledError):
            session.load(loader, make_pdf(3), "doc.pdf", with_previews=True)
        assert session.source is None

    def test_manual_toggle(self, session, loader, five_page_pdf):
        session.load(loader, five_page_pdf, "doc.pdf")
        for index in (4, 0, 2, 0):
            session.toggle_page(index)

        artifacts = session.run_split(DocumentAssembler(), session.manual_selection())

        assert [a.name for a in artifacts] == ["page-3.pdf", "page-5.pdf"]

    def test_toggle_out_of_range(self, session, loader, three_page_pdf):
        session.load(loader, three_page_pdf, "doc.pdf")
        with pytest.raises(InvalidInputError):
            session.toggle_page(3)

    def test_move_page_matches_drag_and_drop(self, session, loader, five_page_pdf):
        session.load(loader, five_page_pdf, "doc.pdf")

        session.move_page(4, 0)
        session.move_page(1, 3)

        assert session.pages_order() == [5, 2, 3, 1, 4]
        artifact = session.run_reorder(DocumentAssembler())
        assert page_texts(artifact.content) == ["Page 5", "Page 2", "Page 3", "Page 1", "Page 4"]

    def test_failed_run_keeps_previous_artifacts(self, session, loader, three_page_pdf):
        session.load(loader, three_page_pdf, "doc.pdf")
        assembler = DocumentAssembler()
        first = session.run_split(assembler, PageSelection.all())

        broken = Mock(spec=DocumentAssembler)
        broken.split.side_effect = AssemblyError("Failed to split the PDF")
        with pytest.raises(AssemblyError):
            session.run_split(broken, Mock())

        assert session.artifacts == first

    def test_download_bundles_artifacts(self, session, loader, three_page_pdf):
        session.load(loader, three_page_pdf, "doc.pdf")
        session.run_split(DocumentAssembler(), PageSelection.all())

        download = session.download(OutputPackager(), "split-pages.zip")

        assert download.filename == "split-pages.zip"

    def test_requires_loaded_document(self, session):
        with pytest.raises(InvalidInputError):
            session.run_reorder(DocumentAssembler())


class TestRemoteReorder:
    """The remote reorder request carries exactly the on-screen order."""

    def test_submit_sends_display_order(self, session, loader, five_page_pdf):
        session.load(loader, five_page_pdf, "doc.pdf")
        session.move_page(0, 4)
        session.move_page(3, 1)

        client = Mock()
        client.reorder.return_value = ("toolverse-reordered_1.pdf", b"%PDF")

        assert session.submit_reorder(client) == ("toolverse-reordered_1.pdf", b"%PDF")
        client.reorder.assert_called_once_with(five_page_pdf, "doc.pdf", [2, 5, 3, 4, 1])
