"""Unit tests for DocumentAssembler."""
import pytest
from unittest.mock import patch

import fitz

from helpers import page_texts
from models.progress import Progress
from models.selection import PageSelection, RangeMode
from services.document_assembler import DocumentAssembler, page_filename, reorder_filename
from services.document_loader import DocumentLoader
from services.errors import AssemblyError, EmptySelectionError, InvalidInputError, RangeExpressionError


@pytest.fixture
def assembler():
    return DocumentAssembler()


@pytest.fixture
def source(five_page_pdf):
    return DocumentLoader().load(five_page_pdf, "doc.pdf")


class TestSplit:
    """Test suite for DocumentAssembler.split."""

    def test_all_mode_one_file_per_page(self, assembler, source):
        artifacts = assembler.split(source, PageSelection.all())

        assert [a.name for a in artifacts] == [f"page-{n}.pdf" for n in range(1, 6)]
        assert page_texts(artifacts[2].content) == ["Page 3"]

    def test_range_group_mode_merges(self, assembler, source):
        """'1-2,4' in group mode gives merged.pdf with pages [0, 1, 3]."""
        artifacts = assembler.split(source, PageSelection.range("1-2,4", RangeMode.GROUP))

        assert len(artifacts) == 1
        assert artifacts[0].name == "merged.pdf"
        assert page_texts(artifacts[0].content) == ["Page 1", "Page 2", "Page 4"]

    def test_range_group_keeps_token_order(self, assembler, source):
        artifacts = assembler.split(source, PageSelection.range("5,1-2", RangeMode.GROUP))
        assert page_texts(artifacts[0].content) == ["Page 5", "Page 1", "Page 2"]

    def test_range_each_mode(self, assembler, source):
        artifacts = assembler.split(source, PageSelection.range("1-2,4", RangeMode.EACH))

        assert [a.name for a in artifacts] == ["page-1.pdf", "page-2.pdf", "page-4.pdf"]
        assert [page_texts(a.content) for a in artifacts] == [["Page 1"], ["Page 2"], ["Page 4"]]

    def test_out_of_range_only_selection_rejected(self, assembler, source):
        """'7' on a 5-page document yields no pages, so nothing is assembled."""
        with pytest.raises(EmptySelectionError) as exc_info:
            assembler.split(source, PageSelection.range("7", RangeMode.EACH))

        assert exc_info.value.error.code == "EMPTY_SELECTION"
        assert "within the document (pages 1-5)" in str(exc_info.value)

    def test_out_of_range_token_dropped(self, assembler, source):
        artifacts = assembler.split(source, PageSelection.range("2,7", RangeMode.EACH))
        assert [a.name for a in artifacts] == ["page-2.pdf"]

    def test_manual_mode_ascending(self, assembler, source):
        artifacts = assembler.split(source, PageSelection.manual([3, 0]))
        assert [a.name for a in artifacts] == ["page-1.pdf", "page-4.pdf"]

    def test_malformed_range_propagates(self, assembler, source):
        with pytest.raises(RangeExpressionError):
            assembler.split(source, PageSelection.range("5-2"))

    def test_progress_reaches_100(self, assembler, source):
        values = []
        progress = Progress(listener=values.append)

        assembler.split(source, PageSelection.range("1-3", RangeMode.EACH), progress=progress)

        assert values == [0, 33, 67, 100]

    def test_group_progress_single_unit(self, assembler, source):
        progress = Progress()
        assembler.split(source, PageSelection.range("1-3", RangeMode.GROUP), progress=progress)
        assert progress.percent == 100

    def test_copy_failure_discards_run(self, assembler, source):
        """The source opens fine but the output document cannot be created."""
        original = fitz.open(stream=source.data, filetype="pdf")
        with patch("fitz.open", side_effect=[original, RuntimeError("disk full")]):
            with pytest.raises(AssemblyError):
                assembler.split(source, PageSelection.all())


class TestReorder:
    """Test suite for DocumentAssembler.reorder."""

    def test_reorder_follows_permutation(self, assembler, source):
        artifact = assembler.reorder(source, [5, 3, 1, 2, 4], timestamp_ms=1700000000000)

        assert artifact.name == "toolverse-reordered_1700000000000.pdf"
        assert page_texts(artifact.content) == ["Page 5", "Page 3", "Page 1", "Page 2", "Page 4"]

    def test_reorder_rejects_partial_order(self, assembler, source):
        with pytest.raises(InvalidInputError):
            assembler.reorder(source, [2, 1])

    def test_reorder_progress(self, assembler, source):
        progress = Progress()
        assembler.reorder(source, [1, 2, 3, 4, 5], progress=progress)
        assert progress.percent == 100


def test_filenames():
    assert page_filename(0) == "page-1.pdf"
    assert reorder_filename(42) == "toolverse-reordered_42.pdf"
    assert reorder_filename().startswith("toolverse-reordered_")
