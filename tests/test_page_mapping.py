"""Tests for page range mapping and the lines-per-page strategy."""

from data_model import PageMapping, PageRange
from pdf.page_mapping import LinesPerPageStrategy, estimate_lines_per_page, map_page_range


class TestMapPageRange:
    """Tests for book page → PDF page conversion."""

    def test_no_mapping_is_identity(self):
        """Without a mapping the book range is used as is."""
        assert map_page_range(PageRange(5, 9), None) == (5, 9)

    def test_no_mapping_keeps_missing_end(self):
        """An open range stays open without a mapping."""
        assert map_page_range(PageRange(5), None) == (5, None)

    def test_ratio_two_floors_both_ends(self):
        """Spread scans: {37, 46} with ratio 2 maps to (18, 23)."""
        mapping = PageMapping(book_pages_to_pdf_pages=2)
        assert map_page_range(PageRange(37, 46), mapping) == (18, 23)

    def test_ratio_without_end_uses_next_page(self):
        """An open range maps to the start page and the page after it."""
        mapping = PageMapping(book_pages_to_pdf_pages=2)
        assert map_page_range(PageRange(37), mapping) == (18, 19)

    def test_offset_applied_after_ratio(self):
        """The page offset is added after dividing by the ratio."""
        mapping = PageMapping(book_pages_to_pdf_pages=2, page_offset=3)
        assert map_page_range(PageRange(10, 20), mapping) == (8, 13)

    def test_offset_only(self):
        """An offset without a ratio shifts both ends."""
        mapping = PageMapping(page_offset=-2)
        assert map_page_range(PageRange(10, 12), mapping) == (8, 10)


class TestEstimateLinesPerPage:
    """Tests for the uniform lines-per-page estimate."""

    def test_floor_division(self):
        """Lines per page is the floor of lines over pages."""
        assert estimate_lines_per_page(105, 10) == 10

    def test_never_below_one(self):
        """Short documents still get one line per page."""
        assert estimate_lines_per_page(3, 10) == 1

    def test_zero_pages(self):
        """Zero pages treats the whole text as one page."""
        assert estimate_lines_per_page(7, 0) == 7


class TestLinesPerPageStrategy:
    """Tests for slicing raw lines by estimated page boundaries."""

    def lines(self):
        return [f"p{p}l{i}" for p in range(1, 5) for i in range(1, 4)]

    def test_closed_range(self):
        """A closed range returns the lines of every page in it."""
        text = LinesPerPageStrategy().slice_pages(self.lines(), 4, 2, 3)
        assert text.split("\n") == ["p2l1", "p2l2", "p2l3", "p3l1", "p3l2", "p3l3"]

    def test_open_range_takes_two_pages(self):
        """An open range covers the start page and the next one."""
        text = LinesPerPageStrategy().slice_pages(self.lines(), 4, 3, None)
        assert text.split("\n") == ["p3l1", "p3l2", "p3l3", "p4l1", "p4l2", "p4l3"]

    def test_range_past_end_is_clamped(self):
        """Ranges running past the last page are clamped."""
        text = LinesPerPageStrategy().slice_pages(self.lines(), 4, 4, 10)
        assert text.split("\n") == ["p4l1", "p4l2", "p4l3"]

    def test_range_beyond_document_is_empty(self):
        """Ranges starting after the document yield empty text."""
        assert LinesPerPageStrategy().slice_pages(self.lines(), 4, 9, 12) == ""
