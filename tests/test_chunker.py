import base64
from io import BytesIO

import pytest
from pypdf import PdfReader

from classifier.chunker import (
    PageRange,
    chunk,
    extract_pages,
    load_document,
    page_ranges,
)
from classifier.errors import InvalidDocumentError, InvalidRangeError


def _page_widths(pdf_bytes: bytes) -> list[int]:
    reader = PdfReader(BytesIO(pdf_bytes))
    return [round(float(page.mediabox.width)) for page in reader.pages]


def test_page_ranges_cover_document_without_overlap():
    ranges = page_ranges(37, 15)

    assert ranges == [PageRange(0, 15), PageRange(15, 30), PageRange(30, 37)]


@pytest.mark.parametrize("page_count", [21, 29, 30, 31, 45, 46, 100])
def test_page_ranges_partition_every_page_exactly_once(page_count):
    ranges = page_ranges(page_count, 15)

    covered = [index for r in ranges for index in range(r.start, r.end)]
    assert covered == list(range(page_count))
    assert all(0 < len(r) <= 15 for r in ranges)


def test_page_ranges_rejects_non_positive_chunk_size():
    with pytest.raises(ValueError, match="chunk_size must be >= 1"):
        page_ranges(10, 0)


def test_extract_pages_preserves_order(make_pdf):
    reader = load_document(make_pdf(10))

    sub_document = extract_pages(reader, 3, 7)

    # Page i is 100 + i points wide
    assert _page_widths(sub_document) == [104, 105, 106, 107]


def test_extract_pages_clamps_end_to_page_count(make_pdf):
    reader = load_document(make_pdf(5))

    sub_document = extract_pages(reader, 3, 15)

    assert _page_widths(sub_document) == [104, 105]


def test_extract_pages_rejects_range_past_end(make_pdf):
    reader = load_document(make_pdf(5))

    with pytest.raises(InvalidRangeError, match="Invalid page range: 5-20 for PDF with 5 pages"):
        extract_pages(reader, 5, 20)


def test_extract_pages_rejects_empty_range(make_pdf):
    reader = load_document(make_pdf(5))

    with pytest.raises(InvalidRangeError):
        extract_pages(reader, 2, 2)


def test_chunk_produces_standalone_sub_documents(make_pdf):
    reader = load_document(make_pdf(37))

    chunks = chunk(reader, 15)

    assert [c.first_page for c in chunks] == [1, 16, 31]
    assert [c.page_count for c in chunks] == [15, 15, 7]
    assert _page_widths(chunks[2].data) == [131, 132, 133, 134, 135, 136, 137]
    assert base64.b64decode(chunks[0].as_base64()) == chunks[0].data


def test_load_document_rejects_garbage():
    with pytest.raises(InvalidDocumentError, match="Unable to read PDF"):
        load_document(b"definitely not a pdf")
