"""
Page Chunking
=============

Splits a PDF into bounded, standalone sub-documents so that each
classification call only has to look at a limited number of pages.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from io import BytesIO

import structlog
from pypdf import PdfReader, PdfWriter
from pypdf.errors import PdfReadError

from .errors import InvalidDocumentError, InvalidRangeError

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PageRange:
    """Half-open, 0-indexed page range ``[start, end)``."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class DocumentChunk:
    page_range: PageRange
    data: bytes

    @property
    def first_page(self) -> int:
        """1-indexed page number of the chunk's first page in the full document."""
        return self.page_range.start + 1

    @property
    def page_count(self) -> int:
        return len(self.page_range)

    def as_base64(self) -> str:
        return base64.b64encode(self.data).decode()


def load_document(pdf_bytes: bytes) -> PdfReader:
    """Open PDF bytes, requiring at least one page."""
    try:
        reader = PdfReader(BytesIO(pdf_bytes))
        page_count = len(reader.pages)
    except (PdfReadError, ValueError, OSError) as e:
        raise InvalidDocumentError(f"Unable to read PDF: {e}") from e
    if page_count < 1:
        raise InvalidDocumentError("PDF has no pages.")
    return reader


def page_ranges(page_count: int, chunk_size: int) -> list[PageRange]:
    """Partition ``[0, page_count)`` into contiguous ranges of ``chunk_size``."""
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
    return [
        PageRange(start, min(start + chunk_size, page_count))
        for start in range(0, page_count, chunk_size)
    ]


def extract_pages(reader: PdfReader, start: int, end: int) -> bytes:
    """
    Copy pages ``[start, end)`` into a new standalone PDF.

    The range is clamped to the document first; an empty range after clamping
    raises `InvalidRangeError`.
    """
    total_pages = len(reader.pages)
    safe_end = min(end, total_pages)
    safe_start = min(start, safe_end)
    if safe_start >= safe_end:
        raise InvalidRangeError(start, end, total_pages)

    writer = PdfWriter()
    for index in range(safe_start, safe_end):
        writer.add_page(reader.pages[index])
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def chunk(reader: PdfReader, chunk_size: int) -> list[DocumentChunk]:
    """Split a loaded PDF into standalone sub-documents of at most ``chunk_size`` pages."""
    ranges = page_ranges(len(reader.pages), chunk_size)
    chunks = [
        DocumentChunk(page_range, extract_pages(reader, page_range.start, page_range.end))
        for page_range in ranges
    ]
    log.debug(
        "Split document into chunks",
        page_count=len(reader.pages),
        chunk_size=chunk_size,
        chunk_count=len(chunks),
    )
    return chunks
