"""Exceptions raised by the page classification pipeline."""


class ClassificationError(RuntimeError):
    """Base class for failures that abort a whole-document classification."""


class InvalidDocumentError(ClassificationError):
    """The input bytes are not a readable PDF, or the PDF has no pages."""


class InvalidRangeError(ClassificationError, ValueError):
    """A page range is empty after clamping it to the document's page count."""

    def __init__(self, start: int, end: int, page_count: int):
        super().__init__(
            f"Invalid page range: {start}-{end} for PDF with {page_count} pages"
        )
        self.start = start
        self.end = end
        self.page_count = page_count


class ClassificationEmptyResponseError(ClassificationError):
    """The inference call returned no text content."""


class ClassificationParseError(ClassificationError, ValueError):
    """The inference response did not contain a usable JSON array."""


class ClassificationTimeoutError(ClassificationError):
    """Chunk classifications did not finish before the deadline."""


class IntegrityViolationError(ClassificationError):
    """The merged classification does not cover every page exactly once."""

    def __init__(
        self,
        message: str,
        missing: list[int],
        duplicates: list[int],
        out_of_range: list[int] | None = None,
    ):
        super().__init__(message)
        self.missing = missing
        self.duplicates = duplicates
        self.out_of_range = out_of_range or []
