"""
Classification domain package.

This package contains:

- the form taxonomy and the classification instruction
- the page chunker that splits a PDF into standalone sub-documents
- the inference provider and the per-chunk page classifier
- the orchestrator that classifies a whole document concurrently
- the command-line entry point
"""

from .chunker import DocumentChunk, PageRange, chunk, load_document, page_ranges
from .errors import (
    ClassificationEmptyResponseError,
    ClassificationError,
    ClassificationParseError,
    ClassificationTimeoutError,
    IntegrityViolationError,
    InvalidDocumentError,
    InvalidRangeError,
)
from .orchestrator import ClassificationOrchestrator, verify_classification
from .provider import (
    InferenceProvider,
    OpenAIInferenceProvider,
    PageClassifier,
    parse_classification_response,
)
from .taxonomy import CLASSIFICATION_PROMPT, FormType, PageClassification

__all__ = [
    "CLASSIFICATION_PROMPT",
    "ClassificationEmptyResponseError",
    "ClassificationError",
    "ClassificationOrchestrator",
    "ClassificationParseError",
    "ClassificationTimeoutError",
    "DocumentChunk",
    "FormType",
    "InferenceProvider",
    "IntegrityViolationError",
    "InvalidDocumentError",
    "InvalidRangeError",
    "OpenAIInferenceProvider",
    "PageClassification",
    "PageClassifier",
    "PageRange",
    "chunk",
    "load_document",
    "page_ranges",
    "parse_classification_response",
    "verify_classification",
]
