"""
Page Classification Module
==========================

This module turns one sub-document into a list of page classifications.

It defines a common interface for inference providers, which take a PDF and
a natural-language instruction and return free-form text, and an
OpenAI-compatible implementation that works with both OpenAI and Ollama.
`PageClassifier` sits on top: it sends the fixed classification instruction,
parses the answer and maps chunk-relative page numbers to absolute ones.
"""

from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from io import BytesIO

import openai
import structlog
from pdf2image import convert_from_bytes

from common.config import Settings
from common.llm import OpenAIChatMixin
from common.utils import extract_json_array

from .errors import ClassificationEmptyResponseError, ClassificationParseError
from .taxonomy import CLASSIFICATION_PROMPT, FormType, PageClassification

log = structlog.get_logger(__name__)


class InferenceProvider(ABC):
    """Abstract base class for inference providers."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def complete(self, document: bytes, instruction: str) -> str | None:
        """
        Send a PDF and an instruction to the model and return its text answer.

        Returns None when the model produced no text content.
        """
        raise NotImplementedError


class OpenAIInferenceProvider(OpenAIChatMixin, InferenceProvider):
    """An inference provider that uses the OpenAI and Ollama APIs."""

    def __init__(self, settings: Settings):
        super().__init__(settings)
        self._init_client()
        self._stats = {
            "attempts": 0,
            "api_errors": 0,
        }

    def get_stats(self) -> dict:
        """Return a snapshot of call stats for this provider instance."""
        return dict(self._stats)

    def _document_parts(self, document: bytes) -> list[dict]:
        """Build the message content parts carrying the document."""
        if self.settings.CLASSIFY_INPUT_MODE == "pdf":
            payload = base64.b64encode(document).decode()
            return [
                {
                    "type": "file",
                    "file": {
                        "filename": "chunk.pdf",
                        "file_data": f"data:application/pdf;base64,{payload}",
                    },
                }
            ]

        parts = []
        for image in convert_from_bytes(document, dpi=self.settings.CLASSIFY_DPI):
            # Resize large images to reduce token cost and latency
            image.thumbnail(
                (self.settings.CLASSIFY_MAX_SIDE, self.settings.CLASSIFY_MAX_SIDE)
            )
            buffer = BytesIO()
            image.save(buffer, format="PNG")
            payload = base64.b64encode(buffer.getvalue()).decode()
            parts.append(
                {
                    "type": "image_url",
                    "image_url": {
                        "url": f"data:image/png;base64,{payload}",
                        "detail": "high",
                    },
                }
            )
        return parts

    def complete(self, document: bytes, instruction: str) -> str | None:
        messages = [
            {
                "role": "user",
                "content": self._document_parts(document)
                + [{"type": "text", "text": instruction}],
            },
        ]
        params = {
            "model": self.settings.CLASSIFY_MODEL,
            "messages": messages,
            "max_tokens": self.settings.CLASSIFY_MAX_TOKENS,
            "timeout": self.settings.REQUEST_TIMEOUT,
        }
        self._stats["attempts"] += 1
        try:
            response = self._create_completion(**params)
        except openai.APIError as e:
            self._stats["api_errors"] += 1
            log.warning(
                "Inference call failed", model=self.settings.CLASSIFY_MODEL, error=e
            )
            raise
        if not response.choices:
            return None
        return response.choices[0].message.content


def parse_classification_response(
    text: str | None, first_page: int, strict: bool = False
) -> list[PageClassification]:
    """
    Parse a classification answer into absolute page classifications.

    ``first_page`` is the 1-indexed absolute number of the chunk's first page.
    Unknown form types become ``other`` unless ``strict`` is set, in which case
    they are a parse error.
    """
    if text is None or not text.strip():
        raise ClassificationEmptyResponseError("No classification response from model.")

    try:
        items = extract_json_array(text)
    except ValueError as e:  # json.JSONDecodeError is a ValueError
        raise ClassificationParseError(
            f"Could not parse classification response: {e}"
        ) from e

    results = []
    for item in items:
        if not isinstance(item, dict):
            raise ClassificationParseError(f"Classification entry is not an object: {item!r}")
        page = item.get("page")
        raw_type = item.get("type")
        if isinstance(page, bool) or not isinstance(page, int):
            raise ClassificationParseError(f"Classification entry has no integer page: {item!r}")
        if not isinstance(raw_type, str):
            raise ClassificationParseError(f"Classification entry has no type: {item!r}")

        form_type = FormType.lookup(raw_type)
        if form_type is None:
            if strict:
                raise ClassificationParseError(f"Unknown form type: {raw_type!r}")
            log.warning(
                "Unknown form type; using 'other'",
                form_type=raw_type,
                page_number=first_page + page - 1,
            )
            form_type = FormType.OTHER

        results.append(PageClassification(first_page + page - 1, form_type))
    return results


class PageClassifier:
    """
    Classifies the pages of one sub-document with a single inference call.
    """

    def __init__(self, provider: InferenceProvider, settings: Settings):
        self.provider = provider
        self.settings = settings

    def classify(self, document: bytes, first_page: int) -> list[PageClassification]:
        """
        Classify every page of ``document``.

        ``first_page`` is the absolute 1-indexed page number of the
        sub-document's first page within the full return.
        """
        log.debug("Classifying chunk", first_page=first_page)
        text = self.provider.complete(document, CLASSIFICATION_PROMPT)
        try:
            return parse_classification_response(
                text, first_page, strict=self.settings.CLASSIFY_STRICT_FORM_TYPES
            )
        except (ClassificationEmptyResponseError, ClassificationParseError) as e:
            log.error("Classification response invalid", first_page=first_page, error=str(e))
            raise
