import json
import os
import threading
from io import BytesIO

import pytest
from pypdf import PdfReader

from classifier.errors import (
    ClassificationParseError,
    ClassificationTimeoutError,
    IntegrityViolationError,
    InvalidDocumentError,
)
from classifier.orchestrator import ClassificationOrchestrator, verify_classification
from classifier.provider import InferenceProvider, PageClassifier
from classifier.taxonomy import FormType, PageClassification
from common.config import Settings


@pytest.fixture
def settings(mocker):
    mocker.patch.dict(os.environ, {"OPENAI_API_KEY": "test_api_key"}, clear=True)
    return Settings()


def _chunk_page_count(document: bytes) -> int:
    return len(PdfReader(BytesIO(document)).pages)


class AllOtherProvider(InferenceProvider):
    """Answers ``other`` for every page of the chunk it is given."""

    def __init__(self, settings):
        super().__init__(settings)
        self.lock = threading.Lock()
        self.chunk_sizes = []

    def answer(self, document: bytes) -> list[dict]:
        return [
            {"page": page, "type": "other"}
            for page in range(1, _chunk_page_count(document) + 1)
        ]

    def complete(self, document, instruction):
        with self.lock:
            self.chunk_sizes.append(_chunk_page_count(document))
        return "Sure!\n" + json.dumps(self.answer(document))


def _orchestrator(provider, settings):
    return ClassificationOrchestrator(PageClassifier(provider, settings), settings)


@pytest.mark.parametrize("page_count", [1, 7, 20])
def test_short_documents_skip_inference(make_pdf, settings, mocker, page_count):
    provider = AllOtherProvider(settings)
    spy = mocker.spy(provider, "complete")

    result = _orchestrator(provider, settings).classify_document(make_pdf(page_count))

    assert result == [
        PageClassification(page, FormType.OTHER) for page in range(1, page_count + 1)
    ]
    spy.assert_not_called()


def test_long_document_is_chunked_and_merged(make_pdf, settings):
    provider = AllOtherProvider(settings)

    result = _orchestrator(provider, settings).classify_document(make_pdf(37))

    assert len(result) == 37
    assert [item.page_number for item in result] == list(range(1, 38))
    assert all(item.form_type is FormType.OTHER for item in result)
    assert sorted(provider.chunk_sizes) == [7, 15, 15]


def test_chunk_results_use_absolute_page_numbers(make_pdf, settings):
    class FirstPageIsMainProvider(AllOtherProvider):
        def answer(self, document):
            items = super().answer(document)
            items[0]["type"] = "1040_main"
            # Out of order within a chunk; the merge sorts
            return list(reversed(items))

    result = _orchestrator(FirstPageIsMainProvider(settings), settings).classify_document(
        make_pdf(37)
    )

    main_pages = [item.page_number for item in result if item.form_type is FormType.F1040_MAIN]
    assert main_pages == [1, 16, 31]
    assert [item.page_number for item in result] == list(range(1, 38))


def test_classification_is_idempotent(make_pdf, settings):
    pdf = make_pdf(44)
    orchestrator = _orchestrator(AllOtherProvider(settings), settings)

    assert orchestrator.classify_document(pdf) == orchestrator.classify_document(pdf)


def test_chunks_are_classified_concurrently(make_pdf, settings):
    barrier = threading.Barrier(3, timeout=10)

    class BarrierProvider(AllOtherProvider):
        def complete(self, document, instruction):
            # Only passes if all three chunk calls are in flight at once
            barrier.wait()
            return super().complete(document, instruction)

    result = _orchestrator(BarrierProvider(settings), settings).classify_document(
        make_pdf(45)
    )

    assert len(result) == 45


def test_one_failing_chunk_fails_whole_document(make_pdf, settings):
    class FailingSecondChunkProvider(AllOtherProvider):
        def complete(self, document, instruction):
            if _chunk_page_count(document) == 15 and self._is_second(document):
                return "I could not read this chunk."
            return super().complete(document, instruction)

        def _is_second(self, document):
            first = PdfReader(BytesIO(document)).pages[0]
            # Page 16 is 116 points wide
            return round(float(first.mediabox.width)) == 116

    orchestrator = _orchestrator(FailingSecondChunkProvider(settings), settings)

    with pytest.raises(ClassificationParseError):
        orchestrator.classify_document(make_pdf(40))


def test_provider_exception_propagates(make_pdf, settings):
    class BrokenProvider(AllOtherProvider):
        def complete(self, document, instruction):
            raise RuntimeError("inference unavailable")

    with pytest.raises(RuntimeError, match="inference unavailable"):
        _orchestrator(BrokenProvider(settings), settings).classify_document(make_pdf(30))


def test_hung_chunk_raises_timeout(make_pdf, settings):
    settings.CLASSIFY_TIMEOUT = 1
    release = threading.Event()

    class HangingProvider(AllOtherProvider):
        def complete(self, document, instruction):
            if _chunk_page_count(document) < 15:
                release.wait(timeout=30)
            return super().complete(document, instruction)

    try:
        with pytest.raises(ClassificationTimeoutError, match="1 of 2 chunks"):
            _orchestrator(HangingProvider(settings), settings).classify_document(
                make_pdf(21)
            )
    finally:
        release.set()


def test_missing_page_is_an_integrity_violation(make_pdf, settings):
    class DroppingProvider(AllOtherProvider):
        def answer(self, document):
            return super().answer(document)[:-1]

    with pytest.raises(IntegrityViolationError) as excinfo:
        _orchestrator(DroppingProvider(settings), settings).classify_document(make_pdf(30))

    assert excinfo.value.missing == [15, 30]


def test_duplicate_page_is_an_integrity_violation(make_pdf, settings):
    class DuplicatingProvider(AllOtherProvider):
        def answer(self, document):
            items = super().answer(document)
            return items + [items[0]]

    with pytest.raises(IntegrityViolationError) as excinfo:
        _orchestrator(DuplicatingProvider(settings), settings).classify_document(
            make_pdf(30)
        )

    assert excinfo.value.duplicates == [1, 16]


def test_verify_classification_flags_out_of_range_pages():
    items = [PageClassification(1, FormType.OTHER), PageClassification(3, FormType.OTHER)]

    with pytest.raises(IntegrityViolationError) as excinfo:
        verify_classification(items, page_count=2)

    assert excinfo.value.missing == [2]
    assert excinfo.value.duplicates == []
    assert excinfo.value.out_of_range == [3]


def test_invalid_pdf_is_rejected(settings):
    with pytest.raises(InvalidDocumentError):
        _orchestrator(AllOtherProvider(settings), settings).classify_document(b"nope")
