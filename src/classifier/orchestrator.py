"""
Document Classification Orchestrator
====================================

This module defines `ClassificationOrchestrator`, which classifies every
page of a full tax return.

Short returns skip inference entirely: every page is tagged ``other`` and the
downstream extraction step reads the whole document. Longer returns are split
into fixed-size chunks that are classified concurrently on a thread pool.
The result is all-or-nothing: the first failing chunk, or the deadline
expiring, aborts the whole call and cancels chunks that have not started.
"""

from __future__ import annotations

import datetime as dt
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Iterable

import structlog

from common.config import Settings

from .chunker import DocumentChunk, chunk, load_document
from .errors import ClassificationTimeoutError, IntegrityViolationError
from .provider import PageClassifier
from .taxonomy import FormType, PageClassification

log = structlog.get_logger(__name__)


def verify_classification(
    classifications: Iterable[PageClassification], page_count: int
) -> None:
    """
    Check that ``classifications`` covers pages ``1..page_count`` exactly once.

    Raises `IntegrityViolationError` listing missing, duplicated and
    out-of-range pages.
    """
    seen: set[int] = set()
    duplicates: set[int] = set()
    for item in classifications:
        if item.page_number in seen:
            duplicates.add(item.page_number)
        seen.add(item.page_number)

    expected = set(range(1, page_count + 1))
    missing = sorted(expected - seen)
    out_of_range = sorted(seen - expected)
    if missing or duplicates or out_of_range:
        raise IntegrityViolationError(
            f"Classification does not cover {page_count} pages exactly once "
            f"(missing={missing}, duplicates={sorted(duplicates)}, "
            f"out_of_range={out_of_range})",
            missing=missing,
            duplicates=sorted(duplicates),
            out_of_range=out_of_range,
        )


class ClassificationOrchestrator:
    """
    Produces a complete, page-ordered classification for a PDF.
    """

    def __init__(self, classifier: PageClassifier, settings: Settings):
        self.classifier = classifier
        self.settings = settings

    def classify_document(self, pdf_bytes: bytes) -> list[PageClassification]:
        """
        Classify every page of the PDF, sorted by page number.
        """
        start_time = dt.datetime.now()
        reader = load_document(pdf_bytes)
        page_count = len(reader.pages)

        if page_count <= self.settings.CLASSIFY_SKIP_THRESHOLD:
            log.info(
                "Short document; skipping classification",
                page_count=page_count,
                threshold=self.settings.CLASSIFY_SKIP_THRESHOLD,
            )
            return [
                PageClassification(page_number, FormType.OTHER)
                for page_number in range(1, page_count + 1)
            ]

        chunks = chunk(reader, self.settings.CLASSIFY_CHUNK_SIZE)
        log.info(
            "Classifying document",
            page_count=page_count,
            chunk_count=len(chunks),
            chunk_size=self.settings.CLASSIFY_CHUNK_SIZE,
        )

        results = self._classify_chunks_in_parallel(chunks)
        merged = sorted(
            (item for chunk_result in results for item in chunk_result),
            key=lambda item: item.page_number,
        )
        verify_classification(merged, page_count)

        elapsed_time = (dt.datetime.now() - start_time).total_seconds()
        log.info(
            "Finished classifying document",
            page_count=page_count,
            elapsed_time=f"{elapsed_time:.2f}s",
        )
        return merged

    def _classify_chunks_in_parallel(
        self, chunks: list[DocumentChunk]
    ) -> list[list[PageClassification]]:
        """Classify all chunks concurrently; any failure fails the whole batch."""
        timeout = self.settings.CLASSIFY_TIMEOUT or None
        executor = ThreadPoolExecutor(
            max_workers=min(self.settings.CLASSIFY_WORKERS, len(chunks))
        )
        try:
            futures: list[Future] = [
                executor.submit(self.classifier.classify, item.data, item.first_page)
                for item in chunks
            ]
            done, not_done = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)

            for future, item in zip(futures, chunks):
                if future in done and future.exception() is not None:
                    log.error(
                        "Chunk classification failed",
                        first_page=item.first_page,
                        page_count=item.page_count,
                        error=str(future.exception()),
                    )
                    raise future.exception()

            if not_done:
                pending = [
                    item.first_page
                    for future, item in zip(futures, chunks)
                    if future in not_done
                ]
                log.error(
                    "Chunk classification timed out",
                    timeout=timeout,
                    pending_first_pages=pending,
                )
                raise ClassificationTimeoutError(
                    f"{len(not_done)} of {len(chunks)} chunks did not finish "
                    f"within {timeout}s"
                )

            return [future.result() for future in futures]
        finally:
            # Do not block on calls that are still running after a failure.
            executor.shutdown(wait=False, cancel_futures=True)
