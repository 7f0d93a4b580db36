"""
Tax Return Page Classifier
==========================

Command-line entry point that classifies every page of a tax return PDF and
prints the result as JSON (``[{"page": 1, "type": "1040_main"}, ...]``).
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import openai
import structlog

from common.config import Settings, setup_libraries
from common.logging_config import configure_logging

from .errors import ClassificationError
from .orchestrator import ClassificationOrchestrator
from .provider import OpenAIInferenceProvider, PageClassifier


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tax-classify",
        description="Classify the pages of a tax return PDF by form type.",
    )
    parser.add_argument("pdf", type=Path, help="Path to the tax return PDF")
    parser.add_argument(
        "-o", "--output", type=Path, help="Write JSON here instead of stdout"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Classify one PDF; returns a process exit code."""
    args = _parse_args(argv)
    log = structlog.get_logger(__name__)

    try:
        settings = Settings()
        configure_logging(settings)
        setup_libraries(settings)
        provider = OpenAIInferenceProvider(settings)
    except ValueError as e:
        log.error("Configuration error", error=e)
        return 2

    log.info(
        "Starting classification",
        pdf=str(args.pdf),
        llm_provider=settings.LLM_PROVIDER,
        model=settings.CLASSIFY_MODEL,
        input_mode=settings.CLASSIFY_INPUT_MODE,
        chunk_size=settings.CLASSIFY_CHUNK_SIZE,
        workers=settings.CLASSIFY_WORKERS,
    )

    try:
        pdf_bytes = args.pdf.read_bytes()
    except OSError as e:
        log.error("Unable to read PDF", pdf=str(args.pdf), error=e)
        return 1

    orchestrator = ClassificationOrchestrator(PageClassifier(provider, settings), settings)
    try:
        classifications = orchestrator.classify_document(pdf_bytes)
    except (ClassificationError, openai.APIError):
        log.exception("Failed to classify document, please retry", pdf=str(args.pdf))
        return 1
    finally:
        stats = provider.get_stats()
        if stats["attempts"]:
            log.info("Inference stats", **stats)

    payload = json.dumps([item.to_dict() for item in classifications], indent=2)
    if args.output:
        args.output.write_text(payload + "\n", encoding="utf-8")
        log.info("Results saved", output=str(args.output))
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
