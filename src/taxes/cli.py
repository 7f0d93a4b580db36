"""
Tax Summary
===========

Command-line entry point that reads the stored returns and prints per-year
and multi-year summary metrics as JSON.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import structlog

from common.config import Settings
from common.logging_config import configure_logging

from .aggregator import summarize, summarize_years
from .storage import ReturnStore


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="tax-summary",
        description="Summarize stored tax returns across years.",
    )
    parser.add_argument(
        "--returns-file",
        type=Path,
        help="Override RETURNS_FILE for this run",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    log = structlog.get_logger(__name__)

    try:
        settings = Settings()
        configure_logging(settings)
    except ValueError as e:
        log.error("Configuration error", error=e)
        return 2

    store = ReturnStore(args.returns_file or settings.RETURNS_FILE)
    try:
        returns = store.load()
    except (OSError, ValueError):
        log.exception("Failed to load tax returns", path=str(store.path))
        return 1

    if not returns:
        log.warning("No tax returns stored", path=str(store.path))

    overall = summarize_years(returns.values())
    payload = {
        "years": [summarize(returns[year]).to_dict() for year in sorted(returns)],
        "summary": overall.to_dict() if overall else None,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
