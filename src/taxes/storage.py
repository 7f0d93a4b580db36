"""
Return Store
============

Year-keyed JSON file holding the extracted tax returns. The aggregation code
only reads from it; `save` and `delete` exist for the extraction step and for
tests.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from .models import TaxReturn

log = structlog.get_logger(__name__)


class ReturnStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_raw(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        with self.path.open(encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a year-keyed mapping.")
        return data

    def _write_raw(self, data: dict[str, dict]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
        tmp_path.replace(self.path)

    def load(self) -> dict[int, TaxReturn]:
        """Load every stored return, keyed by tax year."""
        returns = {}
        for year, record in self._read_raw().items():
            tax_return = TaxReturn.from_dict({"year": year, **record})
            returns[tax_return.year] = tax_return
        log.debug("Loaded tax returns", path=str(self.path), years=sorted(returns))
        return returns

    def save(self, record: dict) -> None:
        """
        Store a return in its JSON form, replacing any return for the same year.

        ``record`` is the dict the extraction step produces, not a `TaxReturn`.
        It is validated by parsing it before anything is written and is stored
        as given.
        """
        tax_return = TaxReturn.from_dict(record)
        data = self._read_raw()
        data[str(tax_return.year)] = record
        self._write_raw(data)
        log.info("Saved tax return", year=tax_return.year, path=str(self.path))

    def delete(self, year: int) -> bool:
        """Remove the return for ``year``; returns False if none was stored."""
        data = self._read_raw()
        if data.pop(str(year), None) is None:
            return False
        self._write_raw(data)
        log.info("Deleted tax return", year=year, path=str(self.path))
        return True
