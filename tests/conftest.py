"""
Pytest configuration.

Why this exists:

The project uses a ``src/`` layout (package code lives in ``src/classifier``,
``src/common`` and ``src/taxes``). Normally, developers run tests after
installing the package (e.g. ``pip install -e .``).

On some macOS/Python 3.13 setups, editable installs in dot-prefixed virtualenv
folders (like ``.venv``) can result in the generated ``.pth`` file being marked
as hidden, and Python's ``site`` module will skip hidden ``.pth`` files. When
that happens, ``import classifier`` fails even though the source tree is
present.

This file makes tests robust in that scenario by adding ``src/`` to ``sys.path``
only when the package cannot be imported normally.
"""

from __future__ import annotations

import sys
from io import BytesIO
from pathlib import Path

import pytest


def _ensure_src_on_path() -> None:
    try:
        import classifier  # noqa: F401
        return
    except ModuleNotFoundError:
        pass

    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    sys.path.insert(0, str(src_dir))


_ensure_src_on_path()


@pytest.fixture
def make_pdf():
    """
    Build an in-memory PDF with ``page_count`` blank pages.

    Page ``i`` (1-indexed) is ``100 + i`` points wide so tests can tell pages
    apart after splitting.
    """
    from pypdf import PdfWriter

    def _make_pdf(page_count: int) -> bytes:
        writer = PdfWriter()
        for page_number in range(1, page_count + 1):
            writer.add_blank_page(width=100 + page_number, height=100)
        buffer = BytesIO()
        writer.write(buffer)
        return buffer.getvalue()

    return _make_pdf
