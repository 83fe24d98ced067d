"""Shared pytest configuration for tplhtml tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tplhtml.editing import EditingSession  # noqa: E402


@pytest.fixture
def make_session():
    """Build an EditingSession from template markup and an optional caret."""

    def _make(markup, caret=None):
        return EditingSession.from_markup(markup, caret=caret)

    return _make


@pytest.fixture
def template_file(tmp_path):
    """Write template text to a temporary .html file and return its path."""

    def _write(content, name="template.html"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
