"""
Pytest configuration: make sure `import jmcompta` and `import api` work
regardless of where pytest is invoked, and share a few fixtures.
"""

import sys
from datetime import date, datetime
from pathlib import Path

import pytest

# /path/to/project/tests -> project root
PROJECT_ROOT = Path(__file__).resolve().parent.parent

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from jmcompta.models import Document  # noqa: E402


def make_doc(year: int, month: int, type_key: str = "autres", name: str = "doc.pdf", doc_id: str = None) -> Document:
    """Build a Document without going through a registry."""
    make_doc.counter += 1
    return Document(
        id=doc_id or f"doc-{make_doc.counter}",
        type_key=type_key,
        display_name=name,
        blob_handle="0" * 64,
        uploaded_at=datetime(2024, 1, 1, 12, 0),
        month=month,
        year=year,
    )


make_doc.counter = 0


@pytest.fixture
def today():
    return date(2024, 3, 15)
