"""
tests/test_models.py
====================

Unit tests for the dataclasses and enum defined in jmcompta.models.

Run:  pytest -q
"""

import dataclasses
from datetime import datetime

import pytest

from jmcompta.errors import ValidationError
from jmcompta.models import BusinessType, ClientRecord, Document, YearStatus, make_key


def _doc(month=3):
    return Document("id1", "autres", "a.pdf", "0" * 64, datetime(2024, 3, 1), month, 2024)


def test_str_on_business_type():
    """Enum __str__ returns its value (nicer REPL)."""
    assert str(BusinessType.VTC) == "vtc"
    assert BusinessType("taxi") is BusinessType.TAXI


def test_document_month_must_be_in_range():
    with pytest.raises(ValidationError):
        _doc(month=0)
    with pytest.raises(ValueError):  # ValidationError is a ValueError
        _doc(month=13)


def test_document_is_immutable():
    doc = _doc()
    with pytest.raises(dataclasses.FrozenInstanceError):
        doc.month = 4
    assert doc.period == (2024, 3)


def test_record_key_and_defaults():
    rec = ClientRecord(" Jean", "Dupont ")
    assert rec.key == ("Jean", "Dupont")
    assert rec.business_type is BusinessType.TAXI
    assert rec.documents == []


def test_year_status_defaults_to_open():
    assert YearStatus(2024) == YearStatus(2024, False, None)


def test_make_key_handles_none():
    assert make_key(None, "  ") == ("", "")
