"""
tests/test_catalog.py
=====================

Unit tests for the document-type catalog in jmcompta.catalog
"""

import pytest

from jmcompta import catalog
from jmcompta.errors import ValidationError
from jmcompta.models import BusinessType


def test_common_set_comes_first_then_specific():
    types = list(catalog.available_types(BusinessType.TAXI))
    assert types[: len(catalog.COMMON_TYPES)] == list(catalog.COMMON_TYPES)
    assert types[len(catalog.COMMON_TYPES):] == [
        "taxe_stationnement",
        "location_licence",
        "location_vehicule_licence",
        "abonnement_g7",
        "mise_a_jour_taximetre",
    ]


def test_vtc_types_exclude_taxi_specific_keys():
    types = catalog.available_types(BusinessType.VTC)
    assert "abonnement_plateformes_vtc" in types
    assert "abonnement_g7" not in types
    assert len(types) == len(catalog.COMMON_TYPES) + 2


def test_accepts_plain_string_business_type():
    assert catalog.available_types("vtc") == catalog.available_types(BusinessType.VTC)


def test_available_types_returns_a_fresh_mapping():
    catalog.available_types(BusinessType.TAXI)["hack"] = "x"
    assert "hack" not in catalog.available_types(BusinessType.TAXI)


def test_is_valid_type():
    assert catalog.is_valid_type(BusinessType.VTC, "peages")
    assert catalog.is_valid_type(BusinessType.TAXI, "location_licence")
    assert not catalog.is_valid_type(BusinessType.VTC, "location_licence")
    assert not catalog.is_valid_type(BusinessType.TAXI, "nope")


def test_label_for_any_business_type_and_unknown_key():
    assert catalog.label_for("facture_achat_vehicule") == "Facture achat véhicule"
    assert catalog.label_for("location_vehicule_vtc") == "Location véhicule VTC"
    assert catalog.label_for("legacy_key") == "legacy_key"


def test_month_name():
    assert catalog.month_name(1) == "Janvier"
    assert catalog.month_name(12) == "Décembre"
    with pytest.raises(ValidationError):
        catalog.month_name(0)
