"""
tests/test_service.py
=====================

Tests for jmcompta.service.DossierService: the client and admin surfaces,
write-through persistence and the error taxonomy at the service boundary.
"""

from dataclasses import replace

import pytest

from jmcompta.auth import AdminToken, DeleteConfirmation
from jmcompta.blobs import MemoryBlobStore
from jmcompta.errors import (
    AdminAuthError,
    ClientNotFound,
    ConfirmationRequired,
    PersistenceError,
    ValidationError,
    YearClosedError,
)
from jmcompta.models import BusinessType
from jmcompta.persistence import MemoryPersistence
from jmcompta.service import DossierService

ADMIN = AdminToken()


class FlakyPersistence(MemoryPersistence):
    """Memory adapter whose load / save can be made to fail."""

    def __init__(self, fail_load=False, fail_save=False):
        super().__init__()
        self.fail_load = fail_load
        self.fail_save = fail_save

    def load(self):
        if self.fail_load:
            raise PersistenceError("disk unreadable")
        return super().load()

    def save(self, clients, year_statuses):
        if self.fail_save:
            raise PersistenceError("disk full")
        super().save(clients, year_statuses)


def _submit(svc, first="Jean", last="Dupont", uploads=(("facture_achat_vehicule", b"pdf", "facture.pdf"),),
            month=3, year=2024, business_type=BusinessType.TAXI):
    svc.lookup_into_draft(first, last)
    svc.set_business_type(business_type)
    svc.select_period(month, year)
    for type_key, content, name in uploads:
        svc.upload(type_key, content, name)
    return svc.submit()


# ---------------------------------------------------------------------------
# Client surface
# ---------------------------------------------------------------------------
def test_submit_writes_through_and_resets_draft():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    result = _submit(svc)

    assert result.durable
    assert persistence.saves == 1
    assert svc.draft.first_name == "" and svc.draft.documents == []
    assert svc.draft.business_type is BusinessType.TAXI

    clients, _ = persistence.load()
    assert [(c.first_name, c.last_name, len(c.documents)) for c in clients] == [("Jean", "Dupont", 1)]


def test_state_survives_a_restart():
    persistence = MemoryPersistence()
    blobs = MemoryBlobStore()
    svc = DossierService(persistence, blobs)
    _submit(svc)
    svc.close_year(ADMIN, 2023)

    again = DossierService(persistence, blobs)
    assert again.registry.lookup("Jean", "Dupont").business_type is BusinessType.TAXI
    assert again.years.is_closed(2023)


def test_lookup_into_draft_resumes_returning_client():
    svc = DossierService.in_memory()
    _submit(svc, business_type=BusinessType.VTC, uploads=(("location_vehicule_vtc", b"x", "loc.pdf"),))

    assert svc.lookup_into_draft(" Jean ", "Dupont") is True
    assert (svc.draft.first_name, svc.draft.last_name) == ("Jean", "Dupont")
    assert svc.draft.business_type is BusinessType.VTC
    assert [d.display_name for d in svc.draft.documents] == ["loc.pdf"]


def test_lookup_into_draft_unknown_client_only_sets_names():
    svc = DossierService.in_memory()
    svc.set_business_type(BusinessType.VTC)
    assert svc.lookup_into_draft("Marie", "Martin") is False
    assert svc.draft.first_name == "Marie"
    assert svc.draft.business_type is BusinessType.VTC


def test_resumed_client_appends_then_resubmits():
    svc = DossierService.in_memory()
    _submit(svc)
    svc.lookup_into_draft("Jean", "Dupont")
    svc.select_period(4, 2024)
    svc.upload("peages", b"ticket", "peage.pdf")
    svc.submit()

    assert len(svc.registry) == 1
    assert len(svc.registry.lookup("Jean", "Dupont").documents) == 2


def test_submit_without_names_fails_without_saving():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    svc.lookup_into_draft("Jean", "")
    with pytest.raises(ValidationError):
        svc.submit()
    assert persistence.saves == 0
    assert svc.draft.first_name == "Jean"


def test_upload_into_closed_year_stores_nothing():
    blobs = MemoryBlobStore()
    svc = DossierService(MemoryPersistence(), blobs)
    svc.close_year(ADMIN, 2024)
    svc.select_period(3, 2024)
    with pytest.raises(YearClosedError):
        svc.upload("autres", b"x", "x.pdf")
    assert svc.draft.documents == []
    assert len(blobs) == 0


def test_upload_is_not_persisted_until_submit():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    svc.select_period(1, 2024)
    svc.upload("autres", b"x", "x.pdf")
    assert persistence.saves == 0


def test_uploaded_for_period_indicator():
    svc = DossierService.in_memory()
    svc.select_period(3, 2024)
    svc.upload("peages", b"1", "p1.pdf")
    svc.upload("autres", b"2", "a.pdf")
    svc.select_period(4, 2024)
    svc.upload("peages", b"3", "p2.pdf")

    svc.select_period(3, 2024)
    assert [d.display_name for d in svc.uploaded_for_period("peages")] == ["p1.pdf"]
    assert len(svc.uploaded_for_period()) == 2


def test_available_types_follow_draft_business_type():
    svc = DossierService.in_memory()
    assert "abonnement_g7" in svc.available_types()
    svc.set_business_type(BusinessType.VTC)
    assert "abonnement_g7" not in svc.available_types()


# ---------------------------------------------------------------------------
# Persistence failures
# ---------------------------------------------------------------------------
def test_load_failure_starts_empty():
    svc = DossierService(FlakyPersistence(fail_load=True), MemoryBlobStore())
    assert len(svc.registry) == 0
    assert len(svc.years) == 0
    assert svc.load_warning == "disk unreadable"


def test_save_failure_keeps_change_and_warns():
    svc = DossierService(FlakyPersistence(fail_save=True), MemoryBlobStore())
    result = _submit(svc)
    assert result.warnings == ["disk full"]
    assert not result.durable
    assert svc.registry.lookup("Jean", "Dupont") is not None

    closed = svc.close_year(ADMIN, 2024)
    assert closed.warnings == ["disk full"]
    assert svc.years.is_closed(2024)


# ---------------------------------------------------------------------------
# Admin surface
# ---------------------------------------------------------------------------
def test_admin_operations_require_token():
    svc = DossierService.in_memory()
    with pytest.raises(AdminAuthError):
        svc.clients(None)
    with pytest.raises(AdminAuthError):
        svc.close_year("admin2024", 2024)


def test_close_and_reopen_year_write_through():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    assert svc.close_year(ADMIN, 2024).value.is_closed
    assert persistence.saves == 1
    assert svc.reopen_year(ADMIN, 2024).value.is_closed is False
    assert persistence.saves == 2


def test_reopen_never_closed_year_is_a_noop():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    assert svc.reopen_year(ADMIN, 2031).value is None
    assert persistence.saves == 0
    assert len(svc.years) == 0


def test_delete_requires_matching_confirmation():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    _submit(svc)
    _submit(svc, first="Marie", last="Martin")
    saves = persistence.saves

    with pytest.raises(ConfirmationRequired):
        svc.delete_client(ADMIN, ("Jean", "Dupont"))
    with pytest.raises(ConfirmationRequired):
        svc.delete_client(ADMIN, ("Jean", "Dupont"), DeleteConfirmation.for_client("Marie", "Martin"))
    assert len(svc.registry) == 2
    assert persistence.saves == saves

    result = svc.delete_client(ADMIN, ("Jean", "Dupont"), DeleteConfirmation.for_client("Jean", "Dupont"))
    assert result.value.first_name == "Jean"
    assert svc.registry.lookup("Jean", "Dupont") is None
    assert persistence.saves == saves + 1
    clients, _ = persistence.load()
    assert [c.key for c in clients] == [("Marie", "Martin")]


def test_delete_unknown_client():
    svc = DossierService.in_memory()
    with pytest.raises(ClientNotFound):
        svc.delete_client(ADMIN, ("No", "One"), DeleteConfirmation.for_client("No", "One"))


def test_export_all_in_upload_order_with_unique_names():
    svc = DossierService.in_memory()
    _submit(svc, uploads=(
        ("assurances", b"one", "scan.pdf"),
        ("peages", b"two", "scan.pdf"),
        ("autres", b"three", "note.txt"),
    ))
    files = svc.export_all(ADMIN, ("Jean", "Dupont"))
    assert files == [("scan.pdf", b"one"), ("scan (2).pdf", b"two"), ("note.txt", b"three")]


def test_export_missing_blob_is_a_persistence_error():
    persistence = MemoryPersistence()
    svc = DossierService(persistence, MemoryBlobStore())
    _submit(svc)
    again = DossierService(persistence, MemoryBlobStore())
    with pytest.raises(PersistenceError):
        again.export_all(ADMIN, ("Jean", "Dupont"))


def test_client_report_groups_documents():
    svc = DossierService.in_memory()
    _submit(svc, month=3, uploads=(("assurances", b"1", "a.pdf"), ("peages", b"2", "b.pdf")))
    svc.lookup_into_draft("Jean", "Dupont")
    svc.select_period(1, 2025)
    svc.upload("autres", b"3", "c.pdf")
    svc.submit()

    report = svc.client_report(ADMIN, ("Jean", "Dupont"))
    assert report.total_documents == 3
    assert [y.year for y in report.years] == [2024, 2025]
    march = report.years[0]
    assert march.month_counts[2] == 2 and sum(march.month_counts) == 2
    assert [m.month for m in march.months] == [3]
    assert march.months[0].name == "Mars"
    assert [line.label for line in march.months[0].documents] == ["Assurances", "Péages"]


def test_year_overview_reports_closed_years():
    svc = DossierService.in_memory()
    svc.close_year(ADMIN, 2022)
    overview = {s.year: s for s in svc.year_overview(ADMIN)}
    assert overview[2022].is_closed and overview[2022].closed_date is not None
    assert overview[2023].is_closed is False


@pytest.mark.parametrize("uploaded, stored", [
    ("../escaped.txt", "escaped.txt"),
    ("/etc/passwd", "passwd"),
    ("C:\\scans\\mars.pdf", "mars.pdf"),
    ("..", "autres"),
    ("", "autres"),
])
def test_upload_keeps_only_the_file_name(uploaded, stored):
    svc = DossierService.in_memory()
    svc.select_period(3, 2024)
    assert svc.upload("autres", b"x", uploaded).display_name == stored


def test_export_strips_directories_from_stored_names():
    svc = DossierService.in_memory()
    _submit(svc)
    rec = svc.registry.get(("Jean", "Dupont"))
    rec.documents[0] = replace(rec.documents[0], display_name="../../outside.pdf")
    assert svc.export_all(ADMIN, ("Jean", "Dupont"))[0][0] == "outside.pdf"


def test_upload_validates_once(monkeypatch):
    svc = DossierService.in_memory()
    svc.select_period(3, 2024)
    calls = []
    check = svc.registry.check_upload

    def counting(*args, **kwargs):
        calls.append(args)
        return check(*args, **kwargs)

    monkeypatch.setattr(svc.registry, "check_upload", counting)
    svc.upload("autres", b"x", "a.pdf")
    assert len(calls) == 1
