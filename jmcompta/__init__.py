"""
JM Comptabilité
===============

Record-management core for the JM Comptabilité document portal: taxi and
VTC drivers file their accounting documents month by month, and an
administrator reviews the dossiers and closes fiscal years.

Import structure
----------------
`import jmcompta` is intentionally cheap: only the stdlib-based
sub-modules are imported by default.  The SQLModel persistence adapter
lives in :pymod:`jmcompta.db` and is only imported when you ask for it.

Sub-modules
~~~~~~~~~~~
- :pymod:`jmcompta.models`       – ``Document``, ``ClientRecord``, ``YearStatus`` + :class:`~jmcompta.models.BusinessType`
- :pymod:`jmcompta.catalog`      – allowed document types per business type
- :pymod:`jmcompta.years`        – ``YearStatusRegistry`` (open / closed fiscal years)
- :pymod:`jmcompta.registry`     – ``ClientRegistry`` + period filtering / grouping
- :pymod:`jmcompta.draft`        – ``SessionDraft`` being edited before submit
- :pymod:`jmcompta.reports`      – per-client and per-year summaries for the admin view
- :pymod:`jmcompta.blobs`        – content-addressed blob stores
- :pymod:`jmcompta.persistence`  – persistence protocol + in-memory adapter
- :pymod:`jmcompta.db`           – SQLite adapter (SQLModel)
- :pymod:`jmcompta.service`      – ``DossierService``, client and admin surfaces

Quick start
-----------
>>> from jmcompta.service import DossierService
>>> svc = DossierService.in_memory()
>>> svc.draft.first_name, svc.draft.last_name = "Jean", "Dupont"
>>> svc.select_period(3, 2024)
>>> doc = svc.upload("facture_achat_vehicule", b"%PDF-1.4", "facture.pdf")
>>> svc.submit().value.business_type
<BusinessType.TAXI: 'taxi'>
"""

__all__ = [
    "models",
    "catalog",
    "years",
    "registry",
    "draft",
    "reports",
    "blobs",
    "persistence",
    "service",
]

__version__ = "0.1.0"
