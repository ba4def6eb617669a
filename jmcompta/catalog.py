"""
jmcompta.catalog
================

Static catalog of the document types a client may upload.

Every client can file the *common* documents; taxi and VTC drivers each
get an extra, business-specific set.  Lookups are pure: no state, no
error cases.
"""

from __future__ import annotations

from typing import Dict

from .models import BusinessType, check_month

# ---------------------------------------------------------------------
# Document types: key → display label (dict order is display order)
# ---------------------------------------------------------------------
COMMON_TYPES: Dict[str, str] = {
    "facture_achat_vehicule": "Facture achat véhicule",
    "feuille_amortissement": "Feuille amortissement",
    "releve_bancaire": "Relevé bancaire",
    "essence_recharges": "Essence/Recharges",
    "entretien_courant": "Entretien courant",
    "assurances": "Assurances",
    "entretien_reparations": "Entretien/Réparations",
    "peages": "Péages",
    "telephone_pro": "Téléphone pro",
    "autres": "Autres",
}

SPECIFIC_TYPES: Dict[BusinessType, Dict[str, str]] = {
    BusinessType.TAXI: {
        "taxe_stationnement": "Taxe de stationnement",
        "location_licence": "Location licence",
        "location_vehicule_licence": "Location véhicule + licence",
        "abonnement_g7": "Abonnement G7",
        "mise_a_jour_taximetre": "Mise à jour taximètre",
    },
    BusinessType.VTC: {
        "location_vehicule_vtc": "Location véhicule VTC",
        "abonnement_plateformes_vtc": "Abonnement plateformes VTC",
    },
}

MONTH_NAMES = (
    "Janvier", "Février", "Mars", "Avril", "Mai", "Juin",
    "Juillet", "Août", "Septembre", "Octobre", "Novembre", "Décembre",
)


def available_types(business_type: BusinessType) -> Dict[str, str]:
    """
    Return the allowed ``type_key → label`` mapping for *business_type*.

    The common set comes first, followed by the business-specific set.

    Examples
    --------
    >>> list(available_types(BusinessType.VTC))[-1]
    'abonnement_plateformes_vtc'
    """
    business_type = BusinessType(business_type)
    types = dict(COMMON_TYPES)
    types.update(SPECIFIC_TYPES[business_type])
    return types


def is_valid_type(business_type: BusinessType, type_key: str) -> bool:
    """True if *type_key* may be uploaded by a client of *business_type*."""
    return type_key in COMMON_TYPES or type_key in SPECIFIC_TYPES[BusinessType(business_type)]


def label_for(type_key: str) -> str:
    """Display label of *type_key*, whatever the business type; the key itself if unknown."""
    if type_key in COMMON_TYPES:
        return COMMON_TYPES[type_key]
    for types in SPECIFIC_TYPES.values():
        if type_key in types:
            return types[type_key]
    return type_key


def month_name(month: int) -> str:
    """French name of *month* (1 = Janvier)."""
    return MONTH_NAMES[check_month(month) - 1]
