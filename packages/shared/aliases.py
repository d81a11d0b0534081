"""
Static alias table: canonical field name -> ordered source key names.

The extraction service has shipped two key-naming schemes for the same form
(e.g. ``homeNo`` vs ``homePhone``).  Normalization consults this table per
section, and the field resolver uses the derived lookup so a single render call
reads either scheme.  Order matters: the first non-empty alias wins.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# ── Section names (RawExtraction top-level keys) ─────────────────────────

PATIENT = "patient"
DENTAL_HISTORY = "dentalHistory"
MEDICAL_HISTORY = "medicalHistory"
ALLERGIES = "allergies"
FOR_WOMEN_ONLY = "forWomenOnly"
MEDICAL_CONDITIONS = "medicalConditions"
TREATMENT_RECORD = "treatmentRecord"

# ── Flat sections ────────────────────────────────────────────────────────

_FLAT_SECTION_ALIASES: dict[str, dict[str, tuple[str, ...]]] = {
    PATIENT: {
        "homePhone": ("homePhone", "homeNo", "homeNumber"),
        "officePhone": ("officePhone", "officeNo", "officeNumber"),
        "mobileNumber": ("mobileNumber", "cellMobileNo", "cellphone"),
        "faxNumber": ("faxNumber", "faxNo"),
        "email": ("email", "emailAddress"),
        "guardianName": ("guardianName", "parentGuardianName"),
        "guardianOccupation": ("guardianOccupation", "parentOccupation"),
        "sex": ("sex", "gender"),
    },
    DENTAL_HISTORY: {
        "previousDentist": ("previousDentist", "previousDentistName"),
        "lastDentalVisit": ("lastDentalVisit", "lastVisit"),
    },
    MEDICAL_HISTORY: {
        "physicianPhone": ("physicianPhone", "physicianOfficeNumber"),
        "underTreatment": ("underTreatment", "underMedicalTreatment"),
        "treatmentCondition": ("treatmentCondition", "medicalConditionBeingTreated"),
        "seriousIllness": ("seriousIllness", "seriousIllnessSurgery"),
        "illnessDetails": ("illnessDetails", "illnessOrOperationDetails"),
        "takingMedication": ("takingMedication", "medications"),
        "medicationsList": ("medicationsList", "medicationList", "medicationDetails"),
        "tobacco": ("tobacco", "useTobacco"),
        "dangerousDrugs": ("dangerousDrugs", "substanceUse", "useAlcoholDrugs"),
    },
}

# ── Namespaced sub-objects of medicalHistory ─────────────────────────────

SUBSECTION_PREFIXES: Mapping[str, str] = MappingProxyType({
    ALLERGIES: "allergy_",
    FOR_WOMEN_ONLY: "women_",
    MEDICAL_CONDITIONS: "condition_",
})

_SUBSECTION_ALIASES: dict[str, dict[str, tuple[str, ...]]] = {
    ALLERGIES: {
        "localAnesthetic": ("localAnesthetic", "anesthetic"),
        "penicillin": ("penicillin",),
        "antibiotics": ("antibiotics",),
        "aspirin": ("aspirin",),
        "latex": ("latex",),
        "sulfaDrugs": ("sulfaDrugs", "sulfa"),
        "others": ("others", "other"),
    },
    FOR_WOMEN_ONLY: {
        "pregnant": ("pregnant",),
        "nursing": ("nursing",),
        "birthControl": ("birthControl", "takingBirthControl"),
    },
    MEDICAL_CONDITIONS: {
        "jointReplacementImplant": ("jointReplacementImplant", "jointReplacement"),
        "aidsHivInfection": ("aidsHivInfection", "aidsHiv"),
    },
}

# ── Treatment-record columns ─────────────────────────────────────────────

TREATMENT_COLUMN_ALIASES: Mapping[str, tuple[str, ...]] = MappingProxyType({
    "date": ("date",),
    "toothQuantity": ("toothQuantity", "toothNumber", "tooth"),
    "procedure": ("procedure", "treatment"),
    "dentist": ("dentist",),
    "amountCharged": ("amountCharged",),
    "amountPaid": ("amountPaid",),
    "balance": ("balance",),
    "nextAppointment": ("nextAppointment", "nextVisit"),
})

# Key names only the older extraction schema emits.
LEGACY_SOURCE_KEYS = frozenset({
    "homeNo", "officeNo", "cellMobileNo", "faxNo", "emailAddress",
    "parentGuardianName", "parentOccupation", "physicianOfficeNumber",
    "underMedicalTreatment", "medicalConditionBeingTreated",
    "seriousIllnessSurgery", "illnessOrOperationDetails", "medicationDetails",
    "useTobacco", "useAlcoholDrugs",
})

ALIAS_TABLE: Mapping[str, Mapping[str, tuple[str, ...]]] = MappingProxyType({
    section: MappingProxyType(table)
    for section, table in {**_FLAT_SECTION_ALIASES, **_SUBSECTION_ALIASES}.items()
})


def section_aliases(section: str) -> Mapping[str, tuple[str, ...]]:
    """Alias table for one section (empty mapping when the section has none)."""
    return ALIAS_TABLE.get(section, MappingProxyType({}))


def source_key_index(section: str) -> dict[str, str]:
    """Invert a section table: source key -> canonical key."""
    index: dict[str, str] = {}
    for canonical, names in section_aliases(section).items():
        for name in names:
            index.setdefault(name, canonical)
        index.setdefault(canonical, canonical)
    return index


def _dedupe(keys) -> tuple[str, ...]:
    seen: list[str] = []
    for k in keys:
        if k not in seen:
            seen.append(k)
    return tuple(seen)


def _legacy_camel(prefix: str, name: str) -> str:
    # allergy_ + penicillin -> allergyPenicillin
    return prefix.rstrip("_") + name[:1].upper() + name[1:]


def _build_resolver_aliases() -> dict[str, tuple[str, ...]]:
    lookup: dict[str, tuple[str, ...]] = {}
    for table in _FLAT_SECTION_ALIASES.values():
        for canonical, names in table.items():
            lookup[canonical] = _dedupe((canonical, *names))
    for section, prefix in SUBSECTION_PREFIXES.items():
        for canonical, names in _SUBSECTION_ALIASES[section].items():
            key = prefix + canonical
            lookup[key] = _dedupe((
                key,
                *(prefix + n for n in names),
                canonical,
                *names,
                _legacy_camel(prefix, canonical),
            ))
    return lookup


_RESOLVER_ALIASES = MappingProxyType(_build_resolver_aliases())


def resolver_aliases(key: str) -> tuple[str, ...]:
    """
    Ordered keys to try when resolving the logical field *key*.

    Namespaced keys not listed in the table still fall back to their bare and
    camel-cased spellings (``condition_asthma`` -> ``asthma``, ``conditionAsthma``).
    """
    known = _RESOLVER_ALIASES.get(key)
    if known is not None:
        return known
    for prefix in SUBSECTION_PREFIXES.values():
        if key.startswith(prefix) and len(key) > len(prefix):
            bare = key[len(prefix):]
            return _dedupe((key, bare, _legacy_camel(prefix, bare)))
    return (key,)
