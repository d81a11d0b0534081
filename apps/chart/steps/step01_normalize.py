"""
Step 1 — Normalization.

Flattens a validated RawExtraction into the canonical key space:
- flat sections through the alias table (identity for unmapped keys),
- allergy / women's-health / condition sub-objects under a namespacing prefix
  with yes/no coerced to booleans,
- subject identity copied into every page header that prints it,
- per-tooth findings aggregated into comma-joined tooth lists,
- clinical findings re-encoded as present/absent/unknown,
- consent initials, signatures, signature date and treatment records.

Pure function of its input; malformed pieces were already dropped (and
reported) by ``RawExtraction.from_payload``.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any

from packages.shared.aliases import (
    ALLERGIES,
    DENTAL_HISTORY,
    FOR_WOMEN_ONLY,
    MEDICAL_CONDITIONS,
    PATIENT,
    SUBSECTION_PREFIXES,
    section_aliases,
)
from packages.shared.dates import normalize_date
from packages.shared.models import (
    CanonicalFieldMap,
    FindingState,
    NormalizationResult,
    RawExtraction,
    ToothCondition,
    ToothFinding,
    TreatmentRecordEntry,
    Warning,
)
from packages.shared.models.enums import RestorationCode, SurgeryCode
from packages.shared.models.extraction import ExtractionSection
from packages.shared.utils.text import (
    has_value,
    is_affirmative_value,
    is_negative_value,
    scalar_text,
)

logger = logging.getLogger(__name__)

# ── Static mappings ──────────────────────────────────────────────────────

_DATE_FIELDS: dict[str, tuple[str, ...]] = {
    PATIENT: ("birthdate", "effectiveDate"),
    DENTAL_HISTORY: ("lastDentalVisit",),
}

# Page-header keys that repeat the subject identity (chart page, treatment page).
HEADER_NAME_KEYS = ("chartPatientName", "treatmentPatientName")
HEADER_AGE_KEYS = ("chartAge", "treatmentAge")
HEADER_GENDER_KEYS = ("chartGender", "treatmentGender")

CONDITION_LISTS: dict[ToothCondition, str] = {
    ToothCondition.PRESENT: "presentTeeth",
    ToothCondition.DECAYED: "decayedTeeth",
    ToothCondition.MISSING_CARIES: "missingTeeth",
    ToothCondition.MISSING_OTHER: "missingTeeth",
    ToothCondition.IMPACTED: "impactedTeeth",
    ToothCondition.ROOT_FRAGMENT: "rootFragments",
    ToothCondition.SUPERNUMERARY: "supernumeraryTeeth",
    ToothCondition.UNERUPTED: "uneruptedTeeth",
}
SURGERY_LISTS: dict[str, str] = {
    SurgeryCode.EXTRACTION_CARIES.value: "extractionCaries",
    SurgeryCode.EXTRACTION_OTHER.value: "extractionOther",
}
RESTORATION_LISTS: dict[str, str] = {
    RestorationCode.AMALGAM.value: "amalgamFilling",
    RestorationCode.COMPOSITE.value: "compositeFilling",
    RestorationCode.JACKET_CROWN.value: "jacketCrown",
    RestorationCode.INLAY.value: "inlayImplant",
    RestorationCode.IMPLANT.value: "inlayImplant",
    RestorationCode.SEALANT.value: "sealants",
}
# Output order of the aggregated keys.
TOOTH_LIST_KEYS: tuple[str, ...] = tuple(dict.fromkeys([
    *CONDITION_LISTS.values(),
    *SURGERY_LISTS.values(),
    *RESTORATION_LISTS.values(),
]))

CONSENT_INITIAL_KEYS: dict[str, str] = {
    "treatment": "treatmentInitial",
    "drugsMedication": "drugsInitial",
    "changesInPlan": "planChangesInitial",
    "radiograph": "radiographInitial",
    "removalOfTeeth": "removalInitial",
    "crownsBridges": "crownsInitial",
    "endodontics": "rootCanalInitial",
    "periodontal": "periodontalInitial",
    "fillings": "fillingsInitial",
    "dentures": "denturesInitial",
}

OCCLUSION_FLAGS = ("overjet", "overbite", "midlineDeviation", "crossbite")
APPLIANCE_FLAGS = ("orthodontic", "stayplate")

# Canonical keys of the "current" (most recent) treatment entry.
CURRENT_TREATMENT_KEYS: dict[str, str] = {
    "date": "treatmentDate",
    "toothQuantity": "toothNumbers",
    "procedure": "procedure",
    "dentist": "dentistName",
    "amountCharged": "amountCharged",
    "amountPaid": "amountPaid",
    "balance": "balance",
    "nextAppointment": "nextAppointment",
}
_CURRENT_TREATMENT_DATES = ("date", "nextAppointment")


# ── Coercions ────────────────────────────────────────────────────────────


def coerce_flag(value: Any) -> bool | None:
    """Yes/true -> True, everything else non-empty -> False, empty -> None."""
    if not has_value(value):
        return None
    return is_affirmative_value(value)


def to_finding_state(value: Any) -> str:
    if is_affirmative_value(value):
        return FindingState.PRESENT.value
    if is_negative_value(value):
        return FindingState.ABSENT.value
    return FindingState.UNKNOWN.value


# ── Section flattening ───────────────────────────────────────────────────


def _apply_aliases(section: str, items: dict[str, Any]) -> dict[str, Any]:
    """Map source keys to canonical keys; first non-empty alias wins."""
    table = section_aliases(section)
    out: dict[str, Any] = {}
    claimed: set[str] = set()
    for canonical, names in table.items():
        claimed.update(names)
        claimed.add(canonical)
        for source in names:
            value = items.get(source)
            if has_value(value):
                if source != canonical:
                    logger.debug(f"{section}.{source} -> {canonical}")
                out[canonical] = value
                break
    for key, value in items.items():
        if key not in claimed:
            out[key] = value
    return out


def flatten_section(
    name: str,
    section: ExtractionSection,
    today: date | None = None,
) -> dict[str, Any]:
    out = _apply_aliases(name, dict(section.flat_items()))
    for key in _DATE_FIELDS.get(name, ()):
        if key in out:
            out[key] = normalize_date(out[key], today)
    return out


def flatten_subsection(name: str, raw: Any, warnings: list[Warning]) -> dict[str, Any]:
    """Flatten one medicalHistory sub-object under its prefix."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        warnings.append(Warning(
            code="SUBSECTION_INVALID",
            message=f"medicalHistory.{name} must be an object, got {type(raw).__name__}",
            section=name,
        ))
        return {}
    prefix = SUBSECTION_PREFIXES[name]
    scalars = {k: v for k, v in raw.items() if not isinstance(v, (dict, list))}
    out: dict[str, Any] = {}
    for key, value in _apply_aliases(name, scalars).items():
        flag = coerce_flag(value)
        if flag is not None:
            out[f"{prefix}{key}"] = flag
    return out


def subject_headers(extraction: RawExtraction) -> dict[str, Any]:
    patient = extraction.patient
    if patient is None:
        return {}
    full_name = patient.full_name()
    age = patient.age
    gender = patient.gender_code()
    out: dict[str, Any] = {}
    for key in HEADER_NAME_KEYS:
        if full_name:
            out[key] = full_name
    for key in HEADER_AGE_KEYS:
        if has_value(age):
            out[key] = age
    for key in HEADER_GENDER_KEYS:
        if gender:
            out[key] = gender
    return out


def aggregate_tooth_findings(findings: list[ToothFinding]) -> dict[str, Any]:
    """
    Build per-category tooth lists in scan order.

    A tooth may land in several lists (decayed and restored), but at most once
    per list even when two codes share it (IN and IMP).
    """
    lists: dict[str, list[str]] = {key: [] for key in TOOTH_LIST_KEYS}
    for finding in findings:
        targets: list[str] = []
        if finding.condition is not None:
            targets.append(CONDITION_LISTS[finding.condition])
        for code in finding.surgeries:
            if code in SURGERY_LISTS:
                targets.append(SURGERY_LISTS[code])
        for code in finding.restorations:
            target = RESTORATION_LISTS.get(code.upper())
            if target:
                targets.append(target)
        for target in dict.fromkeys(targets):
            lists[target].append(finding.toothNumber)

    out: dict[str, Any] = {
        key: ", ".join(numbers) for key, numbers in lists.items() if numbers
    }
    out["toothFindings"] = [
        f.model_dump(mode="json", exclude_none=True) for f in findings
    ]
    return out


def clinical_findings(extraction: RawExtraction) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for section in (extraction.periodontal, extraction.tmd):
        if section is None:
            continue
        for key, value in section.flat_items():
            if key == "initial":
                continue
            out[key] = to_finding_state(value)

    occlusion = extraction.occlusion
    if occlusion is not None:
        if has_value(occlusion.molarClass):
            out["occlusionClass"] = occlusion.molarClass
        for key in OCCLUSION_FLAGS:
            out[key] = to_finding_state(getattr(occlusion, key))

    appliances = extraction.appliances
    if appliances is not None:
        for key in APPLIANCE_FLAGS:
            out[key] = to_finding_state(getattr(appliances, key))
        others = appliances.others
        if isinstance(others, bool):
            out["otherAppliances"] = to_finding_state(others)
        elif has_value(others):
            out["otherAppliances"] = others
    return out


def consent_and_signatures(extraction: RawExtraction, today: date | None = None) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for section_name, key in CONSENT_INITIAL_KEYS.items():
        section = getattr(extraction, section_name)
        if section is not None and has_value(section.initial):
            out[key] = section.initial
    for key in ("patientSignature", "dentistSignature"):
        value = getattr(extraction, key)
        if has_value(value):
            out[key] = value
    if has_value(extraction.date):
        out["signatureDate"] = normalize_date(scalar_text(extraction.date), today)
    return out


def treatment_records(extraction: RawExtraction, today: date | None = None) -> dict[str, Any]:
    records = extraction.treatmentRecord
    if not records:
        return {}
    out: dict[str, Any] = {"treatmentRecord": [dict(r) for r in records]}
    current = TreatmentRecordEntry.model_validate(records[-1])
    for column, key in CURRENT_TREATMENT_KEYS.items():
        value = getattr(current, column)
        if not has_value(value):
            continue
        text = scalar_text(value)
        if column in _CURRENT_TREATMENT_DATES:
            text = normalize_date(text, today)
        out[key] = text
    return out


# ── Entry points ─────────────────────────────────────────────────────────


def normalize_extraction(extraction: RawExtraction, today: date | None = None) -> NormalizationResult:
    """
    Produce a fresh CanonicalFieldMap from a full (merged) extraction.

    Sections are written in a fixed order; when two sections produce the same
    canonical key the later section wins.
    """
    fields: CanonicalFieldMap = {}
    warnings: list[Warning] = []

    for name, section in extraction.flat_sections():
        fields.update(flatten_section(name, section, today))

    medical = extraction.medicalHistory
    if medical is not None:
        for name in (ALLERGIES, FOR_WOMEN_ONLY, MEDICAL_CONDITIONS):
            fields.update(flatten_subsection(name, getattr(medical, name), warnings))

    fields.update(subject_headers(extraction))

    if extraction.toothFindings is not None:
        fields.update(aggregate_tooth_findings(extraction.toothFindings))

    fields.update(clinical_findings(extraction))
    fields.update(consent_and_signatures(extraction, today))
    fields.update(treatment_records(extraction, today))

    revision = extraction.schema_revision()
    logger.info(
        f"Normalized extraction: {len(fields)} canonical fields, "
        f"{len(warnings)} warnings, schema={revision.value}"
    )
    return NormalizationResult(fields=fields, warnings=warnings, schema_revision=revision)


def normalize_payload(payload: Any, today: date | None = None) -> NormalizationResult:
    """Validate a raw extraction-service object and normalize it."""
    extraction, boundary_warnings = RawExtraction.from_payload(payload)
    for w in boundary_warnings:
        logger.warning(f"[{w.section or 'extraction'}] {w.code}: {w.message}")
    result = normalize_extraction(extraction, today)
    return result.model_copy(update={"warnings": boundary_warnings + result.warnings})
