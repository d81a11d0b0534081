"""
Boundary schema for extraction-service output (RawExtraction).

Each known section is validated on its own so one malformed section never
discards the others.  Flat sections keep unknown scalar keys as extras; they are
carried through normalization under their own names.
"""
from __future__ import annotations

import logging
from typing import Any, ClassVar, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from packages.shared.aliases import LEGACY_SOURCE_KEYS, TREATMENT_COLUMN_ALIASES

from .common import Warning
from .enums import SchemaRevision, ToothCondition

logger = logging.getLogger(__name__)

Scalar = Union[bool, int, float, str, None]


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (bool, int, float, str))


class ExtractionSection(BaseModel):
    """A flat section.  Declared fields are typed; other scalar keys ride along."""
    model_config = ConfigDict(extra="allow")

    # Keys that may legitimately hold nested objects.
    STRUCTURED_KEYS: ClassVar[frozenset[str]] = frozenset()

    def flat_items(self) -> list[tuple[str, Any]]:
        data = self.model_dump(exclude_none=True)
        return [(k, v) for k, v in data.items() if k not in self.STRUCTURED_KEYS]


class PatientSection(ExtractionSection):
    lastName: Scalar = None
    firstName: Scalar = None
    middleName: Scalar = None
    birthdate: Scalar = None
    age: Scalar = None
    sex: Scalar = None
    nickname: Scalar = None
    religion: Scalar = None
    nationality: Scalar = None
    homeAddress: Scalar = None
    occupation: Scalar = None
    dentalInsurance: Scalar = None
    effectiveDate: Scalar = None
    referredBy: Scalar = None
    consultationReason: Scalar = None

    def full_name(self) -> str:
        last = _text(self.lastName)
        first = _text(self.firstName)
        if not (last or first):
            return ""
        return f"{last}, {first} {_text(self.middleName)}".strip()

    def gender_code(self) -> str:
        raw = _text(self.sex or (self.model_extra or {}).get("gender")).upper()
        if raw in ("M", "MALE"):
            return "M"
        if raw in ("F", "FEMALE"):
            return "F"
        return ""


class DentalHistorySection(ExtractionSection):
    previousDentist: Scalar = None
    lastDentalVisit: Scalar = None


class MedicalHistorySection(ExtractionSection):
    STRUCTURED_KEYS: ClassVar[frozenset[str]] = frozenset({"allergies", "forWomenOnly", "medicalConditions"})

    physicianName: Scalar = None
    physicianSpecialty: Scalar = None
    physicianAddress: Scalar = None
    goodHealth: Scalar = None
    hospitalized: Scalar = None
    hospitalizationDetails: Scalar = None
    bleedingTime: Scalar = None
    bloodType: Scalar = None
    bloodPressure: Scalar = None
    # Shape checked during normalization; a malformed sub-object is skipped alone.
    allergies: Any = None
    forWomenOnly: Any = None
    medicalConditions: Any = None


class ConsentSection(ExtractionSection):
    initial: Scalar = None


class PeriodontalSection(ConsentSection):
    gingivitis: Scalar = None
    earlyPeriodontitis: Scalar = None
    moderatePeriodontitis: Scalar = None
    advancedPeriodontitis: Scalar = None


class OcclusionSection(ExtractionSection):
    molarClass: Scalar = None
    overjet: Scalar = None
    overbite: Scalar = None
    midlineDeviation: Scalar = None
    crossbite: Scalar = None


class AppliancesSection(ExtractionSection):
    orthodontic: Scalar = None
    stayplate: Scalar = None
    others: Scalar = None


class TmdSection(ExtractionSection):
    clenching: Scalar = None
    clicking: Scalar = None
    trismus: Scalar = None
    muscleSpasm: Scalar = None


class ToothFinding(BaseModel):
    """One charted tooth position."""
    model_config = ConfigDict(extra="ignore")

    toothNumber: str
    condition: Optional[ToothCondition] = None
    restorations: list[str] = Field(default_factory=list)
    surgeries: list[str] = Field(default_factory=list)

    @field_validator("toothNumber", mode="before")
    @classmethod
    def _tooth_number_text(cls, v: Any) -> Any:
        if isinstance(v, bool):
            return v
        if isinstance(v, (int, float)):
            return str(int(v))
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("condition", mode="before")
    @classmethod
    def _lenient_condition(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v.strip():
            return None
        token = v.strip().upper().replace(" ", "_")
        if token not in ToothCondition.__members__:
            logger.debug(f"Unrecognized tooth condition {v!r}; treating as unset")
            return None
        return token

    @field_validator("restorations", "surgeries", mode="before")
    @classmethod
    def _code_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return v
        return [str(code).strip() for code in v if code is not None and str(code).strip()]

    @field_validator("surgeries")
    @classmethod
    def _upper_surgeries(cls, v: list[str]) -> list[str]:
        return [code.upper() for code in v]


def _column_choices(column: str) -> AliasChoices:
    return AliasChoices(*TREATMENT_COLUMN_ALIASES[column])


class TreatmentRecordEntry(BaseModel):
    """Column view over one verbatim treatment-record dict."""
    model_config = ConfigDict(extra="ignore")

    date: Scalar = Field(default=None, validation_alias=_column_choices("date"))
    toothQuantity: Scalar = Field(default=None, validation_alias=_column_choices("toothQuantity"))
    procedure: Scalar = Field(default=None, validation_alias=_column_choices("procedure"))
    dentist: Scalar = Field(default=None, validation_alias=_column_choices("dentist"))
    amountCharged: Scalar = Field(default=None, validation_alias=_column_choices("amountCharged"))
    amountPaid: Scalar = Field(default=None, validation_alias=_column_choices("amountPaid"))
    balance: Scalar = Field(default=None, validation_alias=_column_choices("balance"))
    nextAppointment: Scalar = Field(default=None, validation_alias=_column_choices("nextAppointment"))

    @model_validator(mode="before")
    @classmethod
    def _drop_blank(cls, data: Any) -> Any:
        # Blank primary keys must not shadow a populated alternate.
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None and v != "" and _is_scalar(v)}
        return data


# ── RawExtraction ────────────────────────────────────────────────────────

_SECTION_MODELS: dict[str, type[ExtractionSection]] = {
    "patient": PatientSection,
    "dentalHistory": DentalHistorySection,
    "medicalHistory": MedicalHistorySection,
    "periodontal": PeriodontalSection,
    "occlusion": OcclusionSection,
    "appliances": AppliancesSection,
    "tmd": TmdSection,
    "treatment": ConsentSection,
    "drugsMedication": ConsentSection,
    "changesInPlan": ConsentSection,
    "radiograph": ConsentSection,
    "removalOfTeeth": ConsentSection,
    "crownsBridges": ConsentSection,
    "endodontics": ConsentSection,
    "fillings": ConsentSection,
    "dentures": ConsentSection,
}

_SCALAR_KEYS = ("patientSignature", "dentistSignature", "date")

_LIST_SOURCE_KEYS = {
    "toothFindings": ("ToothFinding", "toothFindings"),
    "treatmentRecord": ("treatmentRecord", "treatmentRecords"),
}


class RawExtraction(BaseModel):
    patient: Optional[PatientSection] = None
    dentalHistory: Optional[DentalHistorySection] = None
    medicalHistory: Optional[MedicalHistorySection] = None
    toothFindings: Optional[list[ToothFinding]] = None
    periodontal: Optional[PeriodontalSection] = None
    occlusion: Optional[OcclusionSection] = None
    appliances: Optional[AppliancesSection] = None
    tmd: Optional[TmdSection] = None
    treatment: Optional[ConsentSection] = None
    drugsMedication: Optional[ConsentSection] = None
    changesInPlan: Optional[ConsentSection] = None
    radiograph: Optional[ConsentSection] = None
    removalOfTeeth: Optional[ConsentSection] = None
    crownsBridges: Optional[ConsentSection] = None
    endodontics: Optional[ConsentSection] = None
    fillings: Optional[ConsentSection] = None
    dentures: Optional[ConsentSection] = None
    patientSignature: Scalar = None
    dentistSignature: Scalar = None
    date: Scalar = None
    treatmentRecord: Optional[list[dict[str, Any]]] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_payload(cls, payload: Any) -> tuple[RawExtraction, list[Warning]]:
        """
        Validate a raw extraction-service object section by section.

        Returns (extraction, warnings).  Never raises for malformed input:
        offending sections, entries or keys are dropped and reported.
        """
        warnings: list[Warning] = []
        if not isinstance(payload, dict):
            warnings.append(Warning(
                code="SECTION_INVALID",
                message=f"Extraction payload must be an object, got {type(payload).__name__}",
            ))
            return cls(), warnings

        values: dict[str, Any] = {}
        for name, model in _SECTION_MODELS.items():
            raw = payload.get(name)
            if raw is None:
                continue
            if not isinstance(raw, dict):
                warnings.append(Warning(
                    code="SECTION_INVALID",
                    message=f"Section '{name}' must be an object, got {type(raw).__name__}",
                    section=name,
                ))
                continue
            cleaned = _drop_nested_extras(name, raw, model, warnings)
            try:
                values[name] = model.model_validate(cleaned)
            except ValidationError as exc:
                warnings.append(Warning(
                    code="SECTION_INVALID",
                    message=f"Section '{name}' failed validation: {exc.error_count()} error(s)",
                    section=name,
                ))

        findings = _first_present(payload, _LIST_SOURCE_KEYS["toothFindings"])
        if findings is not None:
            values["toothFindings"] = _validate_tooth_findings(findings, warnings)

        records = _first_present(payload, _LIST_SOURCE_KEYS["treatmentRecord"])
        if records is not None:
            values["treatmentRecord"] = _validate_treatment_records(records, warnings)

        for key in _SCALAR_KEYS:
            value = payload.get(key)
            if value is None:
                continue
            if _is_scalar(value):
                values[key] = value
            else:
                warnings.append(Warning(
                    code="EXTRA_FIELD_SKIPPED",
                    message=f"Top-level '{key}' is not a scalar value",
                    section=key,
                ))

        return cls(**values), warnings

    def flat_sections(self) -> list[tuple[str, ExtractionSection]]:
        return [
            (name, section)
            for name in ("patient", "dentalHistory", "medicalHistory")
            if (section := getattr(self, name)) is not None
        ]

    def schema_revision(self) -> SchemaRevision:
        for _, section in self.flat_sections():
            if LEGACY_SOURCE_KEYS.intersection((section.model_extra or {}).keys()):
                return SchemaRevision.LEGACY
        return SchemaRevision.CURRENT


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _first_present(payload: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _drop_nested_extras(
    section: str,
    raw: dict,
    model: type[ExtractionSection],
    warnings: list[Warning],
) -> dict:
    cleaned: dict = {}
    for key, value in raw.items():
        if key in model.STRUCTURED_KEYS or _is_scalar(value):
            cleaned[key] = value
            continue
        warnings.append(Warning(
            code="EXTRA_FIELD_SKIPPED",
            message=f"Section '{section}' key '{key}' holds a nested value; skipped",
            section=section,
        ))
    return cleaned


def _validate_tooth_findings(raw: Any, warnings: list[Warning]) -> list[ToothFinding]:
    if not isinstance(raw, list):
        warnings.append(Warning(
            code="SECTION_INVALID",
            message=f"Tooth findings must be a list, got {type(raw).__name__}",
            section="toothFindings",
        ))
        return []
    findings: list[ToothFinding] = []
    for i, entry in enumerate(raw):
        try:
            findings.append(ToothFinding.model_validate(entry))
        except ValidationError:
            warnings.append(Warning(
                code="TOOTH_FINDING_INVALID",
                message=f"Tooth finding #{i + 1} is malformed; skipped",
                section="toothFindings",
            ))
    return findings


def _validate_treatment_records(raw: Any, warnings: list[Warning]) -> list[dict[str, Any]]:
    if not isinstance(raw, list):
        warnings.append(Warning(
            code="SECTION_INVALID",
            message=f"Treatment records must be a list, got {type(raw).__name__}",
            section="treatmentRecord",
        ))
        return []
    records: list[dict[str, Any]] = []
    for i, entry in enumerate(raw):
        if isinstance(entry, dict):
            records.append(dict(entry))
        else:
            warnings.append(Warning(
                code="TREATMENT_RECORD_INVALID",
                message=f"Treatment record #{i + 1} is not an object; skipped",
                section="treatmentRecord",
            ))
    return records
