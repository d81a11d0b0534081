from .common import CanonicalFieldMap, NormalizationResult, RenderedDocument, UserEdits, Warning
from .enums import FindingState, RestorationCode, SchemaRevision, SurgeryCode, ToothCondition
from .extraction import (
    AppliancesSection,
    ConsentSection,
    DentalHistorySection,
    MedicalHistorySection,
    OcclusionSection,
    PatientSection,
    PeriodontalSection,
    RawExtraction,
    TmdSection,
    ToothFinding,
    TreatmentRecordEntry,
)

__all__ = [
    "AppliancesSection",
    "CanonicalFieldMap",
    "ConsentSection",
    "DentalHistorySection",
    "FindingState",
    "MedicalHistorySection",
    "NormalizationResult",
    "OcclusionSection",
    "PatientSection",
    "PeriodontalSection",
    "RawExtraction",
    "RenderedDocument",
    "RestorationCode",
    "SchemaRevision",
    "SurgeryCode",
    "TmdSection",
    "ToothCondition",
    "ToothFinding",
    "TreatmentRecordEntry",
    "UserEdits",
    "Warning",
]
