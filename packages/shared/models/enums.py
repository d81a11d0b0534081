from enum import Enum


class ToothCondition(str, Enum):
    PRESENT = "PRESENT"
    DECAYED = "DECAYED"
    MISSING_CARIES = "MISSING_CARIES"
    MISSING_OTHER = "MISSING_OTHER"
    IMPACTED = "IMPACTED"
    ROOT_FRAGMENT = "ROOT_FRAGMENT"
    SUPERNUMERARY = "SUPERNUMERARY"
    UNERUPTED = "UNERUPTED"


class RestorationCode(str, Enum):
    AMALGAM = "AM"
    COMPOSITE = "CO"
    JACKET_CROWN = "JC"
    ABUTMENT = "AB"
    ATTACHMENT = "ATT"
    PONTIC = "P"
    INLAY = "IN"
    IMPLANT = "IMP"
    SEALANT = "S"
    REMOVABLE_DENTURE = "RM"


class SurgeryCode(str, Enum):
    EXTRACTION_CARIES = "EXTRACTION_CARIES"
    EXTRACTION_OTHER = "EXTRACTION_OTHER"


class FindingState(str, Enum):
    """Tri-state used by the clinical-findings checkboxes."""
    PRESENT = "present"
    ABSENT = "absent"
    UNKNOWN = "unknown"


class SchemaRevision(str, Enum):
    CURRENT = "current"  # camelCase names matching the canonical keys
    LEGACY = "legacy"  # homeNo, underMedicalTreatment, useTobacco, ...
