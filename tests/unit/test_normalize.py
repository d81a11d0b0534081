"""
Unit tests for Step 1 — Normalization.
"""
from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from packages.shared.models import RawExtraction, RestorationCode, SchemaRevision, ToothFinding
from apps.chart.steps.step01_normalize import (
    RESTORATION_LISTS,
    aggregate_tooth_findings,
    coerce_flag,
    normalize_extraction,
    normalize_payload,
    to_finding_state,
)

TODAY = date(2025, 6, 1)
FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "sample_extraction.json"


def _sample() -> dict:
    with open(FIXTURE, "r", encoding="utf-8") as f:
        return json.load(f)


def _fields(payload) -> dict:
    return normalize_payload(payload, today=TODAY).fields


# ── Coercions ───────────────────────────────────────────────────────────


class TestCoercions:
    @pytest.mark.parametrize("value,expected", [
        ("Yes", True), ("yes ", True), (True, True), ("true", True),
        ("No", False), (False, False), ("maybe", False),
        ("", None), (None, None),
    ])
    def test_coerce_flag(self, value, expected):
        assert coerce_flag(value) is expected

    @pytest.mark.parametrize("value,expected", [
        (True, "present"), ("Yes", "present"),
        (False, "absent"), ("no", "absent"),
        (None, "unknown"), ("", "unknown"), ("sometimes", "unknown"),
    ])
    def test_finding_state(self, value, expected):
        assert to_finding_state(value) == expected


# ── Flat sections ───────────────────────────────────────────────────────


class TestFlatSections:
    def test_birthdate_is_iso_normalized(self):
        fields = _fields({"patient": {"birthdate": "01/02/90"}})
        assert fields["birthdate"] == "1990-01-02"

    def test_unparseable_birthdate_kept(self):
        fields = _fields({"patient": {"birthdate": "sometime in 1990"}})
        assert fields["birthdate"] == "sometime in 1990"

    def test_legacy_alias_maps_to_canonical(self):
        fields = _fields({"patient": {"homeNo": "555-0101"}})
        assert fields["homePhone"] == "555-0101"
        assert "homeNo" not in fields

    def test_first_non_empty_alias_wins(self):
        fields = _fields({"patient": {"homePhone": "", "homeNo": "111", "homeNumber": "222"}})
        assert fields["homePhone"] == "111"

    def test_canonical_name_beats_legacy(self):
        fields = _fields({"medicalHistory": {"underTreatment": "No", "underMedicalTreatment": "Yes"}})
        assert fields["underTreatment"] == "No"

    def test_unknown_scalar_keys_pass_through(self):
        fields = _fields({"patient": {"favoriteColor": "blue"}})
        assert fields["favoriteColor"] == "blue"

    def test_dental_history_date(self):
        fields = _fields({"dentalHistory": {"lastDentalVisit": "06/15/24"}})
        assert fields["lastDentalVisit"] == "2024-06-15"

    def test_missing_sections_emit_nothing(self):
        result = normalize_payload({}, today=TODAY)
        assert result.fields == {}
        assert result.warnings == []


# ── Sub-objects ─────────────────────────────────────────────────────────


class TestSubsections:
    def test_allergy_yes_becomes_true(self):
        fields = _fields({"medicalHistory": {"allergies": {"penicillin": "Yes"}}})
        assert fields["allergy_penicillin"] is True

    def test_allergy_alias(self):
        fields = _fields({"medicalHistory": {"allergies": {"anesthetic": "yes"}}})
        assert fields["allergy_localAnesthetic"] is True

    def test_women_and_conditions_prefixes(self):
        fields = _fields({"medicalHistory": {
            "forWomenOnly": {"pregnant": "No"},
            "medicalConditions": {"asthma": True},
        }})
        assert fields["women_pregnant"] is False
        assert fields["condition_asthma"] is True

    def test_empty_values_skipped(self):
        fields = _fields({"medicalHistory": {"allergies": {"latex": "", "aspirin": None}}})
        assert "allergy_latex" not in fields
        assert "allergy_aspirin" not in fields

    def test_malformed_subsection_warns_and_is_skipped(self):
        result = normalize_payload({"medicalHistory": {"allergies": ["penicillin"], "bloodType": "A"}}, today=TODAY)
        assert result.fields["bloodType"] == "A"
        assert not any(k.startswith("allergy_") for k in result.fields)
        assert [w.code for w in result.warnings] == ["SUBSECTION_INVALID"]


# ── Subject headers ─────────────────────────────────────────────────────


class TestSubjectHeaders:
    def test_name_age_gender_copied_to_both_pages(self):
        fields = _fields({"patient": {
            "firstName": "Juan", "lastName": "Dela Cruz", "age": 35, "sex": "Male",
        }})
        assert fields["chartPatientName"] == "Dela Cruz, Juan"
        assert fields["treatmentPatientName"] == "Dela Cruz, Juan"
        assert fields["chartAge"] == 35
        assert fields["chartGender"] == "M"
        assert fields["treatmentGender"] == "M"

    def test_middle_name_included(self):
        fields = _fields({"patient": {"firstName": "Ana", "lastName": "Reyes", "middleName": "Cruz"}})
        assert fields["chartPatientName"] == "Reyes, Ana Cruz"

    def test_unknown_gender_emits_no_key(self):
        fields = _fields({"patient": {"lastName": "Reyes", "sex": "X"}})
        assert "chartGender" not in fields

    def test_missing_name_parts_emit_no_name_keys(self):
        fields = _fields({"patient": {"age": 30, "sex": "F"}})
        assert "chartPatientName" not in fields
        assert "treatmentPatientName" not in fields
        assert fields["chartGender"] == "F"


# ── Tooth findings ──────────────────────────────────────────────────────


class TestToothAggregation:
    def test_decayed_list(self):
        fields = _fields({"toothFindings": [{"toothNumber": "18", "condition": "DECAYED"}]})
        assert fields["decayedTeeth"] == "18"

    def test_lists_keep_scan_order(self):
        findings = [
            ToothFinding(toothNumber="18", condition="DECAYED"),
            ToothFinding(toothNumber="11", condition="DECAYED"),
            ToothFinding(toothNumber="26", condition="DECAYED"),
        ]
        assert aggregate_tooth_findings(findings)["decayedTeeth"] == "18, 11, 26"

    def test_both_missing_conditions_share_one_list(self):
        findings = [
            ToothFinding(toothNumber="36", condition="MISSING_CARIES"),
            ToothFinding(toothNumber="46", condition="MISSING_OTHER"),
        ]
        assert aggregate_tooth_findings(findings)["missingTeeth"] == "36, 46"

    def test_inlay_and_implant_list_tooth_once(self):
        findings = [ToothFinding(toothNumber="14", restorations=["IN", "IMP"])]
        assert aggregate_tooth_findings(findings)["inlayImplant"] == "14"

    def test_restoration_lists_keyed_by_code(self):
        codes = {code.value for code in RestorationCode}
        assert set(RESTORATION_LISTS) <= codes
        assert RESTORATION_LISTS[RestorationCode.COMPOSITE.value] == "compositeFilling"

    def test_chart_only_restorations_not_listed(self):
        findings = [ToothFinding(toothNumber="21", restorations=["co", "P"])]
        out = aggregate_tooth_findings(findings)
        assert out["compositeFilling"] == "21"
        assert "P" not in RESTORATION_LISTS

    def test_tooth_can_appear_in_several_lists(self):
        findings = [ToothFinding(
            toothNumber="36", condition="DECAYED", restorations=["AM"], surgeries=["EXTRACTION_CARIES"],
        )]
        out = aggregate_tooth_findings(findings)
        assert out["decayedTeeth"] == "36"
        assert out["amalgamFilling"] == "36"
        assert out["extractionCaries"] == "36"

    def test_empty_categories_emit_no_key(self):
        out = aggregate_tooth_findings([ToothFinding(toothNumber="11", condition="PRESENT")])
        assert out["presentTeeth"] == "11"
        assert "decayedTeeth" not in out
        assert "sealants" not in out

    def test_findings_stored_verbatim(self):
        fields = _fields({"toothFindings": [{"toothNumber": 18, "condition": "decayed"}]})
        assert fields["toothFindings"] == [
            {"toothNumber": "18", "condition": "DECAYED", "restorations": [], "surgeries": []},
        ]

    def test_legacy_section_name(self):
        fields = _fields({"ToothFinding": [{"toothNumber": "21", "condition": "IMPACTED"}]})
        assert fields["impactedTeeth"] == "21"

    def test_malformed_entry_skipped_with_warning(self):
        result = normalize_payload({"toothFindings": [{"condition": "DECAYED"}, {"toothNumber": "11"}]}, today=TODAY)
        assert [f["toothNumber"] for f in result.fields["toothFindings"]] == ["11"]
        assert [w.code for w in result.warnings] == ["TOOTH_FINDING_INVALID"]


# ── Clinical findings, consent, treatment ───────────────────────────────


class TestClinicalFindings:
    def test_periodontal_and_tmd_tri_state(self):
        fields = _fields({
            "periodontal": {"gingivitis": True, "earlyPeriodontitis": False, "initial": "AB"},
            "tmd": {"clenching": "Yes", "clicking": None},
        })
        assert fields["gingivitis"] == "present"
        assert fields["earlyPeriodontitis"] == "absent"
        assert fields["clenching"] == "present"
        assert "initial" not in fields

    def test_occlusion_and_appliances(self):
        fields = _fields({
            "occlusion": {"molarClass": "Class II", "overjet": True},
            "appliances": {"stayplate": False, "others": "Retainer"},
        })
        assert fields["occlusionClass"] == "Class II"
        assert fields["overjet"] == "present"
        assert fields["overbite"] == "unknown"
        assert fields["stayplate"] == "absent"
        assert fields["otherAppliances"] == "Retainer"


class TestConsentAndSignatures:
    def test_initials_map_to_canonical_keys(self):
        fields = _fields({
            "endodontics": {"initial": "JD"},
            "periodontal": {"initial": "JD"},
            "changesInPlan": {"initial": "JD"},
        })
        assert fields["rootCanalInitial"] == "JD"
        assert fields["periodontalInitial"] == "JD"
        assert fields["planChangesInitial"] == "JD"

    def test_signature_date(self):
        fields = _fields({"date": "03/04/25", "patientSignature": "Yes"})
        assert fields["signatureDate"] == "2025-03-04"
        assert fields["patientSignature"] == "Yes"


class TestTreatmentRecords:
    def test_records_kept_and_last_flattened(self):
        fields = _fields(_sample())
        assert len(fields["treatmentRecord"]) == 2
        assert fields["procedure"] == "Composite filling"
        assert fields["toothNumbers"] == "18"
        assert fields["dentistName"] == "Dr. Garcia"
        assert fields["amountCharged"] == "2000"
        assert fields["balance"] == "1000"
        assert fields["treatmentDate"] == "2025-03-04"
        assert fields["nextAppointment"] == "2025-03-18"

    def test_non_object_records_skipped(self):
        result = normalize_payload({"treatmentRecord": ["junk", {"procedure": "Cleaning"}]}, today=TODAY)
        assert result.fields["treatmentRecord"] == [{"procedure": "Cleaning"}]
        assert result.fields["procedure"] == "Cleaning"
        assert [w.code for w in result.warnings] == ["TREATMENT_RECORD_INVALID"]

    def test_plural_source_key(self):
        fields = _fields({"treatmentRecords": [{"procedure": "Prophylaxis"}]})
        assert fields["procedure"] == "Prophylaxis"


# ── Boundary & schema ───────────────────────────────────────────────────


class TestBoundary:
    def test_non_object_payload(self):
        result = normalize_payload("garbage", today=TODAY)
        assert result.fields == {}
        assert result.warnings[0].code == "SECTION_INVALID"

    def test_non_object_section_skipped(self):
        result = normalize_payload({"patient": "Juan", "dentalHistory": {"previousDentist": "Dr. S"}}, today=TODAY)
        assert result.fields == {"previousDentist": "Dr. S"}
        assert result.warnings[0].section == "patient"

    def test_nested_extra_key_skipped(self):
        result = normalize_payload({"patient": {"lastName": "Reyes", "address": {"city": "QC"}}}, today=TODAY)
        assert "address" not in result.fields
        assert result.warnings[0].code == "EXTRA_FIELD_SKIPPED"

    def test_schema_revision_detection(self):
        assert normalize_payload({"patient": {"homeNo": "1"}}).schema_revision == SchemaRevision.LEGACY
        assert normalize_payload({"patient": {"homePhone": "1"}}).schema_revision == SchemaRevision.CURRENT

    def test_normalization_is_deterministic(self):
        payload = _sample()
        first = normalize_payload(payload, today=TODAY)
        second = normalize_payload(payload, today=TODAY)
        assert first.model_dump() == second.model_dump()

    def test_extraction_model_input(self):
        extraction, _ = RawExtraction.from_payload({"patient": {"lastName": "Reyes"}})
        assert normalize_extraction(extraction, TODAY).fields["lastName"] == "Reyes"
