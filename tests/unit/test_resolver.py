"""
Unit tests for Step 2 — Field resolution.
"""
from __future__ import annotations

import json

import pytest

from apps.chart.steps.step01_normalize import normalize_payload
from apps.chart.steps.step02_resolve import FieldResolver


class TestResolvePrecedence:
    def test_edit_beats_canonical(self):
        r = FieldResolver({"lastName": "Reyes"}, {"lastName": "Santos"})
        assert r.resolve("lastName") == "Santos"

    def test_empty_edit_falls_back_to_canonical(self):
        r = FieldResolver({"lastName": "Reyes"}, {"lastName": ""})
        assert r.resolve("lastName") == "Reyes"

    def test_missing_key_is_empty_string(self):
        assert FieldResolver().resolve("anything") == ""

    def test_false_canonical_value_is_kept(self):
        r = FieldResolver({"allergy_latex": False})
        assert r.resolve("allergy_latex") is False

    def test_caller_mutation_not_observed(self):
        canonical = {"lastName": "Reyes"}
        r = FieldResolver(canonical)
        canonical["lastName"] = "Changed"
        assert r.resolve("lastName") == "Reyes"

    def test_views_are_read_only(self):
        r = FieldResolver({"a": 1})
        with pytest.raises(TypeError):
            r.canonical["a"] = 2  # type: ignore[index]


class TestAliasLookup:
    def test_legacy_key_read_through_alias(self):
        r = FieldResolver({"homeNo": "8123-4567"})
        assert r.text("homePhone") == "8123-4567"

    def test_allergy_from_raw_yes(self):
        fields = normalize_payload({"medicalHistory": {"allergies": {"penicillin": "Yes"}}}).fields
        r = FieldResolver(fields)
        assert r.get("allergy_penicillin") is True
        assert r.is_affirmative("allergy_penicillin")

    def test_bare_and_camel_condition_keys(self):
        assert FieldResolver({"asthma": "yes"}).is_affirmative("condition_asthma")
        assert FieldResolver({"conditionAsthma": True}).is_affirmative("condition_asthma")

    def test_first_text(self):
        r = FieldResolver({"age": 35})
        assert r.first_text("chartAge", "age") == "35"


class TestTriState:
    @pytest.mark.parametrize("value", [True, False, "Yes", "no", "TRUE", "false", "", None, "maybe", 1, 0])
    def test_never_both_affirmative_and_negative(self, value):
        r = FieldResolver({"k": value})
        assert not (r.is_affirmative("k") and r.is_negative("k"))

    def test_missing_is_neither(self):
        r = FieldResolver()
        assert not r.is_affirmative("goodHealth")
        assert not r.is_negative("goodHealth")

    def test_edit_flips_answer(self):
        r = FieldResolver({"goodHealth": "Yes"}, {"goodHealth": "No"})
        assert r.is_negative("goodHealth")
        assert not r.is_affirmative("goodHealth")


class TestStructuredValues:
    def test_tooth_findings_from_list(self):
        r = FieldResolver({"toothFindings": [
            {"toothNumber": "18", "condition": "DECAYED"},
            {"toothNumber": "18", "condition": "PRESENT"},
            {"condition": "DECAYED"},
        ]})
        findings = r.tooth_findings()
        assert list(findings) == ["18"]
        assert findings["18"].condition.value == "DECAYED"

    def test_tooth_findings_from_json_edit(self):
        edit = json.dumps([{"toothNumber": "21", "surgeries": ["EXTRACTION_OTHER"]}])
        r = FieldResolver({}, {"toothFindings": edit})
        assert r.tooth_findings()["21"].surgeries == ["EXTRACTION_OTHER"]

    def test_tooth_findings_bad_json(self):
        assert FieldResolver({"toothFindings": "{not json"}).tooth_findings() == {}

    def test_treatment_records_either_key(self):
        assert FieldResolver({"treatmentRecords": [{"procedure": "X"}]}).treatment_records() == [{"procedure": "X"}]
        assert FieldResolver({"treatmentRecord": []}).treatment_records() == []

    def test_edited_current_treatment(self):
        assert FieldResolver({"procedure": "X"}).has_edited_current_treatment() is False
        assert FieldResolver({}, {"procedure": "Y"}).has_edited_current_treatment() is True
        assert FieldResolver({}, {"procedure": ""}).has_edited_current_treatment() is False
