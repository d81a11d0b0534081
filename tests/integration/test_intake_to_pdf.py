"""
Integration test: multi-page intake through to a saved chart PDF.
"""
from __future__ import annotations

import io
from datetime import date
from unittest.mock import MagicMock

import pytest
from pypdf import PdfReader

from packages.shared import storage
from apps.chart.extraction_client import ExtractionClient, UploadResponse
from apps.chart.intake import PageUpload, merge_page_extractions
from apps.chart.pipeline import run_pipeline

PAGE_RESULTS = [
    UploadResponse(success=True, extractedData={
        "patient": {"firstName": "Juan", "lastName": "Dela Cruz", "birthdate": "01/02/90", "sex": "M"},
        "medicalHistory": {"allergies": {"penicillin": "Yes"}},
    }),
    UploadResponse(success=True, extractedData={
        "toothFindings": [
            {"toothNumber": "18", "condition": "DECAYED"},
            {"toothNumber": "36", "surgeries": ["EXTRACTION_CARIES"], "restorations": ["AM"]},
        ],
    }),
    UploadResponse(success=False, error="Network error", detail="timeout"),
    UploadResponse(success=True, extractedData={
        "treatmentRecord": [{"date": "03/04/25", "procedure": "Oral prophylaxis", "amountCharged": 800}],
    }),
]


@pytest.fixture
def artifacts_dir(tmp_path, monkeypatch):
    root = tmp_path / "artifacts"
    monkeypatch.setattr(storage, "ARTIFACTS_DIR", root)
    return root


class TestIntakeToPdf:
    def test_partial_intake_still_produces_chart(self, artifacts_dir):
        client = MagicMock(spec=ExtractionClient)
        client.create_record.return_value = "rec-42"
        client.upload_page.side_effect = PAGE_RESULTS

        pages = [PageUpload(filename=f"page{i}.png", data=b"img") for i in range(1, 5)]
        intake = merge_page_extractions(client, pages)
        assert intake.pages_succeeded == [1, 2, 4]

        result = run_pipeline(
            intake.extraction,
            today=date(2025, 6, 1),
            record_id=intake.record_id,
            save=True,
            logo_path=None,
        )
        fields = result.normalization.fields
        assert fields["birthdate"] == "1990-01-02"
        assert fields["allergy_penicillin"] is True
        assert fields["decayedTeeth"] == "18"
        assert fields["extractionCaries"] == "36"
        assert fields["amalgamFilling"] == "36"
        assert fields["treatmentDate"] == "2025-03-04"

        assert result.saved_path == artifacts_dir / "rec-42" / "Dela_Cruz_Juan_Dental_Chart.pdf"
        reader = PdfReader(io.BytesIO(result.saved_path.read_bytes()))
        assert len(reader.pages) == 5
        page4 = reader.pages[3].extract_text()
        assert "Dela Cruz, Juan" in page4
        assert "Page 4 of 5" in page4
        assert "Oral prophylaxis" in reader.pages[4].extract_text()
