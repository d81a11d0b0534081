"""
HTTP client for the extraction service.

The service turns one scanned form page into RawExtraction JSON.  A dental
record is created first; each page is then uploaded against that record.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Optional

import requests
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

EXTRACTION_API_URL = os.environ.get("EXTRACTION_API_URL", "http://localhost:5002").rstrip("/")
EXTRACTION_TIMEOUT_SECONDS = float(os.environ.get("EXTRACTION_TIMEOUT_SECONDS", "120"))


class UploadResponse(BaseModel):
    success: bool = False
    patientId: Optional[str] = None
    dentalRecordId: Optional[str] = None
    extractedData: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    detail: Optional[str] = None


class ExtractionClient:
    def __init__(
        self,
        base_url: str = EXTRACTION_API_URL,
        timeout: float = EXTRACTION_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def create_record(self) -> str:
        """Create an empty dental record and return its id. Transport errors propagate."""
        resp = self.session.post(f"{self.base_url}/dental-records", timeout=self.timeout)
        resp.raise_for_status()
        record_id = resp.json().get("recordId")
        if not record_id:
            raise ValueError("Extraction service returned no recordId")
        return str(record_id)

    def upload_page(self, record_id: str, page_number: int, filename: str, data: bytes,
                    content_type: str = "image/png") -> UploadResponse:
        """
        Upload one page.  Never raises: an error body from the service is returned
        as-is, anything else becomes an unsuccessful "Network error" response.
        """
        url = f"{self.base_url}/dental-records/{record_id}/page-{page_number}"
        try:
            resp = self.session.post(
                url,
                files={"file": (filename, data, content_type)},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            return UploadResponse.model_validate(resp.json())
        except requests.HTTPError as exc:
            logger.warning(f"[{record_id}] Page {page_number} upload rejected: {exc}")
            body = _error_body(exc.response)
            if body is not None:
                return body
            return UploadResponse(success=False, error="Network error", detail=str(exc))
        except (requests.RequestException, ValueError, ValidationError) as exc:
            logger.warning(f"[{record_id}] Page {page_number} upload failed: {exc}")
            return UploadResponse(success=False, error="Network error", detail=str(exc))


def _error_body(response: requests.Response | None) -> UploadResponse | None:
    if response is None:
        return None
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return UploadResponse.model_validate({**payload, "success": False})
    except ValidationError:
        return None
