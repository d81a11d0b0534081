"""
Multi-page intake: sequential page uploads merged into one RawExtraction payload.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

from packages.shared.models import Warning
from apps.chart.extraction_client import ExtractionClient

logger = logging.getLogger(__name__)

MAX_PAGES = 4


class IntakeError(RuntimeError):
    """The dental record could not be created; no page was submitted."""


@dataclass(frozen=True)
class PageUpload:
    filename: str
    data: bytes
    content_type: str = "image/png"


@dataclass
class IntakeResult:
    record_id: str
    extraction: dict[str, Any] = field(default_factory=dict)
    pages_succeeded: list[int] = field(default_factory=list)
    warnings: list[Warning] = field(default_factory=list)


def merge_page_extractions(client: ExtractionClient, pages: Iterable[PageUpload]) -> IntakeResult:
    """
    Create a record, then submit up to four pages strictly in order.

    Each page gets one attempt.  A failed page is logged and skipped; the
    extracted sections of successful pages are merged top-level, later pages
    overwriting earlier ones.
    """
    try:
        record_id = client.create_record()
    except Exception as exc:
        logger.error(f"Failed to create dental record: {exc}")
        raise IntakeError("Failed to create dental record") from exc

    result = IntakeResult(record_id=record_id)
    for page_number, page in enumerate(list(pages)[:MAX_PAGES], start=1):
        logger.info(f"[{record_id}] Processing page {page_number} ({page.filename})")
        response = client.upload_page(record_id, page_number, page.filename, page.data, page.content_type)

        if not response.success:
            reason = response.error or "unknown error"
            if response.detail:
                reason = f"{reason}: {response.detail}"
            logger.warning(f"[{record_id}] Page {page_number} failed ({reason}); continuing")
            result.warnings.append(Warning(
                code="PAGE_EXTRACTION_FAILED",
                message=f"Page {page_number} extraction failed: {reason}",
            ))
            continue

        result.pages_succeeded.append(page_number)
        if response.extractedData:
            logger.debug(f"[{record_id}] Merging sections from page {page_number}: {sorted(response.extractedData)}")
            result.extraction.update(response.extractedData)
        else:
            logger.info(f"[{record_id}] Page {page_number} completed with no extractable data")

    logger.info(
        f"[{record_id}] Intake complete: {len(result.pages_succeeded)} page(s) succeeded, "
        f"{len(result.warnings)} failed"
    )
    return result
