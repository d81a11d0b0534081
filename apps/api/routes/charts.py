"""
API route: Dental charts
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from packages.shared.models import SchemaRevision, Warning
from apps.chart.pipeline import run_pipeline
from apps.chart.steps.step01_normalize import normalize_payload
from apps.chart.steps.export_render import DocumentGenerationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/charts", tags=["charts"])


class NormalizeRequest(BaseModel):
    extraction: Any = None
    today: Optional[date] = None


class NormalizeResponse(BaseModel):
    fields: dict[str, Any]
    warnings: list[Warning]
    schema_revision: SchemaRevision


class RenderRequest(BaseModel):
    extraction: Any = None
    edits: dict[str, Any] = Field(default_factory=dict)
    today: Optional[date] = None
    record_id: Optional[str] = None


@router.post("/normalize", response_model=NormalizeResponse)
def normalize_chart(req: NormalizeRequest):
    """Normalize one extraction payload into the canonical field map."""
    result = normalize_payload(req.extraction, today=req.today)
    return NormalizeResponse(
        fields=result.fields,
        warnings=result.warnings,
        schema_revision=result.schema_revision,
    )


@router.post("/render")
def render_chart(req: RenderRequest):
    """Render the five-page chart PDF and return it as a download."""
    try:
        result = run_pipeline(req.extraction, req.edits, today=req.today, record_id=req.record_id)
    except DocumentGenerationError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    document = result.document
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{document.filename}"',
            "X-Page-Count": str(document.page_count),
            "X-Warning-Count": str(len(result.warnings)),
        },
    )
