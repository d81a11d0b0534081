"""
Dental chart assembly.

Draws the five fixed pages in order onto one reportlab canvas and returns the
finished bytes.  Nothing is returned unless every page rendered; any engine
failure surfaces as DocumentGenerationError.
"""
from __future__ import annotations

import io
import logging
import os
from datetime import date

from reportlab.pdfgen import canvas

from packages.shared.models import CanonicalFieldMap, RenderedDocument, UserEdits
from packages.shared.utils.text import collapse_whitespace
from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import PAGE_SIZE
from apps.chart.steps.export_render.layout import LayoutContext
from apps.chart.steps.export_render.pages import (
    render_page1,
    render_page2,
    render_page3,
    render_page4,
    render_page5,
    subject_name,
)

logger = logging.getLogger(__name__)

DEFAULT_LOGO_PATH = os.environ.get("DENTAL_CHART_LOGO_PATH") or None
DEFAULT_SUBJECT_LABEL = "Patient"


class DocumentGenerationError(RuntimeError):
    """The PDF engine failed; no document was produced."""


def chart_filename(resolver: FieldResolver) -> str:
    """``<Last>[_<First>]_Dental_Chart.pdf`` with whitespace runs collapsed to "_"."""
    last = resolver.text("lastName") or DEFAULT_SUBJECT_LABEL
    first = resolver.text("firstName")
    name = f"{last}_{first}" if first else last
    return f"{collapse_whitespace(name, '_')}_Dental_Chart.pdf"


def render_dental_chart(
    canonical: CanonicalFieldMap,
    edits: UserEdits | None = None,
    *,
    today: date | None = None,
    logo_path: str | None = DEFAULT_LOGO_PATH,
) -> RenderedDocument:
    """
    Render (canonical, edits) to the five-page chart PDF.

    Output is byte-identical for identical inputs and *today*; reportlab runs in
    invariant mode so no timestamps or random ids reach the file.
    """
    today = today or date.today()
    resolver = FieldResolver(canonical, edits)
    filename = chart_filename(resolver)
    buffer = io.BytesIO()

    try:
        pdf = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=1)
        pdf.setTitle(f"Dental Chart - {subject_name(resolver, 'chartPatientName') or DEFAULT_SUBJECT_LABEL}")
        ctx = LayoutContext(canvas=pdf, resolver=resolver)
        ctx = render_page1(ctx, logo_path=logo_path)
        ctx = render_page2(ctx)
        ctx = render_page3(ctx)
        ctx = render_page4(ctx, today=today)
        ctx = render_page5(ctx)
        page_count = pdf.getPageNumber() - 1
        pdf.save()
    except Exception as exc:
        logger.exception(f"[{filename}] Dental chart generation failed: {exc}")
        raise DocumentGenerationError("Failed to generate dental chart PDF") from exc

    content = buffer.getvalue()
    logger.info(f"[{filename}] Rendered {page_count} page(s), {len(content)} bytes")
    return RenderedDocument(
        filename=filename,
        content=content,
        page_count=page_count,
        warnings=list(ctx.warnings),
    )
