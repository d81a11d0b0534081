"""
Pipeline orchestrator — validate, normalize, resolve, render and (optionally) save.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from packages.shared.models import NormalizationResult, RenderedDocument, UserEdits
from packages.shared.storage import save_artifact
from apps.chart.steps.step01_normalize import normalize_payload
from apps.chart.steps.export_render import render_dental_chart
from apps.chart.steps.export_render.orchestrator import DEFAULT_LOGO_PATH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    normalization: NormalizationResult
    document: RenderedDocument
    saved_path: Path | None = None

    @property
    def warnings(self):
        return self.normalization.warnings + self.document.warnings


def run_pipeline(
    payload: Any,
    edits: UserEdits | None = None,
    *,
    today: date | None = None,
    record_id: str | None = None,
    save: bool = False,
    logo_path: str | None = DEFAULT_LOGO_PATH,
) -> PipelineResult:
    """
    Run one extraction payload through to a finished chart.

    Each call owns its canonical map, resolver and layout cursor, so concurrent
    calls never share state.  When *save* is set the document is written
    atomically under the record's artifact directory; DocumentGenerationError
    propagates and nothing is saved.
    """
    tag = record_id or "local"
    start_time = time.time()
    today = today or date.today()

    # ── Normalize ─────────────────────────────────────────────────────
    normalization = normalize_payload(payload, today=today)
    logger.info(
        f"[{tag}] Normalized {len(normalization.fields)} field(s) "
        f"({normalization.schema_revision.value} schema, {len(normalization.warnings)} warning(s))"
    )

    # ── Render ────────────────────────────────────────────────────────
    document = render_dental_chart(normalization.fields, edits, today=today, logo_path=logo_path)

    # ── Persist ───────────────────────────────────────────────────────
    saved_path = None
    if save:
        saved_path = save_artifact(record_id, document.filename, document.content)

    elapsed = time.time() - start_time
    logger.info(f"[{tag}] Pipeline complete in {elapsed:.2f}s: {document.filename}")
    return PipelineResult(normalization=normalization, document=document, saved_path=saved_path)
