"""
Step 2 — Field resolution.

One logical value per key: a non-empty user edit beats the canonical value,
and a missing value reads as "".  Alias-aware lookups let a single render call
read keys produced by either extraction schema revision.
"""
from __future__ import annotations

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping

from pydantic import ValidationError

from packages.shared.aliases import resolver_aliases
from packages.shared.models import CanonicalFieldMap, ToothFinding, UserEdits
from packages.shared.utils.text import (
    has_value,
    is_affirmative_value,
    is_negative_value,
    scalar_text,
)

from apps.chart.steps.step01_normalize import CURRENT_TREATMENT_KEYS

logger = logging.getLogger(__name__)

TOOTH_FINDINGS_KEY = "toothFindings"
TREATMENT_RECORDS_KEYS = ("treatmentRecord", "treatmentRecords")


class FieldResolver:
    """Read-only view over (CanonicalFieldMap, UserEdits)."""

    def __init__(self, canonical: CanonicalFieldMap | None = None, edits: UserEdits | None = None):
        # Private copies so a render never observes later mutation by the caller.
        self._canonical: Mapping[str, Any] = MappingProxyType(dict(canonical or {}))
        self._edits: Mapping[str, Any] = MappingProxyType(dict(edits or {}))

    @property
    def canonical(self) -> Mapping[str, Any]:
        return self._canonical

    @property
    def edits(self) -> Mapping[str, Any]:
        return self._edits

    def resolve(self, key: str) -> Any:
        edited = self._edits.get(key)
        if has_value(edited):
            return edited
        value = self._canonical.get(key)
        if value is not None:
            return value
        return ""

    def get(self, name: str) -> Any:
        """Resolve *name* through its aliases; first non-empty value wins."""
        for key in resolver_aliases(name):
            value = self.resolve(key)
            if has_value(value):
                return value
        return ""

    def text(self, name: str) -> str:
        return scalar_text(self.get(name))

    def is_affirmative(self, name: str) -> bool:
        return is_affirmative_value(self.get(name))

    def is_negative(self, name: str) -> bool:
        return is_negative_value(self.get(name))

    def first_text(self, *names: str) -> str:
        for name in names:
            text = self.text(name)
            if text:
                return text
        return ""

    # ── Structured values ────────────────────────────────────────────────

    def tooth_findings(self) -> dict[str, ToothFinding]:
        """
        Per-tooth findings keyed by tooth number.

        Accepts the list stored by normalization or a JSON string of it (as an
        editor round-trips it).  Unparseable input yields no findings.
        """
        raw = self.get(TOOTH_FINDINGS_KEY)
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                logger.warning("toothFindings is not valid JSON; odontogram left blank")
                return {}
        if not isinstance(raw, list):
            return {}

        findings: dict[str, ToothFinding] = {}
        for entry in raw:
            try:
                finding = ToothFinding.model_validate(entry)
            except ValidationError:
                logger.debug(f"Skipping malformed tooth finding {entry!r}")
                continue
            findings.setdefault(finding.toothNumber, finding)
        return findings

    def treatment_records(self) -> list[dict[str, Any]]:
        for key in TREATMENT_RECORDS_KEYS:
            raw = self.resolve(key)
            if isinstance(raw, list) and raw:
                return [r for r in raw if isinstance(r, dict)]
        return []

    def has_edited_current_treatment(self) -> bool:
        return any(has_value(self._edits.get(key)) for key in CURRENT_TREATMENT_KEYS.values())
