from typing import Any, Optional

from pydantic import BaseModel, Field

from .enums import SchemaRevision

# Canonical values are scalars, a joined tooth list, or the verbatim
# treatment-record / tooth-finding lists kept for table and chart rendering.
CanonicalFieldMap = dict[str, Any]
UserEdits = dict[str, Any]


class Warning(BaseModel):
    code: str
    message: str
    section: Optional[str] = None


class NormalizationResult(BaseModel):
    fields: CanonicalFieldMap = Field(default_factory=dict)
    warnings: list[Warning] = Field(default_factory=list)
    schema_revision: SchemaRevision = SchemaRevision.CURRENT


class RenderedDocument(BaseModel):
    """A finished chart PDF. Only ever built from a completed render."""
    filename: str
    content: bytes
    page_count: int
    warnings: list[Warning] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def size_bytes(self) -> int:
        return len(self.content)
