"""
Odontogram: glyph resolution and the four-arch tooth drawing.
"""
from __future__ import annotations

from typing import Mapping, NamedTuple, Optional

from packages.shared.models import SurgeryCode, ToothCondition, ToothFinding
from apps.chart.steps.export_render.constants import (
    MARGIN_MM,
    PAGE_WIDTH_MM,
    RIGHT_EDGE_MM,
    TOOTH_PITCH_MM,
)
from apps.chart.steps.export_render.layout import LayoutContext, draw_circle, draw_text

SURGERY_GLYPHS: dict[str, str] = {
    SurgeryCode.EXTRACTION_CARIES.value: "X",
    SurgeryCode.EXTRACTION_OTHER.value: "XO",
}

CONDITION_GLYPHS: dict[ToothCondition, str] = {
    ToothCondition.DECAYED: "D",
    ToothCondition.MISSING_CARIES: "M",
    ToothCondition.MISSING_OTHER: "MO",
    ToothCondition.IMPACTED: "Im",
    ToothCondition.SUPERNUMERARY: "Sp",
    ToothCondition.ROOT_FRAGMENT: "Rf",
    ToothCondition.UNERUPTED: "Un",
}


class Arch(NamedTuple):
    name: str
    teeth: tuple[str, ...]
    labels_above: bool
    label_gap: float  # between the label baseline and the circle row
    circle_dy: float
    radius: float
    glyph_dy: float
    glyph_size: float
    advance: float  # cursor step after the arch's second row


ARCHES: tuple[Arch, ...] = (
    Arch("upper_deciduous", ("55", "54", "53", "52", "51", "61", "62", "63", "64", "65"),
         labels_above=True, label_gap=4, circle_dy=1.5, radius=2.2, glyph_dy=2, glyph_size=4, advance=8),
    Arch("upper_permanent", ("18", "17", "16", "15", "14", "13", "12", "11",
                             "21", "22", "23", "24", "25", "26", "27", "28"),
         labels_above=True, label_gap=5, circle_dy=2, radius=3, glyph_dy=2.5, glyph_size=5, advance=10),
    Arch("lower_permanent", ("48", "47", "46", "45", "44", "43", "42", "41",
                             "31", "32", "33", "34", "35", "36", "37", "38"),
         labels_above=False, label_gap=7, circle_dy=2, radius=3, glyph_dy=2.5, glyph_size=5, advance=6),
    Arch("lower_deciduous", ("85", "84", "83", "82", "81", "71", "72", "73", "74", "75"),
         labels_above=False, label_gap=5, circle_dy=1.5, radius=2.2, glyph_dy=2, glyph_size=4, advance=10),
)

ALL_TEETH: tuple[str, ...] = tuple(t for arch in ARCHES for t in arch.teeth)

LABEL_SIZE = 6


def resolve_tooth_glyph(finding: Optional[ToothFinding]) -> str:
    """
    Single display glyph for one tooth: surgery, then restoration, then
    condition.  PRESENT and unrecorded teeth draw nothing.
    """
    if finding is None:
        return ""
    for code in finding.surgeries:
        glyph = SURGERY_GLYPHS.get(code)
        if glyph:
            return glyph
    # Several restorations on one tooth still print only the first code.
    if finding.restorations:
        return finding.restorations[0]
    if finding.condition is not None:
        return CONDITION_GLYPHS.get(finding.condition, "")
    return ""


def resolve_tooth_glyphs(findings: Mapping[str, ToothFinding]) -> dict[str, str]:
    return {tooth: resolve_tooth_glyph(findings.get(tooth)) for tooth in ALL_TEETH}


def arch_x_positions(arch: Arch) -> list[float]:
    """Tooth centers for a row centered on the page."""
    start = PAGE_WIDTH_MM / 2 - len(arch.teeth) * TOOTH_PITCH_MM / 2
    return [start + i * TOOTH_PITCH_MM + TOOTH_PITCH_MM / 2 for i in range(len(arch.teeth))]


def _draw_labels(ctx: LayoutContext, arch: Arch, xs: list[float], y: float) -> None:
    for tooth, x in zip(arch.teeth, xs):
        draw_text(ctx.canvas, x, y, tooth, size=LABEL_SIZE, align="center")


def _draw_markers(ctx: LayoutContext, arch: Arch, xs: list[float], y: float, glyphs: Mapping[str, str]) -> None:
    for tooth, x in zip(arch.teeth, xs):
        draw_circle(ctx.canvas, x, y + arch.circle_dy, arch.radius)
        glyph = glyphs.get(tooth, "")
        if glyph:
            draw_text(ctx.canvas, x, y + arch.glyph_dy, glyph, size=arch.glyph_size, align="center")


def draw_arch(ctx: LayoutContext, arch: Arch, glyphs: Mapping[str, str]) -> LayoutContext:
    xs = arch_x_positions(arch)
    y = ctx.y
    if arch.labels_above:
        _draw_labels(ctx, arch, xs, y)
        y += arch.label_gap
        _draw_markers(ctx, arch, xs, y, glyphs)
    else:
        _draw_markers(ctx, arch, xs, y, glyphs)
        y += arch.label_gap
        _draw_labels(ctx, arch, xs, y)
    return ctx.at(y + arch.advance)


def draw_odontogram(ctx: LayoutContext) -> LayoutContext:
    """
    Draw all four arches starting at the cursor (the chart's top edge).

    Findings come from the resolver, so an edited ``toothFindings`` value
    redraws the chart the same way as extracted data.
    """
    glyphs = resolve_tooth_glyphs(ctx.resolver.tooth_findings())
    chart_top = ctx.y
    draw_text(ctx.canvas, MARGIN_MM + 5, chart_top + 15, "RIGHT", size=7, bold=True)
    draw_text(ctx.canvas, RIGHT_EDGE_MM - 20, chart_top + 15, "LEFT", size=7, bold=True)

    ctx = ctx.down(5)
    for arch in ARCHES:
        ctx = draw_arch(ctx, arch, glyphs)
    return ctx
