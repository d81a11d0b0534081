"""
Coordinate layout primitives for the fixed-geometry chart form.

Every primitive takes an immutable ``LayoutContext`` and returns the context to
use next; the vertical cursor never lives in shared state.  Coordinates are
form millimetres from the top-left corner; conversion to reportlab points
happens only inside the canvas helpers below.

Each draw call brackets its canvas changes in saveState/restoreState so font
and color never leak from one primitive into the next.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from reportlab.lib.colors import Color
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen.canvas import Canvas
from reportlab.platypus import Flowable

from packages.shared.models import Warning
from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import (
    BLACK,
    BODY_SIZE,
    CHECKBOX_MM,
    FONT,
    FONT_BOLD,
    FOOTER_OFFSET_MM,
    LABEL_GRAY,
    MARGIN_MM,
    PAGE_HEIGHT_MM,
    PAGE_TOP_MM,
    PAGE_WIDTH_MM,
    RIGHT_EDGE_MM,
    RULE_WIDTH_MM,
    TOTAL_PAGES,
    WHITE,
    YES_NO_OFFSET_MM,
    pt,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutContext:
    """Cursor state for one render pass."""
    canvas: Canvas
    resolver: FieldResolver
    page_number: int = 1
    y: float = PAGE_TOP_MM
    warnings: tuple[Warning, ...] = field(default_factory=tuple)
    # True while drawing an overflow page that repeats the previous page number.
    continued: bool = False

    def at(self, y: float) -> LayoutContext:
        return replace(self, y=y)

    def down(self, dy: float) -> LayoutContext:
        return replace(self, y=self.y + dy)

    def warn(self, warning: Warning) -> LayoutContext:
        return replace(self, warnings=self.warnings + (warning,))


# ── Canvas helpers (form mm -> reportlab points) ─────────────────────────


def _px(x_mm: float) -> float:
    return pt(x_mm)


def _py(y_mm: float) -> float:
    return pt(PAGE_HEIGHT_MM - y_mm)


def draw_text(
    c: Canvas,
    x: float,
    y: float,
    text: str,
    *,
    size: float = BODY_SIZE,
    bold: bool = False,
    color: Color = BLACK,
    align: str = "left",
) -> None:
    """Draw one line of text with its baseline at form coordinate (x, y)."""
    if not text:
        return
    c.saveState()
    c.setFont(FONT_BOLD if bold else FONT, size)
    c.setFillColor(color)
    if align == "center":
        c.drawCentredString(_px(x), _py(y), text)
    elif align == "right":
        c.drawRightString(_px(x), _py(y), text)
    else:
        c.drawString(_px(x), _py(y), text)
    c.restoreState()


def draw_line(
    c: Canvas,
    x1: float,
    y1: float,
    x2: float,
    y2: float,
    *,
    width: float = RULE_WIDTH_MM,
    color: Color = BLACK,
) -> None:
    c.saveState()
    c.setStrokeColor(color)
    c.setLineWidth(pt(width))
    c.line(_px(x1), _py(y1), _px(x2), _py(y2))
    c.restoreState()


def draw_box(
    c: Canvas,
    x: float,
    y: float,
    w: float,
    h: float,
    *,
    width: float = RULE_WIDTH_MM,
    color: Color = BLACK,
) -> None:
    """Outline a rectangle whose top-left corner is (x, y)."""
    c.saveState()
    c.setStrokeColor(color)
    c.setLineWidth(pt(width))
    c.rect(_px(x), _py(y + h), pt(w), pt(h), stroke=1, fill=0)
    c.restoreState()


def draw_circle(
    c: Canvas,
    cx: float,
    cy: float,
    r: float,
    *,
    width: float = 0.4,
    color: Color = BLACK,
) -> None:
    c.saveState()
    c.setStrokeColor(color)
    c.setLineWidth(pt(width))
    c.circle(_px(cx), _py(cy), pt(r), stroke=1, fill=0)
    c.restoreState()


def draw_band(
    c: Canvas,
    x: float,
    y: float,
    w: float,
    h: float,
    title: str,
    *,
    fill: Color,
    radius: float,
    size: float,
    baseline: float,
    text_x: float | None = None,
) -> None:
    """Filled rounded title band with white bold text centered on *text_x*."""
    c.saveState()
    c.setFillColor(fill)
    c.roundRect(_px(x), _py(y + h), pt(w), pt(h), pt(radius), stroke=0, fill=1)
    c.restoreState()
    center = text_x if text_x is not None else x + w / 2
    draw_text(c, center, y + baseline, title, size=size, bold=True, color=WHITE, align="center")


# ── Form primitives ──────────────────────────────────────────────────────


def draw_labeled_rule(
    ctx: LayoutContext,
    label: str,
    key: str | None,
    *,
    x: float = MARGIN_MM,
    rule_start: float,
    rule_end: float = RIGHT_EDGE_MM,
    value: str | None = None,
    size: float = BODY_SIZE,
    advance: float = 0.0,
) -> LayoutContext:
    """
    Label at the cursor, an underline from *rule_start* to *rule_end* (absolute
    mm) and the resolved value sitting just above the line.
    """
    y = ctx.y
    text = value if value is not None else (ctx.resolver.text(key) if key else "")
    draw_text(ctx.canvas, x, y, label, size=size)
    draw_line(ctx.canvas, rule_start, y + 1, rule_end, y + 1)
    draw_text(ctx.canvas, rule_start + 1, y - 0.5, text, size=size)
    return ctx.down(advance)


def draw_mark_box(ctx: LayoutContext, x: float, top: float, checked: bool) -> None:
    """A small square with an X when *checked*; *top* is the box's upper edge."""
    draw_box(ctx.canvas, x, top, CHECKBOX_MM, CHECKBOX_MM, color=LABEL_GRAY)
    if checked:
        draw_text(ctx.canvas, x + 0.5, top + 2.3, "X", size=9, bold=True)


def draw_yes_no(
    ctx: LayoutContext,
    key: str,
    *,
    x: float = RIGHT_EDGE_MM - YES_NO_OFFSET_MM,
) -> LayoutContext:
    """
    Yes/No checkbox pair level with the cursor line.

    At most one box is marked: affirmative and negative values are disjoint,
    and a value that is neither leaves both empty.
    """
    top = ctx.y - 2
    yes = ctx.resolver.is_affirmative(key)
    no = ctx.resolver.is_negative(key)
    draw_mark_box(ctx, x, top, yes)
    draw_text(ctx.canvas, x + 4, top + 2.3, "Yes", size=BODY_SIZE)
    draw_mark_box(ctx, x + 12, top, no)
    draw_text(ctx.canvas, x + 16, top + 2.3, "No", size=BODY_SIZE)
    return ctx


def draw_question(
    ctx: LayoutContext,
    question: str,
    key: str,
    *,
    size: float = BODY_SIZE,
    advance: float = 5.0,
) -> LayoutContext:
    draw_text(ctx.canvas, MARGIN_MM, ctx.y, question, size=size)
    return draw_yes_no(ctx, key).down(advance)


def draw_paren_checkbox(
    ctx: LayoutContext,
    label: str,
    checked: bool,
    x: float,
    *,
    size: float = BODY_SIZE,
) -> LayoutContext:
    """Inline "( X ) label" checkbox on the cursor baseline."""
    y = ctx.y
    draw_text(ctx.canvas, x, y, "(", size=size)
    if checked:
        draw_text(ctx.canvas, x + 1, y, "X", size=size, bold=True)
    draw_text(ctx.canvas, x + 2.5, y, ")", size=size)
    draw_text(ctx.canvas, x + 4.5, y, label, size=size)
    return ctx


def wrap_lines(text: str, width: float, *, size: float, bold: bool = False) -> list[str]:
    """Split *text* to fit *width* mm; blank input keeps one empty line."""
    if not text:
        return [""]
    return simpleSplit(text, FONT_BOLD if bold else FONT, size, pt(width)) or [""]


def measure_paragraph(text: str, width: float, *, size: float, line_height: float) -> float:
    return len(wrap_lines(text, width, size=size)) * line_height


def draw_paragraph(
    ctx: LayoutContext,
    text: str,
    *,
    x: float = MARGIN_MM,
    width: float = PAGE_WIDTH_MM - 2 * MARGIN_MM,
    size: float,
    line_height: float,
    bold: bool = False,
) -> LayoutContext:
    """
    Word-wrap *text* starting at the cursor baseline.

    Returns the context moved down by the height consumed, so the caller can
    place the next element directly after the block.
    """
    lines = wrap_lines(text, width, size=size, bold=bold)
    y = ctx.y
    for line in lines:
        draw_text(ctx.canvas, x, y, line, size=size, bold=bold)
        y += line_height
    return ctx.at(y)


def draw_flowable(ctx: LayoutContext, flowable: Flowable, height: float, *, x: float = MARGIN_MM) -> LayoutContext:
    """Draw an already-wrapped flowable of *height* points with its top at the cursor."""
    height_mm = height / mm
    flowable.drawOn(ctx.canvas, _px(x), _py(ctx.y + height_mm))
    return ctx.down(height_mm)


def footer_label(page_number: int, *, continued: bool = False) -> str:
    label = f"Page {page_number} of {TOTAL_PAGES}"
    if continued:
        label += " (continued)"
    return label


def stamp_footer(ctx: LayoutContext, *, continued: bool = False) -> None:
    draw_text(
        ctx.canvas,
        PAGE_WIDTH_MM / 2,
        PAGE_HEIGHT_MM - FOOTER_OFFSET_MM,
        footer_label(ctx.page_number, continued=continued),
        size=BODY_SIZE,
        align="center",
    )


def finish_page(ctx: LayoutContext, *, overflow: bool = False) -> LayoutContext:
    """
    Stamp the running footer and close the page.

    The returned context points at the top of the next page.  With *overflow*
    the next page continues the current one: it keeps the page number and its
    footer reads "(continued)".
    """
    stamp_footer(ctx, continued=ctx.continued)
    ctx.canvas.showPage()
    logger.debug(f"Finished {footer_label(ctx.page_number, continued=ctx.continued)}")
    if overflow:
        return replace(ctx, y=PAGE_TOP_MM, continued=True)
    return replace(ctx, page_number=ctx.page_number + 1, y=PAGE_TOP_MM, continued=False)


def value_or(value: Any, fallback: str) -> str:
    text = "" if value is None else str(value).strip()
    return text or fallback
