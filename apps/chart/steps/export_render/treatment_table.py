"""
Treatment-record table (page 5).

Rows come from the user's edited current entry when there is one, otherwise
from every canonical record, oldest first.  The printed form reserves 30 rows;
shorter tables are padded, longer ones are kept whole and continue on an
overflow page with the same column widths and a repeated header row.
"""
from __future__ import annotations

import logging
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.platypus import Paragraph, Table, TableStyle

from packages.shared.models import TreatmentRecordEntry
from packages.shared.utils.text import scalar_text
from apps.chart.steps.step01_normalize import CURRENT_TREATMENT_KEYS
from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import (
    BLACK,
    FONT,
    FONT_BOLD,
    GRID_GRAY,
    HEADER_FILL,
    MARGIN_MM,
    TABLE_ALIGNMENTS,
    TABLE_BOTTOM_MM,
    TABLE_COLUMN_WIDTHS_MM,
    TABLE_HEADERS,
    TABLE_MIN_ROWS,
    TABLE_ROW_HEIGHT_MM,
    pt,
)
from apps.chart.steps.export_render.layout import LayoutContext, draw_flowable, finish_page

logger = logging.getLogger(__name__)

COLUMNS: tuple[str, ...] = tuple(CURRENT_TREATMENT_KEYS)
_PARAGRAPH_ALIGN = {"LEFT": TA_LEFT, "CENTER": TA_CENTER, "RIGHT": TA_RIGHT}


class LayoutError(RuntimeError):
    """A flowable could not be placed on an empty page."""


def record_row(record: dict[str, Any]) -> list[str]:
    entry = TreatmentRecordEntry.model_validate(record)
    return [scalar_text(getattr(entry, column)) for column in COLUMNS]


def edited_row(resolver: FieldResolver) -> list[str]:
    """The current entry with the user's edits laid over the canonical values."""
    return [resolver.text(key) for key in CURRENT_TREATMENT_KEYS.values()]


def build_table_rows(resolver: FieldResolver, *, min_rows: int = TABLE_MIN_ROWS) -> list[list[str]]:
    if resolver.has_edited_current_treatment():
        rows = [edited_row(resolver)]
        logger.info("Treatment table: using the edited current entry")
    else:
        rows = [record_row(r) for r in resolver.treatment_records()]
        logger.info(f"Treatment table: {len(rows)} extracted record(s)")
    if len(rows) > min_rows:
        logger.info(f"Treatment table exceeds {min_rows} rows; continuing on an overflow page")
    while len(rows) < min_rows:
        rows.append([""] * len(COLUMNS))
    return rows


def _cell_styles() -> list[ParagraphStyle]:
    return [
        ParagraphStyle(
            f"TreatmentCell{i}",
            fontName=FONT,
            fontSize=7,
            leading=8.5,
            alignment=_PARAGRAPH_ALIGN[align],
        )
        for i, align in enumerate(TABLE_ALIGNMENTS)
    ]


def _row_height(row: list[str]) -> float | None:
    """Printed row height, or None (auto) when a cell needs to wrap."""
    for text, width in zip(row, TABLE_COLUMN_WIDTHS_MM):
        if text and stringWidth(text, FONT, 7) > pt(width - 3):
            return None
    return pt(TABLE_ROW_HEIGHT_MM)


def build_table(rows: list[list[str]]) -> Table:
    styles = _cell_styles()
    data: list[list[Any]] = [list(TABLE_HEADERS)]
    for row in rows:
        data.append([
            Paragraph(escape(text), styles[i]) if text else ""
            for i, text in enumerate(row)
        ])

    table = Table(
        data,
        colWidths=[pt(w) for w in TABLE_COLUMN_WIDTHS_MM],
        rowHeights=[None] + [_row_height(row) for row in rows],
        repeatRows=1,
    )
    style = [
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), BLACK),
        ("FONTNAME", (0, 0), (-1, 0), FONT_BOLD),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("LEADING", (0, 0), (-1, 0), 9),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        ("VALIGN", (0, 0), (-1, 0), "MIDDLE"),
        ("VALIGN", (0, 1), (-1, -1), "TOP"),
        ("INNERGRID", (0, 0), (-1, -1), pt(0.3), GRID_GRAY),
        ("BOX", (0, 0), (-1, -1), pt(0.3), GRID_GRAY),
        ("BOX", (0, 0), (-1, 0), pt(0.4), BLACK),
        ("TOPPADDING", (0, 0), (-1, -1), pt(1.5)),
        ("BOTTOMPADDING", (0, 0), (-1, -1), pt(1.5)),
        ("LEFTPADDING", (0, 0), (-1, -1), pt(1.5)),
        ("RIGHTPADDING", (0, 0), (-1, -1), pt(1.5)),
    ]
    for i, align in enumerate(TABLE_ALIGNMENTS):
        style.append(("ALIGN", (i, 1), (i, -1), align))
    table.setStyle(TableStyle(style))
    return table


def draw_treatment_table(ctx: LayoutContext) -> LayoutContext:
    """
    Draw the table at the cursor, spilling onto overflow pages as needed.

    Returns the context on the page holding the table's last row; the caller
    stamps that page's footer.
    """
    rows = build_table_rows(ctx.resolver)
    remaining = build_table(rows)
    avail_width = pt(sum(TABLE_COLUMN_WIDTHS_MM))

    while True:
        avail_height = pt(TABLE_BOTTOM_MM - ctx.y)
        _, height = remaining.wrapOn(ctx.canvas, avail_width, avail_height)
        if height <= avail_height:
            return draw_flowable(ctx, remaining, height, x=MARGIN_MM)

        parts = remaining.split(avail_width, avail_height)
        if len(parts) < 2:
            raise LayoutError(f"Treatment table cannot be split on page {ctx.page_number}")
        head, remaining = parts[0], parts[1]
        _, head_height = head.wrapOn(ctx.canvas, avail_width, avail_height)
        draw_flowable(ctx, head, head_height, x=MARGIN_MM)
        ctx = finish_page(ctx, overflow=True)
