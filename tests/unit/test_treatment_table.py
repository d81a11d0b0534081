"""
Unit tests for the treatment-record table.
"""
from __future__ import annotations

import io

from reportlab.pdfgen import canvas

from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import PAGE_SIZE, TABLE_MIN_ROWS, TABLE_ROW_HEIGHT_MM, pt
from apps.chart.steps.export_render.layout import LayoutContext
from apps.chart.steps.export_render.treatment_table import (
    COLUMNS,
    _row_height,
    build_table,
    build_table_rows,
    draw_treatment_table,
    record_row,
)


def _record(i: int) -> dict:
    return {
        "date": f"2025-01-{i:02d}" if i <= 28 else "2025-02-01",
        "toothQuantity": str(10 + i),
        "procedure": f"Procedure {i}",
        "dentist": "Dr. Garcia",
        "amountCharged": 1000 + i,
        "amountPaid": 1000,
        "balance": i,
        "nextAppointment": "",
    }


class TestRows:
    def test_empty_pads_to_thirty_blank_rows(self):
        rows = build_table_rows(FieldResolver())
        assert len(rows) == TABLE_MIN_ROWS == 30
        assert all(row == [""] * len(COLUMNS) for row in rows)

    def test_records_in_original_order(self):
        rows = build_table_rows(FieldResolver({"treatmentRecord": [_record(1), _record(2)]}))
        assert rows[0][2] == "Procedure 1"
        assert rows[1][2] == "Procedure 2"
        assert rows[2] == [""] * len(COLUMNS)
        assert len(rows) == 30

    def test_record_row_formats_amounts(self):
        row = record_row({"date": "2025-03-04", "amountCharged": 2000.0, "balance": 0, "dentist": "Dr. G"})
        assert row == ["2025-03-04", "", "", "Dr. G", "2000", "", "0", ""]

    def test_record_row_reads_alternate_names(self):
        row = record_row({"toothNumber": "18", "treatment": "Filling", "nextVisit": "2025-04-01"})
        assert row[1] == "18"
        assert row[2] == "Filling"
        assert row[7] == "2025-04-01"

    def test_edited_current_entry_is_sole_row(self):
        resolver = FieldResolver(
            {"treatmentRecord": [_record(1), _record(2)], "procedure": "Procedure 2", "toothNumbers": "12"},
            {"procedure": "Root canal"},
        )
        rows = build_table_rows(resolver)
        assert rows[0][1] == "12"
        assert rows[0][2] == "Root canal"
        assert rows[1] == [""] * len(COLUMNS)

    def test_more_than_thirty_rows_kept(self):
        rows = build_table_rows(FieldResolver({"treatmentRecord": [_record(i) for i in range(1, 36)]}))
        assert len(rows) == 35
        assert rows[-1][2] == "Procedure 35"


class TestTable:
    def test_header_plus_rows(self):
        table = build_table(build_table_rows(FieldResolver()))
        assert len(table._cellvalues) == 31

    def test_fixed_row_height_unless_wrapping(self):
        assert _row_height([""] * 8) == pt(TABLE_ROW_HEIGHT_MM)
        long_row = ["", "", "Very long procedure description " * 4, "", "", "", "", ""]
        assert _row_height(long_row) is None


class TestOverflow:
    def _ctx(self, records):
        pdf = canvas.Canvas(io.BytesIO(), pagesize=PAGE_SIZE, invariant=1)
        ctx = LayoutContext(canvas=pdf, resolver=FieldResolver({"treatmentRecord": records}), page_number=5)
        return pdf, ctx.at(38)

    def test_thirty_rows_fit_one_page(self):
        pdf, ctx = self._ctx([])
        out = draw_treatment_table(ctx)
        assert pdf.getPageNumber() == 1
        assert out.continued is False
        assert out.page_number == 5

    def test_long_table_continues_on_next_page(self):
        pdf, ctx = self._ctx([_record(i) for i in range(1, 61)])
        out = draw_treatment_table(ctx)
        assert pdf.getPageNumber() >= 2
        assert out.continued is True
        assert out.page_number == 5
