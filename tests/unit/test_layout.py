"""
Unit tests for the chart layout primitives.
"""
from __future__ import annotations

import dataclasses
import io
from unittest.mock import MagicMock

import pytest
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from packages.shared.models import Warning
from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import MARGIN_MM, PAGE_HEIGHT_MM, PAGE_SIZE, PAGE_TOP_MM
from apps.chart.steps.export_render.layout import (
    LayoutContext,
    draw_flowable,
    draw_labeled_rule,
    draw_paragraph,
    draw_yes_no,
    finish_page,
    footer_label,
    value_or,
    wrap_lines,
)


def _ctx(canonical=None, edits=None, c=None) -> LayoutContext:
    return LayoutContext(canvas=c or MagicMock(), resolver=FieldResolver(canonical, edits))


def _drawn_strings(c: MagicMock) -> list[str]:
    texts = []
    for name in ("drawString", "drawCentredString", "drawRightString"):
        texts.extend(call.args[2] for call in getattr(c, name).call_args_list)
    return texts


# ── LayoutContext ───────────────────────────────────────────────────────


class TestLayoutContext:
    def test_defaults(self):
        ctx = _ctx()
        assert ctx.page_number == 1
        assert ctx.y == PAGE_TOP_MM
        assert ctx.warnings == ()
        assert ctx.continued is False

    def test_moves_return_new_contexts(self):
        ctx = _ctx()
        moved = ctx.down(7).at(40).down(2)
        assert moved.y == 42
        assert ctx.y == PAGE_TOP_MM

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            _ctx().y = 10  # type: ignore[misc]

    def test_warn_appends(self):
        w = Warning(code="LOGO_UNAVAILABLE", message="missing")
        ctx = _ctx()
        assert ctx.warn(w).warnings == (w,)
        assert ctx.warnings == ()


# ── Footer & page breaks ────────────────────────────────────────────────


class TestPageBreaks:
    def test_footer_label(self):
        assert footer_label(3) == "Page 3 of 5"
        assert footer_label(5, continued=True) == "Page 5 of 5 (continued)"

    def test_finish_page_advances(self):
        c = MagicMock()
        ctx = _ctx(c=c).at(120)
        nxt = finish_page(ctx)
        assert nxt.page_number == 2
        assert nxt.y == PAGE_TOP_MM
        c.showPage.assert_called_once()
        assert "Page 1 of 5" in _drawn_strings(c)

    def test_overflow_keeps_page_number(self):
        c = MagicMock()
        ctx = dataclasses.replace(_ctx(c=c), page_number=5)
        spill = finish_page(ctx, overflow=True)
        assert spill.page_number == 5
        assert spill.continued is True
        last = finish_page(spill)
        assert last.page_number == 6
        assert last.continued is False
        assert _drawn_strings(c) == ["Page 5 of 5", "Page 5 of 5 (continued)"]

    def test_real_canvas_page_count(self):
        buf = io.BytesIO()
        pdf = canvas.Canvas(buf, pagesize=PAGE_SIZE, invariant=1)
        ctx = LayoutContext(canvas=pdf, resolver=FieldResolver())
        ctx = finish_page(finish_page(ctx))
        assert pdf.getPageNumber() - 1 == 2


# ── Form primitives ─────────────────────────────────────────────────────


class TestYesNo:
    @pytest.mark.parametrize("value,marks", [("Yes", 1), ("No", 1), ("", 0), ("unsure", 0)])
    def test_at_most_one_box_marked(self, value, marks):
        c = MagicMock()
        draw_yes_no(_ctx({"goodHealth": value}, c=c), "goodHealth")
        assert _drawn_strings(c).count("X") == marks

    def test_does_not_move_cursor(self):
        ctx = _ctx({"goodHealth": "Yes"}).at(80)
        assert draw_yes_no(ctx, "goodHealth").y == 80


class TestLabeledRule:
    def test_value_from_resolver(self):
        c = MagicMock()
        out = draw_labeled_rule(_ctx({"occupation": "Engineer"}, c=c), "Occupation:", "occupation",
                                rule_start=40, advance=6)
        assert "Engineer" in _drawn_strings(c)
        assert out.y == PAGE_TOP_MM + 6
        c.line.assert_called_once()

    def test_explicit_value_overrides_key(self):
        c = MagicMock()
        draw_labeled_rule(_ctx({"occupation": "Engineer"}, c=c), "Occupation:", "occupation",
                          rule_start=40, value="Override")
        assert "Override" in _drawn_strings(c)
        assert "Engineer" not in _drawn_strings(c)


class TestParagraphs:
    def test_wrap_blank_keeps_one_line(self):
        assert wrap_lines("", 100, size=7) == [""]

    def test_wrap_splits_long_text(self):
        lines = wrap_lines("word " * 80, 50, size=7)
        assert len(lines) > 1

    def test_paragraph_moves_cursor_by_lines(self):
        text = "word " * 80
        lines = wrap_lines(text, 60, size=7)
        out = draw_paragraph(_ctx().at(50), text, width=60, size=7, line_height=3)
        assert out.y == pytest.approx(50 + 3 * len(lines))


class TestFlowables:
    def test_flowable_top_sits_at_cursor(self):
        c = MagicMock()
        flowable = MagicMock()
        out = draw_flowable(_ctx(c=c).at(40), flowable, 20 * mm)
        flowable.drawOn.assert_called_once()
        args = flowable.drawOn.call_args.args
        assert args[0] is c
        assert args[1] == pytest.approx(MARGIN_MM * mm)
        assert args[2] == pytest.approx((PAGE_HEIGHT_MM - 60) * mm)
        assert out.y == pytest.approx(60)

    def test_flowable_custom_x(self):
        flowable = MagicMock()
        draw_flowable(_ctx().at(10), flowable, 5 * mm, x=30)
        assert flowable.drawOn.call_args.args[1] == pytest.approx(30 * mm)


class TestValueOr:
    def test_fallback(self):
        assert value_or("", "___") == "___"
        assert value_or(None, "___") == "___"
        assert value_or(" 35 ", "___") == "35"
