"""
The five fixed pages of the dental chart, in print order.

Each builder draws one page starting from a fresh cursor and returns the
context for the next page (footer stamped, page closed).
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from reportlab.lib.utils import ImageReader

from packages.shared.models import Warning
from packages.shared.utils.text import has_value, is_affirmative_value, is_negative_value
from apps.chart.steps.step02_resolve import FieldResolver
from apps.chart.steps.export_render.constants import (
    ACCENT_BLUE,
    BAND_GRAY,
    BODY_SIZE,
    CLINICAL_COLUMNS_MM,
    CLINICAL_LINE_MM,
    CLINICAL_Y_MM,
    CONSENT_LINE_HEIGHT_MM,
    CONSENT_SIZE,
    CONTENT_WIDTH_MM,
    FORM_REVISION_MARK,
    LEGEND_COLUMNS_MM,
    LEGEND_LINE_MM,
    LEGEND_Y_MM,
    LOGO_PURPLE,
    MARGIN_MM,
    NOTE_SIZE,
    PAGE_HEIGHT_MM,
    PAGE_WIDTH_MM,
    PHOTO_GRAY,
    RIGHT_EDGE_MM,
    TOOTH_SUMMARY_Y_MM,
    LABEL_GRAY,
    pt,
)
from apps.chart.steps.export_render.form_text import (
    ALLERGY_EXTRA_KEYS,
    ALLERGY_ROWS,
    ASSOCIATION_NAME,
    CLINICAL_FINDING_COLUMNS,
    CONSENT_SECTIONS,
    FINAL_CONSENT_PARAGRAPHS,
    FORM_TITLE,
    LEGEND_COLUMNS,
    MEDICAL_CONDITION_ROWS,
    PAGE1_QUESTIONS,
    TOOTH_SUMMARY_ITEMS,
    WOMEN_QUESTIONS,
)
from apps.chart.steps.export_render.layout import (
    LayoutContext,
    draw_band,
    draw_box,
    draw_circle,
    draw_labeled_rule,
    draw_line,
    draw_mark_box,
    draw_paragraph,
    draw_paren_checkbox,
    draw_question,
    draw_text,
    finish_page,
    value_or,
)
from apps.chart.steps.export_render.tooth_chart import draw_odontogram
from apps.chart.steps.export_render.treatment_table import draw_treatment_table

logger = logging.getLogger(__name__)

# (label, key, x, rule start, rule end) as offsets from the left margin; None ends at the right margin.
RuleField = tuple[str, Optional[str], float, float, Optional[float]]

_CONTACT_ROWS: tuple[tuple[float, tuple[RuleField, ...]], ...] = (
    (6, (("Religion:", "religion", 0, 20, 85), ("Nationality:", "nationality", 90, 109, None))),
    (6, (("Home Address:", "homeAddress", 0, 29, 125), ("Home No.:", "homePhone", 130, 150, None))),
    (6, (("Occupation:", "occupation", 0, 25, 95), ("Office No.:", "officePhone", 100, 120, None))),
    (6, (("Dental Insurance:", "dentalInsurance", 0, 35, 95), ("Fax No.:", "faxNumber", 100, 118, None))),
    (8, (("Effective Date:", "effectiveDate", 0, 32, 95), ("Cell/Mobile No.:", "mobileNumber", 100, 130, None))),
)

_REFERRAL_ROWS: tuple[tuple[float, tuple[RuleField, ...]], ...] = (
    (6, (("Parent/ Guardian's Name:", "guardianName", 0, 48, None),)),
    (6, (("Occupation:", "guardianOccupation", 0, 25, None),)),
    (6, (("Whom may we thank for referring you?", "referredBy", 0, 72, None),)),
    (8, (("What is your reason for dental consultation?", "consultationReason", 0, 88, None),)),
)

_DENTAL_HISTORY_ROWS: tuple[tuple[float, tuple[RuleField, ...]], ...] = (
    (8, (("Previous Dentist: Dr.", "previousDentist", 0, 40, 105),
         ("Last Dental visit:", "lastDentalVisit", 110, 137, None))),
)

_PHYSICIAN_ROWS: tuple[tuple[float, tuple[RuleField, ...]], ...] = (
    (6, (("Name of Physician: Dr.", "physicianName", 0, 45, 105),
         ("Specialty, if applicable:", "physicianSpecialty", 110, 147, None))),
    (8, (("Office Address:", "physicianAddress", 0, 30, 105),
         ("Office Number:", "physicianPhone", 110, 137, None))),
)


def _rule_rows(ctx: LayoutContext, rows: tuple[tuple[float, tuple[RuleField, ...]], ...]) -> LayoutContext:
    for advance, fields in rows:
        for label, key, x, start, end in fields:
            draw_labeled_rule(
                ctx,
                label,
                key,
                x=MARGIN_MM + x,
                rule_start=MARGIN_MM + start,
                rule_end=RIGHT_EDGE_MM if end is None else MARGIN_MM + end,
            )
        ctx = ctx.down(advance)
    return ctx


def _heading(ctx: LayoutContext, title: str, *, size: float = 9, advance: float = 5) -> LayoutContext:
    draw_text(ctx.canvas, MARGIN_MM, ctx.y, title, size=size, bold=True)
    return ctx.down(advance)


def _title_band(ctx: LayoutContext, title: str) -> LayoutContext:
    """Gray rounded band used by the consent and chart pages."""
    y = MARGIN_MM + 10
    draw_band(
        ctx.canvas, MARGIN_MM + 10, y, CONTENT_WIDTH_MM - 20, 12, title,
        fill=BAND_GRAY, radius=3, size=13, baseline=8, text_x=PAGE_WIDTH_MM / 2,
    )
    return ctx.at(y + 18)


def subject_name(resolver: FieldResolver, header_key: str) -> str:
    """Header name for one page, composed from the name parts when the header key is empty."""
    name = resolver.text(header_key)
    if name:
        return name
    last, first = resolver.text("lastName"), resolver.text("firstName")
    if not (last or first):
        return ""
    return f"{last}, {first} {resolver.text('middleName')}".strip()


def signature_text(resolver: FieldResolver, key: str) -> str:
    value = resolver.get(key)
    if is_affirmative_value(value):
        return "(signed)"
    if is_negative_value(value):
        return ""
    return resolver.text(key)


# ── Page 1 ───────────────────────────────────────────────────────────────


def _draw_logo(ctx: LayoutContext, logo_path: str | None) -> LayoutContext:
    x, y, size = MARGIN_MM + 5, 12.0, 28.0
    if logo_path:
        try:
            image = ImageReader(logo_path)
            ctx.canvas.drawImage(
                image, pt(x), pt(PAGE_HEIGHT_MM - y - size), pt(size), pt(size),
                mask="auto", preserveAspectRatio=True,
            )
            return ctx
        except Exception as exc:
            logger.warning(f"Logo {logo_path} could not be embedded, drawing placeholder: {exc}")
            ctx = ctx.warn(Warning(
                code="LOGO_UNAVAILABLE",
                message=f"Logo image could not be loaded: {exc}",
                section="page1",
            ))
    draw_circle(ctx.canvas, MARGIN_MM + 19, 26, 13, width=1.5, color=LOGO_PURPLE)
    return ctx


def _draw_association_header(ctx: LayoutContext, logo_path: str | None) -> LayoutContext:
    ctx = _draw_logo(ctx, logo_path)
    c = ctx.canvas
    draw_text(c, MARGIN_MM + 45, 20, ASSOCIATION_NAME, size=14, bold=True)
    draw_band(
        c, MARGIN_MM + 45, 25, 70, 10, FORM_TITLE,
        fill=ACCENT_BLUE, radius=2, size=11, baseline=6, text_x=MARGIN_MM + 80,
    )
    draw_box(c, RIGHT_EDGE_MM - 48, 12, 48, 28, width=0.5)
    draw_text(c, RIGHT_EDGE_MM - 24, 27, "(Photo)", size=9, color=PHOTO_GRAY, align="center")
    return ctx


def _draw_name_row(ctx: LayoutContext) -> LayoutContext:
    c, y = ctx.canvas, ctx.y
    start = MARGIN_MM + 13
    w1, w2 = 50.0, 52.0
    draw_text(c, MARGIN_MM, y, "Name:")
    spans = (
        ("lastName", "(Last)", start, start + w1, 18),
        ("firstName", "(First)", start + w1 + 3, start + w1 + w2 + 3, 19),
        ("middleName", "(Middle)", start + w1 + w2 + 6, RIGHT_EDGE_MM, 10),
    )
    for key, caption, x1, x2, caption_dx in spans:
        draw_line(c, x1, y + 1, x2, y + 1)
        draw_text(c, x1 + 2, y - 0.5, ctx.resolver.text(key))
        draw_text(c, x1 + caption_dx, y + 4, caption, size=NOTE_SIZE, color=LABEL_GRAY)
    return ctx.down(8)


def _draw_birth_row(ctx: LayoutContext) -> LayoutContext:
    c, y, r = ctx.canvas, ctx.y, ctx.resolver
    draw_labeled_rule(ctx, "Birthdate(mm/dd/yy):", "birthdate", rule_start=MARGIN_MM + 37, rule_end=MARGIN_MM + 70)
    draw_labeled_rule(
        ctx, "Age:", "age", x=MARGIN_MM + 75, rule_start=MARGIN_MM + 85, rule_end=MARGIN_MM + 94,
    )
    draw_text(c, MARGIN_MM + 99, y, "Sex: M/F")
    sex = r.text("sex").upper()
    draw_mark_box(ctx, MARGIN_MM + 116, y - 3, sex in ("M", "MALE"))
    draw_mark_box(ctx, MARGIN_MM + 122, y - 3, sex in ("F", "FEMALE"))
    draw_labeled_rule(ctx, "Nickname:", "nickname", x=MARGIN_MM + 129, rule_start=MARGIN_MM + 147)
    return ctx.down(6)


def _draw_page1_questions(ctx: LayoutContext) -> LayoutContext:
    for i, (question, key, prompt, rule_offset, detail_key) in enumerate(PAGE1_QUESTIONS):
        if prompt is None:
            ctx = draw_question(ctx, question, key, advance=4.5)
            continue
        ctx = draw_question(ctx, question, key, advance=4)
        ctx = draw_labeled_rule(
            ctx,
            prompt,
            detail_key,
            rule_start=MARGIN_MM + rule_offset,
            size=NOTE_SIZE,
            advance=1 if i == len(PAGE1_QUESTIONS) - 1 else 4.5,
        )
    return ctx


def render_page1(ctx: LayoutContext, *, logo_path: str | None = None) -> LayoutContext:
    """Association header, patient information, dental history and questions 1-5."""
    ctx = _draw_association_header(ctx, logo_path)
    ctx = _heading(ctx.at(46), "PATIENT INFORMATION RECORD", size=10, advance=6)
    ctx = _draw_name_row(ctx)
    ctx = _draw_birth_row(ctx)
    ctx = _rule_rows(ctx, _CONTACT_ROWS)

    draw_labeled_rule(ctx, "Email Add.:", "email", x=MARGIN_MM + 100, rule_start=MARGIN_MM + 122)
    ctx = _heading(ctx.down(6), "For minors:", size=BODY_SIZE, advance=4)
    ctx = _rule_rows(ctx, _REFERRAL_ROWS)

    ctx = _heading(ctx, "DENTAL HISTORY")
    ctx = _rule_rows(ctx, _DENTAL_HISTORY_ROWS)
    ctx = _heading(ctx, "MEDICAL HISTORY")
    ctx = _rule_rows(ctx, _PHYSICIAN_ROWS)
    ctx = _draw_page1_questions(ctx)
    return finish_page(ctx)


# ── Page 2 ───────────────────────────────────────────────────────────────


def _allergy_checked(resolver: FieldResolver, key: str) -> bool:
    return any(resolver.is_affirmative(k) for k in (key, *ALLERGY_EXTRA_KEYS.get(key, ())))


def _draw_allergies(ctx: LayoutContext) -> LayoutContext:
    columns = (MARGIN_MM + 5, MARGIN_MM + 70, MARGIN_MM + 130)
    for i, row in enumerate(ALLERGY_ROWS):
        for column, item in row:
            checked = _allergy_checked(ctx.resolver, item.key)
            draw_paren_checkbox(ctx, item.label, checked, columns[column], size=NOTE_SIZE)
        ctx = ctx.down(5 if i == len(ALLERGY_ROWS) - 1 else 3.5)
    return ctx


def _draw_numbered_rule(ctx: LayoutContext, number: str, label: str, key: str, start: float, end: float) -> None:
    draw_text(ctx.canvas, MARGIN_MM, ctx.y, number)
    draw_labeled_rule(
        ctx, label, key, x=MARGIN_MM + 6, rule_start=MARGIN_MM + start, rule_end=MARGIN_MM + end,
    )


def _draw_conditions(ctx: LayoutContext) -> LayoutContext:
    columns = (MARGIN_MM + 3, MARGIN_MM + 65, MARGIN_MM + 125)
    for row in MEDICAL_CONDITION_ROWS:
        for x, item in zip(columns, row):
            if item is None:
                continue
            checked = ctx.resolver.is_affirmative(f"condition_{item.key}")
            draw_paren_checkbox(ctx, item.label, checked, x, size=6.5)
        ctx = ctx.down(3.2)
    return ctx


def render_page2(ctx: LayoutContext) -> LayoutContext:
    """Medical-history questions 6-13, allergies, women's health and conditions."""
    ctx = draw_question(ctx, "6. Do you use tobacco products?", "tobacco")
    ctx = draw_question(ctx, "7. Do you use alcohol, cocaine or other dangerous drugs?", "dangerousDrugs")

    draw_text(ctx.canvas, MARGIN_MM, ctx.y, "8. Are you allergic to any of the following:")
    ctx = _draw_allergies(ctx.down(4))

    ctx = draw_labeled_rule(
        ctx, "9. Bleeding Time:", "bleedingTime",
        rule_start=MARGIN_MM + 30, rule_end=MARGIN_MM + 60, advance=5,
    )

    draw_text(ctx.canvas, MARGIN_MM, ctx.y, "10. For women only:")
    ctx = ctx.down(4)
    for i, item in enumerate(WOMEN_QUESTIONS):
        ctx = draw_question(ctx, item.label, item.key, advance=5 if i == len(WOMEN_QUESTIONS) - 1 else 4)

    _draw_numbered_rule(ctx, "11.", "Blood Type:", "bloodType", 25, 50)
    ctx = ctx.down(5)
    _draw_numbered_rule(ctx, "12.", "Blood Pressure:", "bloodPressure", 30, 60)
    ctx = ctx.down(6)

    draw_text(ctx.canvas, MARGIN_MM, ctx.y, "13.")
    draw_text(
        ctx.canvas, MARGIN_MM + 6, ctx.y,
        "Do you have or have you had any of the following? Check which apply:",
    )
    ctx = _draw_conditions(ctx.down(4))

    ctx = ctx.down(4)
    draw_line(ctx.canvas, PAGE_WIDTH_MM - 50, ctx.y, RIGHT_EDGE_MM, ctx.y)
    draw_text(ctx.canvas, PAGE_WIDTH_MM - 32, ctx.y + 3, "Signature", size=NOTE_SIZE)
    return finish_page(ctx)


# ── Page 3 ───────────────────────────────────────────────────────────────


def _draw_signature_block(ctx: LayoutContext, caption: str, signature_key: str) -> LayoutContext:
    c, y = ctx.canvas, ctx.y
    signed_on = ctx.resolver.text("signatureDate")
    draw_text(c, MARGIN_MM + 1, y - 1, signature_text(ctx.resolver, signature_key), size=CONSENT_SIZE)
    draw_line(c, MARGIN_MM, y, MARGIN_MM + 70, y)
    draw_text(c, MARGIN_MM, y + 3.5, caption, size=NOTE_SIZE)
    draw_text(c, MARGIN_MM + 107.5, y - 1, signed_on, size=CONSENT_SIZE, align="center")
    draw_line(c, MARGIN_MM + 85, y, MARGIN_MM + 130, y)
    draw_text(c, MARGIN_MM + 100, y + 3.5, "Date", size=NOTE_SIZE)
    return ctx.down(8)


def render_page3(ctx: LayoutContext) -> LayoutContext:
    """Informed consent narrative with per-section initials and signatures."""
    ctx = _title_band(ctx, "INFORMED CONSENT")
    for section in CONSENT_SECTIONS:
        draw_text(ctx.canvas, MARGIN_MM, ctx.y, section.title, size=NOTE_SIZE, bold=True)
        ctx = draw_paragraph(
            ctx.down(3), section.text, size=CONSENT_SIZE, line_height=CONSENT_LINE_HEIGHT_MM,
        )
        initials = value_or(ctx.resolver.text(section.initial_key), "______")
        draw_text(ctx.canvas, RIGHT_EDGE_MM - 40, ctx.y + 3, f"Initials: {initials}", size=NOTE_SIZE, bold=True)
        ctx = ctx.down(7)

    for paragraph in FINAL_CONSENT_PARAGRAPHS:
        ctx = draw_paragraph(ctx, paragraph, size=CONSENT_SIZE, line_height=CONSENT_LINE_HEIGHT_MM)
    ctx = ctx.down(5)

    ctx = _draw_signature_block(ctx, "Patient/Parent/Guardian Signature", "patientSignature")
    _draw_signature_block(ctx, "Dentist Signature", "dentistSignature")
    return finish_page(ctx)


# ── Page 4 ───────────────────────────────────────────────────────────────


def finding_marked(resolver: FieldResolver, key: str) -> bool:
    """Clinical-findings mark: "present"/yes, or any free text other than absent/unknown."""
    value = resolver.get(key)
    if is_affirmative_value(value):
        return True
    if is_negative_value(value) or not has_value(value):
        return False
    text = str(value).strip().lower()
    if text == "present":
        return True
    return text not in ("absent", "unknown")


def _draw_exam_header(ctx: LayoutContext, today: date) -> LayoutContext:
    c, r = ctx.canvas, ctx.resolver
    draw_text(c, MARGIN_MM, ctx.y, "INTRAORAL EXAMINATION", size=9, bold=True)
    draw_text(c, PAGE_WIDTH_MM - 110, ctx.y, f"Name: {subject_name(r, 'chartPatientName')}")
    ctx = ctx.down(4)
    age = value_or(r.first_text("chartAge", "age"), "___")
    gender = value_or(r.first_text("chartGender", "sex"), "___")
    exam_date = value_or(r.text("signatureDate"), today.isoformat())
    draw_text(c, PAGE_WIDTH_MM - 110, ctx.y, f"Age: {age}")
    draw_text(c, PAGE_WIDTH_MM - 70, ctx.y, f"Gender: M/F {gender}")
    draw_text(c, PAGE_WIDTH_MM - 40, ctx.y, f"Date: {exam_date}")
    return ctx.down(8)


def _draw_legend(ctx: LayoutContext) -> None:
    c = ctx.canvas
    draw_text(c, MARGIN_MM, LEGEND_Y_MM, "Legend:", size=6, bold=True)
    for x, (title, items) in zip(LEGEND_COLUMNS_MM, LEGEND_COLUMNS):
        y = LEGEND_Y_MM + 5
        draw_text(c, x, y, title, size=5.5, bold=True)
        y += 3
        for item in items:
            draw_text(c, x, y, item, size=5.5)
            y += LEGEND_LINE_MM


def _draw_clinical_findings(ctx: LayoutContext) -> None:
    c = ctx.canvas
    for x, (title, items) in zip(CLINICAL_COLUMNS_MM, CLINICAL_FINDING_COLUMNS):
        draw_text(c, x, CLINICAL_Y_MM, title, size=6, bold=True)
        y = CLINICAL_Y_MM + 3
        for item in items:
            mark = "/" if finding_marked(ctx.resolver, item.key) else "_____"
            draw_text(c, x, y, mark, size=5.5)
            draw_text(c, x + 8, y, item.label, size=5.5)
            y += CLINICAL_LINE_MM


def _draw_tooth_summary(ctx: LayoutContext) -> None:
    c = ctx.canvas
    draw_text(c, MARGIN_MM, TOOTH_SUMMARY_Y_MM, "Tooth Summary:", size=6, bold=True)
    half = (len(TOOTH_SUMMARY_ITEMS) + 1) // 2
    for i, item in enumerate(TOOTH_SUMMARY_ITEMS):
        column, row = divmod(i, half)
        x = MARGIN_MM + column * CONTENT_WIDTH_MM / 2
        y = TOOTH_SUMMARY_Y_MM + 3.5 + row * CLINICAL_LINE_MM
        draw_text(c, x, y, f"{item.label}: {ctx.resolver.text(item.key)}".rstrip(), size=5.5)


def render_page4(ctx: LayoutContext, *, today: date) -> LayoutContext:
    """Odontogram, legend, clinical findings and the tooth-list summary."""
    ctx = _title_band(ctx, "DENTAL RECORD CHART")
    ctx = _draw_exam_header(ctx, today)
    ctx = draw_odontogram(ctx)
    _draw_legend(ctx)
    _draw_clinical_findings(ctx)
    _draw_tooth_summary(ctx)
    return finish_page(ctx)


# ── Page 5 ───────────────────────────────────────────────────────────────


def render_page5(ctx: LayoutContext) -> LayoutContext:
    """Name header, treatment-record band and the treatment table."""
    c, r = ctx.canvas, ctx.resolver
    ctx = ctx.at(MARGIN_MM)
    draw_text(c, MARGIN_MM, ctx.y, f"Name: {subject_name(r, 'treatmentPatientName')}")
    draw_text(c, PAGE_WIDTH_MM - 80, ctx.y, f"Age: {value_or(r.first_text('treatmentAge', 'age'), '___')}")
    draw_text(
        c, PAGE_WIDTH_MM - 50, ctx.y,
        f"Gender: M/F {value_or(r.first_text('treatmentGender', 'sex'), '___')}",
    )
    ctx = ctx.down(10)

    draw_band(
        c, MARGIN_MM + 10, ctx.y, CONTENT_WIDTH_MM - 20, 10, "TREATMENT RECORD",
        fill=ACCENT_BLUE, radius=3, size=12, baseline=7, text_x=PAGE_WIDTH_MM / 2,
    )
    ctx = draw_treatment_table(ctx.down(15))

    draw_text(
        ctx.canvas, RIGHT_EDGE_MM - 10, PAGE_HEIGHT_MM - 5, FORM_REVISION_MARK,
        size=6, color=BAND_GRAY,
    )
    return finish_page(ctx)

