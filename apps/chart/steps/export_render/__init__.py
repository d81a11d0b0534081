from .orchestrator import DocumentGenerationError, chart_filename, render_dental_chart
from .layout import LayoutContext
from .tooth_chart import resolve_tooth_glyph, resolve_tooth_glyphs
from .treatment_table import build_table_rows

__all__ = [
    "DocumentGenerationError",
    "LayoutContext",
    "build_table_rows",
    "chart_filename",
    "render_dental_chart",
    "resolve_tooth_glyph",
    "resolve_tooth_glyphs",
]
