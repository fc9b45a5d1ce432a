from __future__ import annotations

import io
from dataclasses import dataclass

from reportlab.lib import colors
from reportlab.pdfgen import canvas as pdf_canvas

from ..types import RendererName
from .layout import DocumentSource, PageLayout, resolve_document_fonts, wrap_text_by_width


_ASCII_REPLACEMENTS = {
    '\u00a0': ' ',
    '\u200b': '',
    '\u2010': '-',
    '\u2011': '-',
    '\u2013': '-',
    '\u2014': '--',
    '\u2212': '-',
    '\u2026': '...',
    '\u2018': "'",
    '\u2019': "'",
    '\u201c': '"',
    '\u201d': '"',
    '\u2022': '*',
    '\u2190': '<-',
    '\u2192': '->',
}


@dataclass(frozen=True)
class LineStyle:
    font_size: float
    leading: float
    space_before: float
    bold: bool


_HEADING_LINE_STYLES: tuple[tuple[str, LineStyle], ...] = (
    ('#### ', LineStyle(font_size=10.5, leading=14, space_before=12, bold=True)),
    ('### ', LineStyle(font_size=11, leading=15, space_before=15, bold=True)),
    ('## ', LineStyle(font_size=12, leading=16, space_before=20, bold=True)),
    ('# ', LineStyle(font_size=14, leading=19, space_before=25, bold=True)),
)


def _sanitize_text(text: str, *, allow_unicode: bool) -> str:
    cleaned = ''.join(ch for ch in text if ch == '\t' or ord(ch) >= 32)
    if allow_unicode:
        return cleaned
    for key, val in _ASCII_REPLACEMENTS.items():
        cleaned = cleaned.replace(key, val)
    return cleaned.encode('latin-1', 'replace').decode('latin-1')


def _classify_line(stripped: str, body: LineStyle) -> tuple[LineStyle, str]:
    for prefix, style in _HEADING_LINE_STYLES:
        if stripped.startswith(prefix):
            return style, stripped[len(prefix):]
    return body, stripped


class PlainTextRenderer:
    """Draw the markdown source line by line with an explicit page cursor.

    Only heading prefixes are recognized; every other line is body text with
    its markup left in place.
    """

    name = RendererName.plain

    def __init__(self, layout: PageLayout | None = None) -> None:
        self.layout = layout or PageLayout()

    def render(self, source: DocumentSource) -> bytes:
        layout = self.layout
        fonts = resolve_document_fonts(source.markdown, layout)
        body = LineStyle(
            font_size=layout.body_font_size,
            leading=layout.body_font_size * 1.6,
            space_before=0,
            bold=False,
        )

        buffer = io.BytesIO()
        canvas = pdf_canvas.Canvas(buffer, pagesize=layout.page_size)
        canvas.setTitle(source.title)
        canvas.setAuthor(layout.author)

        top = layout.page_height - layout.margin
        bottom = layout.margin
        cursor_y = top

        for raw in source.markdown.replace('\r\n', '\n').replace('\r', '\n').split('\n'):
            stripped = _sanitize_text(raw.strip(), allow_unicode=not fonts.standard)
            if not stripped:
                cursor_y -= body.leading / 2
                continue

            style, text = _classify_line(stripped, body)
            font_name = fonts.bold if style.bold else fonts.body
            if cursor_y < top:
                cursor_y -= style.space_before

            for line in wrap_text_by_width(
                text,
                max_width_points=layout.content_width,
                font_name=font_name,
                font_size=style.font_size,
            ):
                if cursor_y - style.leading < bottom:
                    canvas.showPage()
                    cursor_y = top
                cursor_y -= style.leading
                canvas.setFillColor(colors.black)
                canvas.setFont(font_name, style.font_size)
                canvas.drawString(layout.margin, cursor_y, line)

        canvas.showPage()
        canvas.save()
        return buffer.getvalue()


def blank_document(title: str, layout: PageLayout | None = None) -> bytes:
    layout = layout or PageLayout()
    buffer = io.BytesIO()
    canvas = pdf_canvas.Canvas(buffer, pagesize=layout.page_size)
    canvas.setTitle(title)
    canvas.showPage()
    canvas.save()
    return buffer.getvalue()

