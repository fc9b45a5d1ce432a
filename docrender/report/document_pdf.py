from __future__ import annotations

import io
import logging

from reportlab.lib import colors
from reportlab.lib.enums import TA_JUSTIFY, TA_LEFT
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet
from reportlab.platypus import (
    HRFlowable,
    Paragraph,
    Preformatted,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ..types import RendererName
from .blocks import BlockKind, BlockNode
from .inline_format import InlineFonts, inline_markup
from .layout import (
    DocumentFonts,
    DocumentSource,
    PageLayout,
    contains_cjk,
    resolve_document_fonts,
    wrap_text_by_width,
)


logger = logging.getLogger(__name__)

TEXT_COLOR = colors.HexColor('#000000')
CODE_BACKGROUND = colors.HexColor('#F8F9FA')
CODE_BORDER = colors.HexColor('#E9ECEF')
TABLE_BORDER = colors.HexColor('#DEE2E6')
TABLE_HEADER_BACKGROUND = colors.HexColor('#F8F9FA')
RULE_COLOR = colors.HexColor('#E9ECEF')
NOTE_BORDER = colors.HexColor('#0066CC')
NOTE_BACKGROUND = colors.HexColor('#E7F3FF')
FOOTER_COLOR = colors.HexColor('#6B7280')

BULLET_GLYPH = '•'
LIST_TEXT_INDENT = 20
LIST_BULLET_OFFSET = 15
CODE_PADDING = 12
NOTE_PADDING = 12
NOTE_BORDER_WIDTH = 4
TABLE_CELL_PADDING = 8

# '#' is set in the secondary heading size, not a dedicated title size.
HEADING_STYLE_BY_KIND = {
    BlockKind.title: 'DocHeadingLarge',
    BlockKind.subtitle: 'DocHeadingMedium',
    BlockKind.heading1: 'DocHeadingSmall',
    BlockKind.heading2: 'DocHeadingMinor',
}


def _build_styles(fonts: DocumentFonts, layout: PageLayout) -> StyleSheet1:
    styles = getSampleStyleSheet()
    body_size = layout.body_font_size

    styles.add(
        ParagraphStyle(
            name='DocHeadingLarge',
            parent=styles['Heading2'],
            fontName=fonts.bold,
            fontSize=14,
            leading=19,
            textColor=TEXT_COLOR,
            spaceBefore=25,
            spaceAfter=15,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocHeadingMedium',
            parent=styles['Heading3'],
            fontName=fonts.bold,
            fontSize=12,
            leading=16,
            textColor=TEXT_COLOR,
            spaceBefore=20,
            spaceAfter=10,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocHeadingSmall',
            parent=styles['Heading4'],
            fontName=fonts.bold,
            fontSize=11,
            leading=15,
            textColor=TEXT_COLOR,
            spaceBefore=15,
            spaceAfter=8,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocHeadingMinor',
            parent=styles['Heading5'],
            fontName=fonts.bold,
            fontSize=10.5,
            leading=14,
            textColor=TEXT_COLOR,
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocBody',
            parent=styles['Normal'],
            fontName=fonts.body,
            fontSize=body_size,
            leading=body_size * 1.6,
            textColor=TEXT_COLOR,
            alignment=TA_JUSTIFY,
            spaceAfter=10,
            wordWrap='CJK' if not fonts.standard else None,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocListItem',
            parent=styles['DocBody'],
            alignment=TA_LEFT,
            leading=body_size * 1.4,
            leftIndent=LIST_TEXT_INDENT,
            bulletIndent=LIST_TEXT_INDENT - LIST_BULLET_OFFSET,
            bulletFontName=fonts.body,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocCode',
            parent=styles['Code'],
            fontName=fonts.mono,
            fontSize=layout.code_font_size,
            leading=layout.code_font_size * 1.35,
            textColor=TEXT_COLOR,
            backColor=CODE_BACKGROUND,
            borderColor=CODE_BORDER,
            borderWidth=1,
            borderPadding=CODE_PADDING,
            leftIndent=CODE_PADDING,
            rightIndent=CODE_PADDING,
            spaceBefore=10 + CODE_PADDING,
            spaceAfter=10 + CODE_PADDING,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocTableCell',
            parent=styles['DocBody'],
            fontSize=layout.code_font_size,
            leading=layout.code_font_size * 1.35,
            alignment=TA_LEFT,
            spaceAfter=0,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocTableHeader',
            parent=styles['DocTableCell'],
            fontName=fonts.bold,
        )
    )
    styles.add(
        ParagraphStyle(
            name='DocNote',
            parent=styles['DocBody'],
            alignment=TA_LEFT,
            leading=body_size * 1.5,
            spaceAfter=0,
        )
    )
    return styles


def _markup_or_space(markup: str) -> str:
    return markup or '&nbsp;'


class FlowRenderer:
    """Lay out parsed blocks as flowables on fixed-size pages.

    Pagination, line wrapping and table splitting are delegated to the
    platypus frame; a flowable that cannot fit any page raises, which the
    caller treats as a rendering failure.
    """

    name = RendererName.flow

    def __init__(self, layout: PageLayout | None = None) -> None:
        self.layout = layout or PageLayout()

    def render(self, source: DocumentSource) -> bytes:
        layout = self.layout
        fonts = resolve_document_fonts(source.markdown, layout)
        styles = _build_styles(fonts, layout)
        inline_fonts = InlineFonts(body=fonts.body, mono=fonts.mono)

        story: list = []
        for block in source.blocks:
            self._append_block(story, block, styles=styles, fonts=fonts, inline_fonts=inline_fonts)
        if not story:
            story.append(Spacer(1, 1))

        buffer = io.BytesIO()
        document = SimpleDocTemplate(
            buffer,
            pagesize=layout.page_size,
            leftMargin=layout.margin,
            rightMargin=layout.margin,
            topMargin=layout.margin,
            bottomMargin=layout.margin,
            title=source.title,
            author=layout.author,
            subject='Generated documentation',
        )

        def _on_page(canvas, doc):
            _draw_footer(canvas, doc, fonts=fonts, layout=layout, title=source.title)

        document.build(story, onFirstPage=_on_page, onLaterPages=_on_page)
        return buffer.getvalue()

    def _append_block(
        self,
        story: list,
        block: BlockNode,
        *,
        styles: StyleSheet1,
        fonts: DocumentFonts,
        inline_fonts: InlineFonts,
    ) -> None:
        kind = block.kind

        if kind in HEADING_STYLE_BY_KIND:
            markup = inline_markup(block.text or '', inline_fonts)
            story.append(Paragraph(_markup_or_space(markup), styles[HEADING_STYLE_BY_KIND[kind]]))
            return

        if kind == BlockKind.paragraph:
            story.append(Paragraph(_markup_or_space(inline_markup(block.text or '', inline_fonts)), styles['DocBody']))
            return

        if kind == BlockKind.code:
            self._append_code_block(story, block.text or '', style=styles['DocCode'], fonts=fonts)
            return

        if kind == BlockKind.list:
            for item in block.items or ():
                story.append(
                    Paragraph(
                        _markup_or_space(inline_markup(item, inline_fonts)),
                        styles['DocListItem'],
                        bulletText=BULLET_GLYPH,
                    )
                )
            return

        if kind == BlockKind.table:
            self._append_table(story, block.rows or (), styles=styles, inline_fonts=inline_fonts)
            return

        if kind == BlockKind.separator:
            story.append(
                HRFlowable(
                    width='100%',
                    thickness=1,
                    color=RULE_COLOR,
                    spaceBefore=20,
                    spaceAfter=20,
                )
            )
            return

        if kind == BlockKind.note:
            self._append_note(story, block.text or '', styles=styles, inline_fonts=inline_fonts)
            return

        logger.warning('Skipping block of unsupported kind %s', kind)

    def _append_code_block(
        self,
        story: list,
        content: str,
        *,
        style: ParagraphStyle,
        fonts: DocumentFonts,
    ) -> None:
        if not fonts.standard and contains_cjk(content):
            style = ParagraphStyle(name='DocCodeRuntimeCJK', parent=style, fontName=fonts.body)
        # The border padding is drawn inside the left and right indents.
        max_text_width = self.layout.content_width - style.leftIndent - style.rightIndent
        wrapped: list[str] = []
        for line in content.split('\n'):
            wrapped.extend(
                wrap_text_by_width(
                    line,
                    max_width_points=max_text_width,
                    font_name=style.fontName,
                    font_size=style.fontSize,
                )
            )
        story.append(Preformatted('\n'.join(wrapped), style))

    def _append_table(
        self,
        story: list,
        rows: tuple[tuple[str, ...], ...],
        *,
        styles: StyleSheet1,
        inline_fonts: InlineFonts,
    ) -> None:
        max_cols = max((len(row) for row in rows), default=0)
        if max_cols == 0:
            return
        col_width = self.layout.content_width / max_cols

        # Cells are flowable lists so that a row taller than a page splits inside the row.
        table_data: list[list[list[Paragraph]]] = []
        for row_index, row in enumerate(rows):
            style = styles['DocTableHeader'] if row_index == 0 else styles['DocTableCell']
            padded = list(row) + [''] * (max_cols - len(row))
            table_data.append(
                [[Paragraph(_markup_or_space(inline_markup(cell, inline_fonts)), style)] for cell in padded]
            )

        table = Table(
            table_data,
            colWidths=[col_width] * max_cols,
            hAlign='LEFT',
            repeatRows=1 if len(table_data) > 1 else 0,
            splitInRow=1,
        )
        table.setStyle(
            TableStyle(
                [
                    ('BOX', (0, 0), (-1, -1), 1, TABLE_BORDER),
                    ('INNERGRID', (0, 0), (-1, -1), 1, TABLE_BORDER),
                    ('BACKGROUND', (0, 0), (-1, 0), TABLE_HEADER_BACKGROUND),
                    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                    ('LEFTPADDING', (0, 0), (-1, -1), TABLE_CELL_PADDING),
                    ('RIGHTPADDING', (0, 0), (-1, -1), TABLE_CELL_PADDING),
                    ('TOPPADDING', (0, 0), (-1, -1), TABLE_CELL_PADDING),
                    ('BOTTOMPADDING', (0, 0), (-1, -1), TABLE_CELL_PADDING),
                ]
            )
        )
        story.append(Spacer(1, 15))
        story.append(table)
        story.append(Spacer(1, 15))

    def _append_note(
        self,
        story: list,
        text: str,
        *,
        styles: StyleSheet1,
        inline_fonts: InlineFonts,
    ) -> None:
        callout = Table(
            [[[Paragraph(_markup_or_space(inline_markup(text, inline_fonts)), styles['DocNote'])]]],
            colWidths=[self.layout.content_width],
            hAlign='LEFT',
            splitInRow=1,
        )
        callout.setStyle(
            TableStyle(
                [
                    ('BACKGROUND', (0, 0), (-1, -1), NOTE_BACKGROUND),
                    ('LINEBEFORE', (0, 0), (0, -1), NOTE_BORDER_WIDTH, NOTE_BORDER),
                    ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                    ('LEFTPADDING', (0, 0), (-1, -1), NOTE_PADDING),
                    ('RIGHTPADDING', (0, 0), (-1, -1), NOTE_PADDING),
                    ('TOPPADDING', (0, 0), (-1, -1), NOTE_PADDING),
                    ('BOTTOMPADDING', (0, 0), (-1, -1), NOTE_PADDING),
                ]
            )
        )
        story.append(Spacer(1, 12))
        story.append(callout)
        story.append(Spacer(1, 12))


def _draw_footer(canvas, doc, *, fonts: DocumentFonts, layout: PageLayout, title: str) -> None:
    canvas.saveState()
    footer_y = layout.margin / 2
    canvas.setFillColor(FOOTER_COLOR)
    canvas.setFont(fonts.body, 7.8)
    if title:
        canvas.drawString(doc.leftMargin, footer_y, title)
    canvas.drawRightString(layout.page_width - doc.rightMargin, footer_y, f'Page {canvas.getPageNumber()}')
    canvas.restoreState()
