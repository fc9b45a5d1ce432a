from __future__ import annotations

import io

import pytest
from pypdf import PdfReader

from docrender.report.blocks import parse_markdown_blocks
from docrender.report.document_pdf import FlowRenderer
from docrender.report.layout import DocumentSource, PageLayout, measure_text_width, wrap_text_by_width
from docrender.report.pdf_export import count_pages, render, render_document
from docrender.report.plain_pdf import PlainTextRenderer, blank_document
from docrender.types import RendererName


LAYOUT = PageLayout()


class ExplodingRenderer:
    name = RendererName.flow

    def render(self, source: DocumentSource) -> bytes:
        raise RuntimeError('layout engine exploded')


def _source(markdown: str, title: str = 'doc.md') -> DocumentSource:
    return DocumentSource(title=title, markdown=markdown, blocks=tuple(parse_markdown_blocks(markdown)))


@pytest.mark.parametrize(
    'markdown',
    [
        '',
        '   \n\t\n',
        '**never closed',
        '`',
        '| only | header |',
        '```\nunterminated fence',
        'a < b && c > d <b>not a tag</b> &amp;',
        '- \n> \n#### ',
        '中文文档 with **粗体** and `代码`',
        '\x00\x07 control characters',
    ],
)
def test_render_always_returns_a_pdf(markdown: str) -> None:
    content = render(markdown, 'src/odd.md')
    assert content.startswith(b'%PDF')
    assert count_pages(content) >= 1


def test_sample_document_uses_flow_renderer(sample_markdown: str) -> None:
    document = render_document(sample_markdown, 'src/components/App.tsx', layout=LAYOUT)

    assert document.renderer == RendererName.flow
    assert document.error is None
    assert document.available
    assert count_pages(document.content) == 1


def test_output_name_becomes_pdf_title() -> None:
    document = render_document('# Hello', 'src/components/App.tsx', layout=LAYOUT)
    reader = PdfReader(io.BytesIO(document.content))
    assert reader.metadata.title == 'src/components/App.tsx'


def test_short_document_fits_one_page() -> None:
    markdown = '# Short\n\nOne paragraph.\n\n- a\n- b'
    assert count_pages(render(markdown, 'short.md')) == 1


def test_long_document_flows_onto_more_pages() -> None:
    paragraph = 'This sentence is repeated to fill the page with body text. ' * 8
    markdown = '\n\n'.join(f'{paragraph} ({index})' for index in range(60))
    assert count_pages(render(markdown, 'long.md')) > 1


def test_long_table_and_list_paginate() -> None:
    rows = '\n'.join(f'| row {index} | value {index} |' for index in range(150))
    items = '\n'.join(f'- item {index}' for index in range(150))
    markdown = f'| Key | Value |\n|---|---|\n{rows}\n\n{items}'
    document = render_document(markdown, 'tables.md', layout=LAYOUT)

    assert document.renderer == RendererName.flow
    assert count_pages(document.content) > 2


def test_note_taller_than_a_page_stays_in_flow_renderer() -> None:
    markdown = '\n'.join(f'> note line {index} explaining a detail of the component' for index in range(400))
    document = render_document(markdown, 'notes.md', layout=LAYOUT)

    assert document.renderer == RendererName.flow
    assert document.error is None
    assert count_pages(document.content) > 1


def test_table_cell_taller_than_a_page_stays_in_flow_renderer() -> None:
    markdown = f'| Name | Description |\n|---|---|\n| props | {"word " * 3000}|\n| next | short |'
    document = render_document(markdown, 'cells.md', layout=LAYOUT)

    assert document.renderer == RendererName.flow
    assert document.error is None
    assert count_pages(document.content) > 1


def test_falls_back_to_plain_renderer() -> None:
    document = render_document(
        '# Title\n\nBody',
        'fallback.md',
        layout=LAYOUT,
        renderers=[ExplodingRenderer(), PlainTextRenderer(LAYOUT)],
    )

    assert document.renderer == RendererName.plain
    assert 'layout engine exploded' in document.error
    assert document.content.startswith(b'%PDF')


def test_blank_document_when_every_renderer_fails() -> None:
    document = render_document('# Title', 'broken.md', layout=LAYOUT, renderers=[ExplodingRenderer()])

    assert document.renderer == RendererName.blank
    assert count_pages(document.content) == 1


def test_plain_renderer_paginates_by_cursor() -> None:
    markdown = '\n'.join(['# Heading'] + [f'line {index} with some words' for index in range(200)])
    content = PlainTextRenderer(LAYOUT).render(_source(markdown))
    assert count_pages(content) > 1


def test_plain_renderer_wraps_long_lines_to_page_width() -> None:
    one_line = PlainTextRenderer(LAYOUT).render(_source('word ' * 40))
    many_lines = PlainTextRenderer(LAYOUT).render(_source('\n'.join(['word ' * 40] * 120)))
    assert count_pages(one_line) == 1
    assert count_pages(many_lines) > 1


def test_plain_renderer_keeps_empty_input_valid() -> None:
    assert count_pages(PlainTextRenderer(LAYOUT).render(_source(''))) == 1


def test_flow_renderer_handles_every_block_kind(sample_markdown: str) -> None:
    content = FlowRenderer(LAYOUT).render(_source(sample_markdown + '\n\n```\n' + 'x' * 400 + '\n```'))
    assert content.startswith(b'%PDF')


def test_blank_document_is_one_page() -> None:
    assert count_pages(blank_document('empty')) == 1


def test_wrap_text_by_width_respects_width() -> None:
    lines = wrap_text_by_width('lorem ipsum ' * 50, max_width_points=120, font_name='Helvetica', font_size=10)

    assert len(lines) > 1
    assert all(measure_text_width(line, font_name='Helvetica', font_size=10) <= 120 for line in lines)


def test_wrap_text_by_width_splits_long_tokens() -> None:
    lines = wrap_text_by_width('x' * 300, max_width_points=100, font_name='Courier', font_size=9)

    assert len(lines) > 1
    assert ''.join(lines) == 'x' * 300


def test_wrap_text_by_width_keeps_empty_line() -> None:
    assert wrap_text_by_width('', max_width_points=100, font_name='Helvetica', font_size=10) == ['']
