from __future__ import annotations

import io
import logging

from pypdf import PdfReader

from ..config import get_settings
from ..types import RenderedDocument, RendererName
from .blocks import parse_markdown_blocks
from .document_pdf import FlowRenderer
from .layout import DocumentRenderer, DocumentSource, PageLayout
from .plain_pdf import PlainTextRenderer, blank_document


logger = logging.getLogger(__name__)


def default_layout() -> PageLayout:
    return PageLayout.from_settings(get_settings())


def default_renderers(layout: PageLayout) -> list[DocumentRenderer]:
    return [FlowRenderer(layout), PlainTextRenderer(layout)]


def render_document(
    markdown: str,
    output_name: str,
    *,
    layout: PageLayout | None = None,
    renderers: list[DocumentRenderer] | None = None,
) -> RenderedDocument:
    """Render markdown into a PDF, falling back to simpler renderers on failure.

    Renderers are tried in order; when all of them fail the result is a
    blank single-page document, so a document is always produced.
    """
    layout = layout or default_layout()
    chain = renderers if renderers is not None else default_renderers(layout)
    markdown_text = str(markdown or '')
    source = DocumentSource(
        title=str(output_name or ''),
        markdown=markdown_text,
        blocks=tuple(parse_markdown_blocks(markdown_text)),
    )

    errors: list[str] = []
    for renderer in chain:
        try:
            content = renderer.render(source)
        except Exception as exc:
            detail = f'{renderer.name.value}: {type(exc).__name__}: {exc}'
            logger.warning('PDF renderer failed for %s, trying next: %s', source.title or '<untitled>', detail)
            errors.append(detail)
            continue
        return RenderedDocument(
            output_name=source.title,
            content=content,
            renderer=renderer.name,
            error='; '.join(errors) or None,
        )

    logger.error('All PDF renderers failed for %s; emitting a blank document', source.title or '<untitled>')
    return RenderedDocument(
        output_name=source.title,
        content=blank_document(source.title, layout),
        renderer=RendererName.blank,
        error='; '.join(errors) or None,
    )


def render(markdown: str, output_name: str) -> bytes:
    return render_document(markdown, output_name).content or b''


def count_pages(pdf_bytes: bytes) -> int:
    return len(PdfReader(io.BytesIO(pdf_bytes)).pages)
