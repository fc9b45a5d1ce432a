from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Protocol

from reportlab.lib.fonts import ps2tt, tt2ps
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase._fontdata import standardFonts
from reportlab.pdfbase.cidfonts import UnicodeCIDFont

from ..config import Settings
from ..types import RendererName
from .blocks import BlockNode


logger = logging.getLogger(__name__)

FONT_CJK_NAME = 'STSong-Light'

_PAGE_SIZES = {
    'A4': A4,
    'LETTER': LETTER,
}
_FONT_LOCK = threading.Lock()


@dataclass(frozen=True)
class PageLayout:
    page_size: tuple[float, float] = A4
    margin: float = 40.0
    font_name: str = 'Helvetica'
    mono_font_name: str = 'Courier'
    body_font_size: float = 10.0
    code_font_size: float = 9.0
    author: str = 'AI Documentation Generator'

    @classmethod
    def from_settings(cls, settings: Settings) -> PageLayout:
        return cls(
            page_size=_PAGE_SIZES[settings.pdf_page_size],
            margin=float(settings.pdf_page_margin),
            font_name=settings.pdf_font_name,
            mono_font_name=settings.pdf_mono_font_name,
            body_font_size=float(settings.pdf_body_font_size),
            code_font_size=float(settings.pdf_code_font_size),
            author=settings.pdf_author,
        )

    @property
    def page_width(self) -> float:
        return float(self.page_size[0])

    @property
    def page_height(self) -> float:
        return float(self.page_size[1])

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.page_height - 2 * self.margin


@dataclass(frozen=True)
class DocumentSource:
    title: str
    markdown: str
    blocks: tuple[BlockNode, ...]


@dataclass(frozen=True)
class DocumentFonts:
    body: str
    bold: str
    mono: str
    standard: bool


class DocumentRenderer(Protocol):
    name: RendererName

    def render(self, source: DocumentSource) -> bytes:
        ...


def contains_cjk(value: str) -> bool:
    for char in str(value or ''):
        code = ord(char)
        if (
            0x4E00 <= code <= 0x9FFF  # CJK Unified Ideographs
            or 0x3400 <= code <= 0x4DBF  # CJK Extension A
            or 0xF900 <= code <= 0xFAFF  # CJK Compatibility Ideographs
            or 0x3040 <= code <= 0x30FF  # Hiragana, Katakana
            or 0xAC00 <= code <= 0xD7AF  # Hangul syllables
        ):
            return True
    return False


def _register_cjk_font() -> bool:
    with _FONT_LOCK:
        if FONT_CJK_NAME in pdfmetrics.getRegisteredFontNames():
            return True
        try:
            pdfmetrics.registerFont(UnicodeCIDFont(FONT_CJK_NAME))
            # The CID font has no bold or italic face; map them onto itself.
            pdfmetrics.registerFontFamily(
                FONT_CJK_NAME,
                normal=FONT_CJK_NAME,
                bold=FONT_CJK_NAME,
                italic=FONT_CJK_NAME,
                boldItalic=FONT_CJK_NAME,
            )
            return True
        except Exception as exc:
            logger.warning('Failed to register CJK PDF font %s: %s', FONT_CJK_NAME, exc)
            return False


def _bold_variant(font_name: str) -> str:
    try:
        family, _, _ = ps2tt(font_name)
        return tt2ps(family, 1, 0)
    except ValueError:
        return 'Helvetica-Bold'


def resolve_document_fonts(markdown_text: str, layout: PageLayout) -> DocumentFonts:
    if contains_cjk(markdown_text) and _register_cjk_font():
        return DocumentFonts(
            body=FONT_CJK_NAME,
            bold=FONT_CJK_NAME,
            mono=layout.mono_font_name,
            standard=False,
        )
    body = layout.font_name
    return DocumentFonts(
        body=body,
        bold=_bold_variant(body),
        mono=layout.mono_font_name,
        standard=body in standardFonts,
    )


def measure_text_width(text: str, *, font_name: str, font_size: float) -> float:
    if not text:
        return 0.0
    return float(pdfmetrics.stringWidth(text, font_name, max(1.0, float(font_size))))


def _split_token_by_width(
    token: str,
    *,
    max_width_points: float,
    font_name: str,
    font_size: float,
) -> list[str]:
    chunks: list[str] = []
    current = ''
    for char in token:
        candidate = f'{current}{char}'
        if measure_text_width(candidate, font_name=font_name, font_size=font_size) <= max_width_points:
            current = candidate
            continue
        if current:
            chunks.append(current)
            current = char
            continue
        chunks.append(char)
    if current:
        chunks.append(current)
    return chunks


def wrap_text_by_width(
    text_line: str,
    *,
    max_width_points: float,
    font_name: str,
    font_size: float,
) -> list[str]:
    """Wrap one line of text to a width measured in points.

    Breaks at whitespace; a single token wider than the line is split by
    character. Always returns at least one (possibly empty) line.
    """
    line = str(text_line or '').replace('\t', '    ')
    if not line:
        return ['']

    wrapped: list[str] = []
    current = ''
    for token in re.findall(r'\s+|\S+', line):
        candidate = f'{current}{token}'
        if measure_text_width(candidate, font_name=font_name, font_size=font_size) <= max_width_points:
            current = candidate
            continue

        if current.strip():
            wrapped.append(current.rstrip())
            current = ''
            if token.isspace():
                continue

        if measure_text_width(token, font_name=font_name, font_size=font_size) <= max_width_points:
            current = token
            continue

        chunks = _split_token_by_width(
            token,
            max_width_points=max_width_points,
            font_name=font_name,
            font_size=font_size,
        )
        wrapped.extend(chunk.rstrip() for chunk in chunks[:-1])
        current = chunks[-1] if chunks else ''

    if current or not wrapped:
        wrapped.append(current.rstrip())
    return wrapped
