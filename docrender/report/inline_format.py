from __future__ import annotations

import html
from dataclasses import dataclass
from enum import Enum


class RunStyle(str, Enum):
    plain = 'plain'
    bold = 'bold'
    italic = 'italic'
    code = 'code'
    link_label = 'link-label'


@dataclass(frozen=True)
class StyledRun:
    text: str
    style: RunStyle = RunStyle.plain


@dataclass(frozen=True)
class InlineFonts:
    body: str
    mono: str
    code_back_color: str = '#F8F9FA'


# Tried in this order at every cursor position; the first marker that closes wins.
_PAIRED_MARKERS: tuple[tuple[str, RunStyle], ...] = (
    ('**', RunStyle.bold),
    ('`', RunStyle.code),
    ('_', RunStyle.italic),
)


def _match_paired(source: str, cursor: int, marker: str) -> tuple[str, int] | None:
    if not source.startswith(marker, cursor):
        return None
    content_start = cursor + len(marker)
    close = source.find(marker, content_start)
    if close < 0:
        return None
    return source[content_start:close], close + len(marker)


def _match_link(source: str, cursor: int) -> tuple[str, int] | None:
    if not source.startswith('[', cursor):
        return None
    label_end = source.find('](', cursor + 1)
    if label_end < 0:
        return None
    url_end = source.find(')', label_end + 2)
    if url_end < 0:
        return None
    return source[cursor + 1:label_end], url_end + 1


def parse_inline_runs(line: str) -> list[StyledRun]:
    """Split one line of markup into styled runs.

    Markers do not nest: the content of a matched marker is taken verbatim.
    A marker without a closing counterpart is treated as plain text.
    """
    source = str(line or '')
    runs: list[StyledRun] = []
    buffer: list[str] = []
    cursor = 0

    def _flush_buffer() -> None:
        nonlocal buffer
        if buffer:
            runs.append(StyledRun(text=''.join(buffer)))
            buffer = []

    def _emit(text: str, style: RunStyle) -> None:
        _flush_buffer()
        if text:
            runs.append(StyledRun(text=text, style=style))

    while cursor < len(source):
        matched = False
        for marker, style in _PAIRED_MARKERS:
            found = _match_paired(source, cursor, marker)
            if found is None:
                continue
            content, cursor = found
            _emit(content, style)
            matched = True
            break
        if matched:
            continue

        link = _match_link(source, cursor)
        if link is not None:
            label, cursor = link
            _emit(label, RunStyle.link_label)
            continue

        buffer.append(source[cursor])
        cursor += 1

    _flush_buffer()
    return runs


def _escape(value: str) -> str:
    return html.escape(value, quote=False)


def _escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


def runs_to_markup(runs: list[StyledRun], fonts: InlineFonts) -> str:
    """Render styled runs as reportlab paragraph markup."""
    parts: list[str] = []
    for run in runs:
        escaped = _escape(run.text)
        if run.style in {RunStyle.bold, RunStyle.link_label}:
            parts.append(f'<b>{escaped}</b>')
        elif run.style == RunStyle.italic:
            parts.append(f'<i>{escaped}</i>')
        elif run.style == RunStyle.code:
            code_font = fonts.body if any(ord(ch) > 127 for ch in run.text) else fonts.mono
            parts.append(
                f'<font name="{_escape_attr(code_font)}" '
                f'backColor="{_escape_attr(fonts.code_back_color)}">{escaped}</font>'
            )
        else:
            parts.append(escaped)
    return ''.join(parts)


def inline_markup(line: str, fonts: InlineFonts) -> str:
    return runs_to_markup(parse_inline_runs(line), fonts)


def visible_text(line: str) -> str:
    return ''.join(run.text for run in parse_inline_runs(line))
