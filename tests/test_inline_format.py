from __future__ import annotations

import pytest

from docrender.report.inline_format import (
    InlineFonts,
    RunStyle,
    StyledRun,
    inline_markup,
    parse_inline_runs,
    visible_text,
)


FONTS = InlineFonts(body='Helvetica', mono='Courier')


def test_plain_line_is_a_single_plain_run() -> None:
    line = 'Plain text with no markup at all.'
    assert parse_inline_runs(line) == [StyledRun(text=line, style=RunStyle.plain)]


def test_bold_and_code_runs_keep_order() -> None:
    runs = parse_inline_runs('Some paragraph with **bold** and `code`.')
    assert runs == [
        StyledRun('Some paragraph with '),
        StyledRun('bold', RunStyle.bold),
        StyledRun(' and '),
        StyledRun('code', RunStyle.code),
        StyledRun('.'),
    ]


def test_italic_and_link_label_drop_the_url() -> None:
    runs = parse_inline_runs('See [the docs](https://example.com/docs) _today_')
    assert runs == [
        StyledRun('See '),
        StyledRun('the docs', RunStyle.link_label),
        StyledRun(' '),
        StyledRun('today', RunStyle.italic),
    ]


@pytest.mark.parametrize(
    'line',
    [
        'a **b',
        'unclosed `code',
        'snake_case',
        '[label](no close',
        '[label] (spaced)',
        '*',
    ],
)
def test_unterminated_markers_are_plain_text(line: str) -> None:
    assert parse_inline_runs(line) == [StyledRun(line)]


def test_matched_content_is_not_rescanned() -> None:
    assert parse_inline_runs('`**bold**`') == [StyledRun('**bold**', RunStyle.code)]
    assert parse_inline_runs('**`code`**') == [StyledRun('`code`', RunStyle.bold)]


def test_leftmost_marker_wins() -> None:
    runs = parse_inline_runs('_a `b_ c`')
    assert runs == [StyledRun('a `b', RunStyle.italic), StyledRun(' c`')]


def test_zero_length_runs_are_not_emitted() -> None:
    assert parse_inline_runs('') == []
    assert parse_inline_runs('****') == []
    assert parse_inline_runs('x``y') == [StyledRun('x'), StyledRun('y')]


def test_visible_text_strips_markup() -> None:
    assert visible_text('**Bold** then `code` and [link](http://x)') == 'Bold then code and link'


def test_markup_escapes_special_characters() -> None:
    markup = inline_markup('a < b & **c > d**', FONTS)
    assert markup == 'a &lt; b &amp; <b>c &gt; d</b>'


def test_markup_styles() -> None:
    markup = inline_markup('_it_ [link](u) `x`', FONTS)
    assert markup.startswith('<i>it</i> <b>link</b> ')
    assert '<font name="Courier"' in markup
    assert markup.endswith('>x</font>')


def test_non_ascii_inline_code_uses_body_font() -> None:
    markup = inline_markup('`größe`', FONTS)
    assert '<font name="Helvetica"' in markup
