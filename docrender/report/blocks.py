from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class BlockKind(str, Enum):
    title = 'title'
    subtitle = 'subtitle'
    heading1 = 'heading1'
    heading2 = 'heading2'
    paragraph = 'paragraph'
    code = 'code'
    list = 'list'
    table = 'table'
    separator = 'separator'
    note = 'note'


TEXT_KINDS = frozenset(
    {
        BlockKind.title,
        BlockKind.subtitle,
        BlockKind.heading1,
        BlockKind.heading2,
        BlockKind.paragraph,
        BlockKind.code,
        BlockKind.note,
    }
)

# Longest prefix first so that '#### ' is not read as '# '.
_HEADING_PREFIXES: tuple[tuple[str, BlockKind], ...] = (
    ('#### ', BlockKind.heading2),
    ('### ', BlockKind.heading1),
    ('## ', BlockKind.subtitle),
    ('# ', BlockKind.title),
)

_FENCE = '```'
_BULLETS = ('- ', '* ')
_NOTE_MARKER = '> '
_CONTINUATION_INDENT = '  '


@dataclass(frozen=True)
class BlockNode:
    kind: BlockKind
    text: str | None = None
    items: tuple[str, ...] | None = None
    rows: tuple[tuple[str, ...], ...] | None = None

    def __post_init__(self) -> None:
        has_text = self.text is not None
        has_items = self.items is not None
        has_rows = self.rows is not None
        expected = (
            self.kind in TEXT_KINDS,
            self.kind == BlockKind.list,
            self.kind == BlockKind.table,
        )
        if (has_text, has_items, has_rows) != expected:
            raise ValueError(f'invalid payload for {self.kind.value} block')

    @classmethod
    def textual(cls, kind: BlockKind, text: str) -> BlockNode:
        return cls(kind=kind, text=text)

    @classmethod
    def bullet_list(cls, items: list[str]) -> BlockNode:
        return cls(kind=BlockKind.list, items=tuple(items))

    @classmethod
    def table_rows(cls, rows: list[list[str]]) -> BlockNode:
        return cls(kind=BlockKind.table, rows=tuple(tuple(row) for row in rows))

    @classmethod
    def separator(cls) -> BlockNode:
        return cls(kind=BlockKind.separator)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {'kind': self.kind.value}
        if self.text is not None:
            payload['text'] = self.text
        if self.items is not None:
            payload['items'] = list(self.items)
        if self.rows is not None:
            payload['rows'] = [list(row) for row in self.rows]
        return payload


def _normalize_newlines(value: str) -> str:
    return value.replace('\r\n', '\n').replace('\r', '\n')


def _is_table_row(stripped: str) -> bool:
    return stripped.startswith('|') and stripped.endswith('|')


def _split_table_row(stripped: str) -> list[str]:
    # A lone '|' splits into ['', ''] and yields no cells.
    return [cell.strip() for cell in stripped.split('|')[1:-1]]


def _is_separator_cell(cell: str) -> bool:
    return bool(cell) and set(cell) == {'-'}


def _is_header_separator(cells: list[str]) -> bool:
    return all(_is_separator_cell(cell) for cell in cells)


def _is_bullet(stripped: str) -> bool:
    return stripped.startswith(_BULLETS)


def _heading_kind(stripped: str) -> tuple[BlockKind, str] | None:
    for prefix, kind in _HEADING_PREFIXES:
        if stripped.startswith(prefix):
            return kind, stripped[len(prefix):]
    return None


def _consume_list(lines: list[str], start: int) -> tuple[BlockNode, int]:
    items = [lines[start].strip()[2:]]
    cursor = start + 1
    while cursor < len(lines):
        raw = lines[cursor]
        stripped = raw.strip()
        if _is_bullet(stripped):
            items.append(stripped[2:])
        elif raw.startswith(_CONTINUATION_INDENT) and stripped:
            items[-1] = f'{items[-1]} {stripped}'
        else:
            break
        cursor += 1
    return BlockNode.bullet_list(items), cursor


def _consume_note(lines: list[str], start: int) -> tuple[BlockNode, int]:
    text = lines[start].strip()[len(_NOTE_MARKER):]
    cursor = start + 1
    while cursor < len(lines):
        stripped = lines[cursor].strip()
        if not stripped.startswith(_NOTE_MARKER):
            break
        text = f'{text} {stripped[len(_NOTE_MARKER):]}'
        cursor += 1
    return BlockNode.textual(BlockKind.note, text), cursor


def parse_markdown_blocks(markdown: str) -> list[BlockNode]:
    """Parse LLM markdown into document blocks, in input order.

    Three accumulation modes are mutually exclusive: a code fence buffers
    lines verbatim, a table buffers pipe rows, and a list or note is
    resolved on the spot by looking ahead. Any other line is classified by
    its prefix. Malformed input never raises.
    """
    lines = _normalize_newlines(str(markdown or '')).split('\n')
    blocks: list[BlockNode] = []

    code_lines: list[str] | None = None
    table_rows: list[list[str]] | None = None

    def _flush_code() -> None:
        nonlocal code_lines
        content = '\n'.join(code_lines or []).strip()
        if content:
            blocks.append(BlockNode.textual(BlockKind.code, content))
        code_lines = None

    def _flush_table() -> None:
        nonlocal table_rows
        if table_rows:
            blocks.append(BlockNode.table_rows(table_rows))
        table_rows = None

    cursor = 0
    while cursor < len(lines):
        line = lines[cursor]
        stripped = line.strip()

        if stripped.startswith(_FENCE):
            if code_lines is None:
                _flush_table()
                code_lines = []
            else:
                _flush_code()
            cursor += 1
            continue

        if code_lines is not None:
            code_lines.append(line)
            cursor += 1
            continue

        if _is_table_row(stripped):
            if table_rows is None:
                table_rows = []
            cells = _split_table_row(stripped)
            if cells and not _is_header_separator(cells):
                table_rows.append(cells)
            cursor += 1
            continue
        if table_rows is not None:
            _flush_table()

        if stripped == '---':
            blocks.append(BlockNode.separator())
            cursor += 1
            continue

        heading = _heading_kind(stripped)
        if heading is not None:
            kind, text = heading
            blocks.append(BlockNode.textual(kind, text))
            cursor += 1
            continue

        if stripped.startswith(_NOTE_MARKER):
            note, cursor = _consume_note(lines, cursor)
            blocks.append(note)
            continue

        if _is_bullet(stripped):
            bullet_list, cursor = _consume_list(lines, cursor)
            blocks.append(bullet_list)
            continue

        if stripped:
            blocks.append(BlockNode.textual(BlockKind.paragraph, stripped))
        cursor += 1

    if code_lines is not None:
        _flush_code()
    _flush_table()
    return blocks
