from __future__ import annotations

import io
import logging
import zipfile
from collections.abc import Iterable, Sequence

from ..config import get_settings
from ..types import PackagedArtifact


logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = 'application/pdf'
ZIP_MEDIA_TYPE = 'application/zip'


def _path_segments(path: str) -> list[str]:
    normalized = str(path or '').replace('\\', '/')
    return [segment for segment in normalized.split('/') if segment]


def _pdf_name(stem: str) -> str:
    # Only the extension dot is replaced: 'a.test.ts' becomes 'a.test_ts.pdf'.
    head, dot, tail = stem.rpartition('.')
    flattened = f'{head}_{tail}' if dot else stem
    return f'{flattened or "document"}.pdf'


def single_document_name(path: str) -> str:
    segments = _path_segments(path)
    return _pdf_name(segments[-1] if segments else '')


def archive_entry_name(path: str) -> str:
    segments = _path_segments(path)
    if len(segments) > 1:
        return _pdf_name(f'{segments[-2]}_{segments[-1]}')
    return _pdf_name(segments[-1] if segments else '')


def archive_label(repository: str, branch: str) -> str:
    return f'{repository}-{branch}'


def archive_file_name(label: str, *, suffix: str | None = None) -> str:
    effective_suffix = suffix if suffix is not None else get_settings().archive_suffix
    return f'{label or "documents"}{effective_suffix}'


def _dedupe_name(name: str, taken: set[str]) -> str:
    if name not in taken:
        return name
    stem = name[: -len('.pdf')]
    counter = 2
    while f'{stem}_{counter}.pdf' in taken:
        counter += 1
    return f'{stem}_{counter}.pdf'


def _archive_members(
    entries: Iterable[tuple[str, bytes]],
    *,
    dedupe: bool,
) -> dict[str, bytes]:
    members: dict[str, bytes] = {}
    for output_name, content in entries:
        entry_name = archive_entry_name(output_name)
        if entry_name in members:
            if dedupe:
                entry_name = _dedupe_name(entry_name, set(members))
            else:
                logger.warning(
                    'Archive entry %s from %s replaces an earlier document with the same name',
                    entry_name,
                    output_name,
                )
                # Re-insert so that the replacing document takes the later position.
                members.pop(entry_name)
        members[entry_name] = content
    return members


def build_archive(members: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        for entry_name, content in members.items():
            archive.writestr(entry_name, content)
    return buffer.getvalue()


def pack(
    entries: Sequence[tuple[str, bytes | None]],
    label: str,
    *,
    dedupe_names: bool | None = None,
    archive_suffix: str | None = None,
) -> PackagedArtifact:
    """Turn rendered documents into the downloadable artifact.

    A single requested document is passed through unchanged. Anything else
    becomes a ZIP archive; documents without bytes are left out and listed
    in ``skipped``.
    """
    if len(entries) == 1 and entries[0][1]:
        output_name, content = entries[0]
        return PackagedArtifact(
            file_name=single_document_name(output_name),
            content=content,
            media_type=PDF_MEDIA_TYPE,
            entry_names=[single_document_name(output_name)],
        )

    available: list[tuple[str, bytes]] = []
    skipped: list[str] = []
    for output_name, content in entries:
        if content:
            available.append((output_name, content))
        else:
            skipped.append(output_name)
    if skipped:
        logger.warning('Packaging %d of %d documents; skipped: %s', len(available), len(entries), ', '.join(skipped))

    dedupe = get_settings().archive_dedupe_names if dedupe_names is None else dedupe_names
    members = _archive_members(available, dedupe=dedupe)
    return PackagedArtifact(
        file_name=archive_file_name(label, suffix=archive_suffix),
        content=build_archive(members),
        media_type=ZIP_MEDIA_TYPE,
        entry_names=list(members),
        skipped=skipped,
    )
