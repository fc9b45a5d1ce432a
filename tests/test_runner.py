from __future__ import annotations

import asyncio
import io
import zipfile

import pytest

import docrender.runner as runner
from docrender.report.pdf_export import count_pages
from docrender.runner import build_artifact_sync, render_many
from docrender.types import RendererName, RenderRequest


def _requests() -> list[RenderRequest]:
    return [
        RenderRequest(output_name='src/components/App.tsx', markdown='# App\n\nThe **root** component.'),
        RenderRequest(output_name='src/lib/api.ts', markdown='# API\n\n- get\n- post'),
        RenderRequest(output_name='README.md', markdown='# Readme\n\n| a | b |\n|---|---|\n| 1 | 2 |'),
    ]


def test_render_many_keeps_request_order() -> None:
    requests = _requests()
    documents = asyncio.run(render_many(requests, max_concurrency=2))

    assert [doc.output_name for doc in documents] == [request.output_name for request in requests]
    assert all(doc.renderer == RendererName.flow for doc in documents)
    assert all(doc.content.startswith(b'%PDF') for doc in documents)


def test_build_artifact_zips_every_document() -> None:
    artifact = build_artifact_sync(_requests(), 'repo-main', max_concurrency=1)

    assert artifact.file_name == 'repo-main-documentation.zip'
    with zipfile.ZipFile(io.BytesIO(artifact.content)) as archive:
        names = archive.namelist()
        assert names == ['components_App_tsx.pdf', 'lib_api_ts.pdf', 'README_md.pdf']
        for name in names:
            assert count_pages(archive.read(name)) >= 1


def test_single_request_yields_a_pdf() -> None:
    artifact = build_artifact_sync(_requests()[:1], 'repo-main')

    assert artifact.media_type == 'application/pdf'
    assert artifact.file_name == 'App_tsx.pdf'
    assert artifact.content.startswith(b'%PDF')


def test_one_failing_document_does_not_stop_the_batch(monkeypatch: pytest.MonkeyPatch) -> None:
    real_render = runner.render_document

    def flaky_render(markdown, output_name, **kwargs):
        if output_name == 'src/lib/api.ts':
            raise RuntimeError('renderer crashed')
        return real_render(markdown, output_name, **kwargs)

    monkeypatch.setattr(runner, 'render_document', flaky_render)
    artifact = build_artifact_sync(_requests(), 'repo-main')

    assert artifact.skipped == ['src/lib/api.ts']
    assert artifact.entry_names == ['components_App_tsx.pdf', 'README_md.pdf']
