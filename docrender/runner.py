from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from docrender.config import get_settings
from docrender.report.layout import PageLayout
from docrender.report.packaging import pack
from docrender.report.pdf_export import default_layout, render_document
from docrender.types import PackagedArtifact, RenderedDocument, RenderRequest


logger = logging.getLogger(__name__)


async def _render_one(
    request: RenderRequest,
    *,
    semaphore: asyncio.Semaphore,
    layout: PageLayout,
) -> RenderedDocument:
    async with semaphore:
        try:
            return await asyncio.to_thread(
                render_document,
                request.markdown,
                request.output_name,
                layout=layout,
            )
        except Exception as exc:
            detail = f'{type(exc).__name__}: {exc}'
            logger.error('Rendering %s failed outside the renderer chain: %s', request.output_name, detail)
            return RenderedDocument(output_name=request.output_name, error=detail)


async def render_many(
    requests: Sequence[RenderRequest],
    *,
    max_concurrency: int | None = None,
    layout: PageLayout | None = None,
) -> list[RenderedDocument]:
    """Render every request concurrently; results keep the request order."""
    limit = max_concurrency or get_settings().render_max_concurrency
    semaphore = asyncio.Semaphore(max(1, int(limit)))
    effective_layout = layout or default_layout()
    return list(
        await asyncio.gather(
            *(_render_one(request, semaphore=semaphore, layout=effective_layout) for request in requests)
        )
    )


async def build_artifact(
    requests: Sequence[RenderRequest],
    label: str,
    *,
    max_concurrency: int | None = None,
    layout: PageLayout | None = None,
) -> PackagedArtifact:
    documents = await render_many(requests, max_concurrency=max_concurrency, layout=layout)
    fallbacks = [doc.output_name for doc in documents if doc.error and doc.available]
    if fallbacks:
        logger.info('Rendered with a fallback renderer: %s', ', '.join(fallbacks))
    return pack([(doc.output_name, doc.content) for doc in documents], label)


def build_artifact_sync(
    requests: Sequence[RenderRequest],
    label: str,
    *,
    max_concurrency: int | None = None,
    layout: PageLayout | None = None,
) -> PackagedArtifact:
    return asyncio.run(build_artifact(requests, label, max_concurrency=max_concurrency, layout=layout))
