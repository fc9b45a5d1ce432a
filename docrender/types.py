from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RendererName(str, Enum):
    flow = 'flow'
    plain = 'plain'
    blank = 'blank'


class RenderRequest(BaseModel):
    output_name: str
    markdown: str = ''


class RenderedDocument(BaseModel):
    output_name: str
    content: bytes | None = None
    renderer: RendererName | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        return bool(self.content)


class PackagedArtifact(BaseModel):
    file_name: str
    content: bytes
    media_type: str
    entry_names: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def is_archive(self) -> bool:
        return self.media_type == 'application/zip'
