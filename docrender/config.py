from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    app_name: str = 'AI Documentation Generator'

    output_dir: Path = Field(
        default=Path('./output'),
        validation_alias=AliasChoices('DOCRENDER_OUTPUT_DIR', 'OUTPUT_DIR'),
    )
    log_level: str = Field(
        default='INFO',
        validation_alias=AliasChoices('DOCRENDER_LOG_LEVEL', 'LOG_LEVEL'),
    )

    # PDF layout
    pdf_page_size: Literal['A4', 'LETTER'] = 'A4'
    pdf_page_margin: int = Field(default=40, ge=0)
    pdf_font_name: str = 'Helvetica'
    pdf_mono_font_name: str = 'Courier'
    pdf_body_font_size: float = Field(default=10, gt=0)
    pdf_code_font_size: float = Field(default=9, gt=0)
    pdf_author: str = 'AI Documentation Generator'

    # Batch rendering
    render_max_concurrency: int = Field(default=4, ge=1)

    # Archive packaging
    archive_suffix: str = '-documentation.zip'
    # Off keeps the last document when two paths reduce to the same entry name.
    archive_dedupe_names: bool = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
