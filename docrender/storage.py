from __future__ import annotations

import re
from pathlib import Path

from .config import get_settings


_UNSAFE_FILE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


def output_root(override: Path | None = None) -> Path:
    root = override if override is not None else get_settings().output_dir
    root.mkdir(parents=True, exist_ok=True)
    return root


def safe_file_name(name: str) -> str:
    token = _UNSAFE_FILE_CHARS.sub('_', str(name or '')).strip().strip('.')
    if not token:
        raise ValueError('file name is required')
    return token


def artifact_path(file_name: str, *, out_dir: Path | None = None) -> Path:
    return output_root(out_dir) / safe_file_name(file_name)


def write_bytes_atomic(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + '.tmp')
    tmp.write_bytes(content)
    tmp.replace(path)


def read_markdown(path: Path) -> str:
    return path.read_text(encoding='utf-8', errors='replace')
