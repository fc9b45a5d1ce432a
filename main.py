from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from docrender.config import get_settings
from docrender.report.blocks import parse_markdown_blocks
from docrender.report.packaging import single_document_name
from docrender.report.pdf_export import count_pages, render_document
from docrender.runner import build_artifact_sync
from docrender.storage import artifact_path, read_markdown, write_bytes_atomic
from docrender.types import RenderRequest


def _print_json(payload: dict) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _missing_file(path: Path) -> dict:
    return {'status': 'error', 'message': f'Markdown file not found: {path}'}


def _parse_entry(raw: str) -> tuple[Path, str]:
    source, sep, output_name = raw.partition('=')
    path = Path(source).expanduser()
    return path, (output_name.strip() if sep and output_name.strip() else path.name)


def _configure_logging() -> None:
    level = str(get_settings().log_level or 'INFO').upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )


def cmd_render(args: argparse.Namespace) -> int:
    markdown_path = Path(args.input).expanduser()
    if not markdown_path.is_file():
        _print_json(_missing_file(markdown_path))
        return 2

    output_name = args.name or markdown_path.name
    document = render_document(read_markdown(markdown_path), output_name)
    content = document.content or b''
    target = artifact_path(single_document_name(output_name), out_dir=args.out_dir)
    write_bytes_atomic(target, content)

    _print_json(
        {
            'status': 'ok',
            'output_name': output_name,
            'file': str(target),
            'renderer': document.renderer.value if document.renderer else None,
            'page_count': count_pages(content),
            'size_bytes': len(content),
            'error': document.error,
        }
    )
    return 0


def cmd_pack(args: argparse.Namespace) -> int:
    requests: list[RenderRequest] = []
    for raw in args.entry:
        path, output_name = _parse_entry(raw)
        if not path.is_file():
            _print_json(_missing_file(path))
            return 2
        requests.append(RenderRequest(output_name=output_name, markdown=read_markdown(path)))

    artifact = build_artifact_sync(requests, args.label, max_concurrency=args.max_concurrency)
    target = artifact_path(artifact.file_name, out_dir=args.out_dir)
    write_bytes_atomic(target, artifact.content)

    _print_json(
        {
            'status': 'ok',
            'file': str(target),
            'media_type': artifact.media_type,
            'entries': artifact.entry_names,
            'skipped': artifact.skipped,
            'requested': len(requests),
            'size_bytes': len(artifact.content),
        }
    )
    return 0


def cmd_blocks(args: argparse.Namespace) -> int:
    markdown_path = Path(args.input).expanduser()
    if not markdown_path.is_file():
        _print_json(_missing_file(markdown_path))
        return 2

    blocks = parse_markdown_blocks(read_markdown(markdown_path))
    _print_json({'status': 'ok', 'blocks': [block.to_dict() for block in blocks]})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Render generated markdown documentation into PDF files')
    sub = parser.add_subparsers(dest='command', required=True)

    render = sub.add_parser('render', help='Render one markdown file into a PDF')
    render.add_argument('--input', required=True, help='Path to the markdown file')
    render.add_argument('--name', required=False, help='Output name, usually the documented repository path')
    render.add_argument('--out-dir', type=Path, required=False, help='Directory for the PDF')
    render.set_defaults(func=cmd_render)

    pack = sub.add_parser('pack', help='Render several markdown files and package the result')
    pack.add_argument(
        '--entry',
        action='append',
        required=True,
        help='Markdown file, optionally followed by =OUTPUT_NAME (repeatable)',
    )
    pack.add_argument('--label', required=True, help='Archive label, for example repository-branch')
    pack.add_argument('--out-dir', type=Path, required=False, help='Directory for the artifact')
    pack.add_argument('--max-concurrency', type=int, required=False, help='Concurrent renders')
    pack.set_defaults(func=cmd_pack)

    blocks = sub.add_parser('blocks', help='Print the parsed block structure as JSON')
    blocks.add_argument('--input', required=True, help='Path to the markdown file')
    blocks.set_defaults(func=cmd_blocks)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging()
    return int(args.func(args))


if __name__ == '__main__':
    raise SystemExit(main())
