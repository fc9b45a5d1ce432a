from __future__ import annotations

import pytest

from docrender.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv('DOCRENDER_OUTPUT_DIR', str(tmp_path / 'output'))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_markdown() -> str:
    return '\n'.join(
        [
            '# App Component',
            '',
            'The `App` component wires **routing** and _state_ together. See [docs](https://example.com).',
            '',
            '## Props',
            '',
            '| Name | Type | Description |',
            '|------|------|-------------|',
            '| `title` | string | Page **title** |',
            '| onSave | function | Save & exit <quickly> |',
            '',
            '### Usage',
            '',
            '```tsx',
            'export default function App() {',
            '  return <Layout />',
            '}',
            '```',
            '',
            '- renders the layout',
            '- handles errors',
            '  and retries once',
            '',
            '> **Note:** keep the provider at the root',
            '> of the tree.',
            '',
            '---',
            '',
            '#### Changelog',
            'Initial version.',
        ]
    )
