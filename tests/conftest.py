from __future__ import annotations

import threading
from pathlib import Path

import pytest

from site_builder.config import BuildConfig
from site_builder.stages.convert import ConversionError, Invocation


class FakeConverter:
    """Stands in for pandoc: records every invocation and writes a tiny page."""

    def __init__(self) -> None:
        self.calls: list[Invocation] = []
        self.fail: set[str] = set()
        self._lock = threading.Lock()

    def convert(self, inv: Invocation) -> None:
        with self._lock:
            self.calls.append(inv)
        if inv.source.name in self.fail:
            raise ConversionError(inv.source, "converter exited with status 64", "pandoc: parse error at line 1")
        body = inv.source.read_text(encoding="utf-8")
        inv.target.write_text(f"<html><body>\n{body}</body></html>\n", encoding="utf-8")

    def call_for(self, name: str) -> Invocation:
        matches = [c for c in self.calls if c.source.name == name]
        assert len(matches) == 1, f"expected one conversion of {name}, got {len(matches)}"
        return matches[0]


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter()


@pytest.fixture
def content(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    root.mkdir()
    return root


@pytest.fixture
def make_config(tmp_path: Path, content: Path):
    stylesheet = tmp_path / "style.css"
    stylesheet.write_text("<style>body { max-width: 40em; }</style>\n", encoding="utf-8")
    footer = tmp_path / "footer.html"
    footer.write_text("<footer>essays</footer>\n", encoding="utf-8")

    def make(**changes) -> BuildConfig:
        values = dict(
            input_dir=content,
            output_dir=tmp_path / "web",
            stylesheet=stylesheet,
            footer=footer,
            archive=tmp_path / "site.tar.gz",
            jobs=2,
        )
        values.update(changes)
        return BuildConfig(**values)

    return make
