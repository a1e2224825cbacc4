from __future__ import annotations

import html
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Iterable, List

from site_builder.io.fs import write_bytes_atomic

def _excluded(rel: str, patterns: Iterable[str]) -> bool:
    name = rel.rsplit("/", 1)[-1]
    return any(fnmatchcase(rel, pat) or fnmatchcase(name, pat) for pat in patterns)

def index_entries(
    doc_outputs: Iterable[PurePosixPath],
    *,
    index_rel: str,
    exclude: Iterable[str] = (),
) -> List[str]:
    """
    Output-relative paths listed on the site map: the index itself and any
    path matching an exclude pattern (matched against the full path or the
    file name) are left out. Sorted so build order never shows.
    """
    exclude = tuple(exclude)
    entries = set()
    for rel in doc_outputs:
        s = PurePosixPath(rel).as_posix()
        if s == index_rel or _excluded(s, exclude):
            continue
        entries.add(s)
    return sorted(entries)

def render_index(entries: Iterable[str], heading: str = "Site map:") -> str:
    lines: List[str] = [f"<h3>{html.escape(heading)}</h3><ul>"]
    for rel in entries:
        href = html.escape(rel, quote=True)
        lines.append(f'<li><a href="{href}">{html.escape(rel)}</a></li>')
    lines.append("</ul>")
    return "\n".join(lines) + "\n"

def write_index(path: Path, content: str) -> bool:
    """Write the index only when its content changed; return True if written."""
    data = content.encode("utf-8")
    try:
        if path.read_bytes() == data:
            return False
    except FileNotFoundError:
        pass
    write_bytes_atomic(path, data)
    return True
