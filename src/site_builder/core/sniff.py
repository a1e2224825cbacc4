from __future__ import annotations

import html
import re
import shlex
from dataclasses import dataclass
from typing import List

from site_builder.core.yaml import parse_frontmatter

@dataclass(frozen=True)
class BuildOptions:
    has_embedded_style: bool = False
    has_embedded_title: bool = False
    extra_flags: str = ""

_RE_STYLE = re.compile(r"(?im)^\s*<style\b")
_RE_TITLE_TAG = re.compile(r"(?im)^\s*<title\b")
_RE_TITLE_BLOCK = re.compile(r"^%")  # pandoc title block: "% Title" on the first line
_RE_FLAGS = re.compile(
    r"""(?im)^\s*<meta\s+pandoc-flags\s*=\s*(?:"([^"]*)"|'([^']*)')\s*/?>"""
)

# Each scan runs from the top of the document until the first match or the end
# of input. re.search stops at the first hit, so no explicit line bound is needed.

def has_embedded_style(text: str) -> bool:
    return _RE_STYLE.search(text or "") is not None

def _yaml_title(text: str) -> bool:
    try:
        fm = parse_frontmatter(text)
    except ValueError:
        return False
    title = fm.data.get("title")
    return title is not None and str(title).strip() != ""

def has_embedded_title(text: str) -> bool:
    text = text or ""
    first = text.split("\n", 1)[0]
    if _RE_TITLE_BLOCK.match(first):
        return True
    if _RE_TITLE_TAG.search(text):
        return True
    return _yaml_title(text)

def extra_flags(text: str) -> str:
    """
    Return the argument of the first <meta pandoc-flags="..."> line, unescaped.
    Later occurrences are ignored.
    """
    m = _RE_FLAGS.search(text or "")
    if not m:
        return ""
    raw = m.group(1) if m.group(1) is not None else m.group(2)
    return html.unescape(raw).strip()

def extra_flags_argv(flags: str) -> List[str]:
    return shlex.split(flags) if flags else []

def sniff(text: str) -> BuildOptions:
    return BuildOptions(
        has_embedded_style=has_embedded_style(text),
        has_embedded_title=has_embedded_title(text),
        extra_flags=extra_flags(text),
    )
