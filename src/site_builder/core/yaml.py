from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

import yaml

_FENCE_OPEN = "---"
_FENCE_CLOSE = ("---", "...")

@dataclass(frozen=True)
class Frontmatter:
    data: Dict[str, Any]
    body: str

def split_frontmatter(md: str) -> Tuple[str, str]:
    """
    Split a leading pandoc YAML metadata block from the body.
    The block closes with '---' or '...'.
    """
    if not md.startswith(_FENCE_OPEN):
        return "", md

    lines = md.splitlines(keepends=True)
    if not lines or lines[0].strip() != _FENCE_OPEN:
        return "", md

    end_idx = None
    for i in range(1, len(lines)):
        if lines[i].strip() in _FENCE_CLOSE:
            end_idx = i
            break
    if end_idx is None:
        raise ValueError("Malformed YAML metadata block: missing closing '---'")

    yaml_text = "".join(lines[1:end_idx])
    body = "".join(lines[end_idx + 1 :])
    return yaml_text, body

def parse_frontmatter(md: str) -> Frontmatter:
    yaml_text, body = split_frontmatter(md)
    if not yaml_text:
        return Frontmatter(data={}, body=body)
    try:
        data = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Malformed YAML metadata block: {e}") from e
    if not isinstance(data, dict):
        raise ValueError("Malformed YAML metadata block: top-level must be a mapping")
    return Frontmatter(data=data, body=body)
