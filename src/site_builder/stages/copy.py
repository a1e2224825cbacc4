from __future__ import annotations

from pathlib import Path

from site_builder.io.fs import copy_file_atomic

def copy_asset(src: Path, dst: Path) -> None:
    """Byte-for-byte copy; parent directories are created as needed."""
    copy_file_atomic(src, dst)
