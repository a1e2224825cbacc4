from __future__ import annotations

import os
import tarfile
from pathlib import Path

from site_builder.io.fs import discard, temp_sibling

def _is_own(p: Path, archive_path: Path) -> bool:
    # the archive (and its temp file) may live inside the tree it packs
    return p == archive_path or p.name.startswith(f".{archive_path.name}.")

def write_archive(output_dir: Path, archive_path: Path) -> int:
    """
    Pack the output tree into a gzip tarball with member names relative to
    output_dir. Returns the number of files archived.
    """
    files = sorted(
        (p for p in output_dir.rglob("*") if p.is_file() and not _is_own(p, archive_path)),
        key=lambda p: p.relative_to(output_dir).as_posix(),
    )
    tmp = temp_sibling(archive_path)
    try:
        with tarfile.open(tmp, "w:gz") as tar:
            for p in files:
                tar.add(p, arcname=p.relative_to(output_dir).as_posix(), recursive=False)
        os.replace(tmp, archive_path)
    except BaseException:
        discard(tmp)
        raise
    return len(files)
