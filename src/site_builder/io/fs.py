from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Iterable, Optional

def ensure_dir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def _reraise(e: OSError) -> None:
    raise e

def iter_files(root: Path) -> Iterable[Path]:
    """
    Regular files under root, sorted by relative posix path. Symlinks (to files
    or directories) are skipped, as `find -type f` does; an unreadable
    directory raises OSError.
    """
    found = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_reraise):
        for name in filenames:
            p = Path(dirpath) / name
            if not p.is_symlink() and p.is_file():
                found.append(p)
    yield from sorted(found, key=lambda q: q.relative_to(root).as_posix())

def relpath_under(root: Path, p: Path) -> Path:
    # no resolve(): a path keeps the name it was found under
    return p.relative_to(root)

def read_text_utf8(p: Path) -> str:
    data = p.read_bytes()
    return data.decode("utf-8")

def mtime(p: Path) -> Optional[float]:
    try:
        return p.stat().st_mtime
    except FileNotFoundError:
        return None

def temp_sibling(p: Path) -> Path:
    """Reserve a temp file next to p so the final rename stays on one filesystem."""
    ensure_dir(p.parent)
    fd, name = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=p.parent)
    os.close(fd)
    os.chmod(name, 0o644)  # mkstemp creates 0600
    return Path(name)

def discard(p: Path) -> None:
    try:
        p.unlink()
    except FileNotFoundError:
        pass

def write_bytes_atomic(p: Path, data: bytes) -> None:
    tmp = temp_sibling(p)
    try:
        tmp.write_bytes(data)
        os.replace(tmp, p)
    except BaseException:
        discard(tmp)
        raise

def write_text_utf8(p: Path, s: str) -> None:
    write_bytes_atomic(p, s.replace("\r\n", "\n").encode("utf-8"))

def copy_file_atomic(src: Path, dst: Path) -> None:
    tmp = temp_sibling(dst)
    try:
        shutil.copyfile(src, tmp)
        os.replace(tmp, dst)
    except BaseException:
        discard(tmp)
        raise

def remove_tree(p: Path) -> bool:
    if not p.exists():
        return False
    shutil.rmtree(p)
    return True
