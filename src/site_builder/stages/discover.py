from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from site_builder.io.fs import iter_files, relpath_under
from site_builder.logging import get_logger

log = get_logger()

OUTPUT_EXT = "html"


class DiscoveryError(RuntimeError):
    """Raised when the input tree cannot be enumerated."""


class Kind(Enum):
    DOCUMENT = "document"
    ASSET = "asset"


@dataclass(frozen=True)
class SourceFile:
    path: Path
    rel: PurePosixPath
    kind: Kind

    @property
    def output_rel(self) -> PurePosixPath:
        if self.kind is Kind.DOCUMENT:
            return self.rel.with_suffix(f".{OUTPUT_EXT}")
        return self.rel


@dataclass
class Routing:
    documents: List[SourceFile] = field(default_factory=list)
    assets: List[SourceFile] = field(default_factory=list)
    ignored: List[PurePosixPath] = field(default_factory=list)
    suppressed: List[PurePosixPath] = field(default_factory=list)


def classify(rel: PurePosixPath, document_ext: str, asset_exts: Iterable[str]) -> Optional[Kind]:
    """Extension only; exact match, so case sensitivity follows the host filesystem."""
    ext = rel.suffix[1:] if rel.suffix else ""
    if not ext:
        return None
    if ext == document_ext:
        return Kind.DOCUMENT
    if ext in set(asset_exts):
        return Kind.ASSET
    return None


def discover(
    root: Path,
    *,
    document_ext: str,
    asset_exts: Iterable[str],
    reserved: Iterable[str] = (),
) -> Routing:
    """
    Enumerate every file under root and route it.
    `reserved` holds output-relative paths produced by synthetic targets (the index);
    documents may not claim them and assets colliding with them are suppressed.
    """
    if not root.exists():
        raise DiscoveryError(f"Input directory not found: {root}")
    if not root.is_dir():
        raise DiscoveryError(f"Input path is not a directory: {root}")

    asset_exts = tuple(asset_exts)
    reserved_rels = {PurePosixPath(r) for r in reserved}
    routing = Routing()

    try:
        files = list(iter_files(root))
    except OSError as e:
        raise DiscoveryError(f"Cannot read input tree {root}: {e}") from e

    candidates: List[SourceFile] = []
    for p in files:
        rel = PurePosixPath(relpath_under(root, p).as_posix())
        kind = classify(rel, document_ext, asset_exts)
        if kind is None:
            log.debug(f"ignored: {rel}")
            routing.ignored.append(rel)
            continue
        candidates.append(SourceFile(path=p, rel=rel, kind=kind))

    generated = set(reserved_rels)
    for src in candidates:
        if src.kind is not Kind.DOCUMENT:
            continue
        if src.output_rel in reserved_rels:
            log.warning(f"document {src.rel} would overwrite generated {src.output_rel}; skipped")
            routing.suppressed.append(src.rel)
            continue
        generated.add(src.output_rel)
        routing.documents.append(src)

    # generated output wins over a same-named asset
    for src in candidates:
        if src.kind is not Kind.ASSET:
            continue
        if src.output_rel in generated:
            log.warning(f"asset {src.rel} shadowed by generated {src.output_rel}; not copied")
            routing.suppressed.append(src.rel)
            continue
        routing.assets.append(src)

    return routing
