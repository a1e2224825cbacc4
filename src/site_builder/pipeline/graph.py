from __future__ import annotations

import os
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from graphlib import TopologicalSorter
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from site_builder.io.fs import mtime
from site_builder.logging import get_logger

log = get_logger()

@dataclass(frozen=True)
class Target:
    """
    One output file and the recipe producing it.

    sources:  plain input files; their mtimes decide freshness.
    after:    other targets (by output path) that must finish first; also
              freshness inputs.
    always:   skip the mtime check and let the action decide. An action that
              returns False reports "nothing changed".
    tolerant: run even when an upstream target failed.
    preview:  dry-run description of what the action would do.
    """
    output: Path
    action: Callable[[], Any]
    sources: Tuple[Path, ...] = ()
    after: Tuple[Path, ...] = ()
    always: bool = False
    tolerant: bool = False
    label: str = ""
    preview: Optional[Callable[[], str]] = None

@dataclass
class GraphResult:
    built: List[Path] = field(default_factory=list)
    fresh: List[Path] = field(default_factory=list)
    failed: Dict[Path, BaseException] = field(default_factory=dict)
    blocked: List[Path] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.blocked

class Graph:
    def __init__(self) -> None:
        self._targets: Dict[Path, Target] = {}
        self.result = GraphResult()  # progress of the current (or last) run

    def add(self, target: Target) -> Target:
        if target.output in self._targets:
            raise ValueError(f"Two producers for {target.output}")
        self._targets[target.output] = target
        return target

    @property
    def targets(self) -> List[Target]:
        return list(self._targets.values())

    def is_stale(self, t: Target, *, force: bool = False, built: Iterable[Path] = ()) -> bool:
        if force or t.always:
            return True
        out = mtime(t.output)
        if out is None:
            return True
        built = set(built)
        for dep in t.after:
            if dep in built:
                return True
        for dep in t.sources + t.after:
            m = mtime(dep)
            if m is None or m > out:
                return True
        return False

    def _sorter(self) -> TopologicalSorter:
        for t in self._targets.values():
            for dep in t.after:
                if dep not in self._targets:
                    raise ValueError(f"{t.output} depends on unknown target {dep}")
        ts = TopologicalSorter({p: t.after for p, t in self._targets.items()})
        ts.prepare()  # raises graphlib.CycleError
        return ts

    def run(self, *, jobs: Optional[int] = None, force: bool = False, dry_run: bool = False) -> GraphResult:
        """
        Evaluate every target in dependency order. Independent targets run on a
        thread pool; a target starts only after everything in its `after` set
        has finished. Failures are recorded per target, never raised.
        """
        ts = self._sorter()
        result = self.result = GraphResult()
        broken = set()  # failed or blocked
        workers = jobs or os.cpu_count() or 1

        with ThreadPoolExecutor(max_workers=workers) as ex:
            pending: Dict[Future, Path] = {}

            while ts.is_active():
                for p in ts.get_ready():
                    t = self._targets[p]
                    upstream = [d for d in t.after if d in broken]
                    if upstream and not t.tolerant:
                        log.error(f"blocked: {p} (upstream failed: {upstream[0]})")
                        result.blocked.append(p)
                        broken.add(p)
                        ts.done(p)
                        continue
                    if not self.is_stale(t, force=force, built=result.built):
                        log.debug(f"fresh: {p}")
                        result.fresh.append(p)
                        ts.done(p)
                        continue
                    if dry_run:
                        try:
                            detail = t.preview() if t.preview is not None else ""
                        except Exception as e:
                            log.error(f"failed: {p}: {e}")
                            result.failed[p] = e
                            broken.add(p)
                            ts.done(p)
                            continue
                        log.info(f"[dry-run] would {t.label or 'build'}: {p}" + (f"\n  {detail}" if detail else ""))
                        result.built.append(p)
                        ts.done(p)
                        continue
                    pending[ex.submit(t.action)] = p

                if not pending:
                    continue

                done, _ = wait(pending, return_when=FIRST_COMPLETED)
                for fut in done:
                    p = pending.pop(fut)
                    t = self._targets[p]
                    try:
                        changed = fut.result()
                    except Exception as e:
                        log.error(f"failed: {p}: {e}")
                        result.failed[p] = e
                        broken.add(p)
                    else:
                        if changed is False:
                            log.debug(f"unchanged: {p}")
                            result.fresh.append(p)
                        else:
                            log.info(f"{t.label or 'build'}: {p}")
                            result.built.append(p)
                    ts.done(p)

        return result
