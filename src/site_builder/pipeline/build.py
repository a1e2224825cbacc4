from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from site_builder.config import BuildConfig, check_templates
from site_builder.io.fs import ensure_dir, remove_tree
from site_builder.logging import get_logger
from site_builder.pipeline.graph import Graph, GraphResult, Target
from site_builder.stages.archive import write_archive
from site_builder.stages.convert import ConversionError, PandocConverter, dry_run_invocation, render_document
from site_builder.stages.copy import copy_asset
from site_builder.stages.discover import Routing, SourceFile, discover
from site_builder.stages.index import index_entries, render_index, write_index

log = get_logger()

@dataclass(frozen=True)
class BuildStats:
    documents: int
    assets: int
    ignored: int
    converted: int
    copied: int
    skipped: int
    failed: int
    blocked: int
    index_written: bool
    archived: bool

    @property
    def ok(self) -> bool:
        return self.failed == 0 and self.blocked == 0

@dataclass
class BuildPlan:
    graph: Graph
    routing: Routing
    documents: Dict[Path, SourceFile] = field(default_factory=dict)  # output path -> source
    assets: Dict[Path, SourceFile] = field(default_factory=dict)
    index: Optional[Path] = None
    archive: Optional[Path] = None

def _document_action(cfg: BuildConfig, src: SourceFile, out: Path, converter):
    def run() -> None:
        try:
            render_document(cfg, src.path, out, converter)
        except ConversionError as e:
            # converter output is passed through untouched
            if e.diagnostics:
                log.error(f"{src.rel}:\n{e.diagnostics}")
            raise
    return run

def _document_preview(cfg: BuildConfig, src: SourceFile, out: Path):
    def preview() -> str:
        return shlex.join(dry_run_invocation(cfg, src.path, out).argv)
    return preview

def _asset_action(src: SourceFile, out: Path):
    def run() -> None:
        copy_asset(src.path, out)
    return run

def _index_action(cfg: BuildConfig, plan: BuildPlan):
    def run() -> bool:
        # runs after every document target; failed documents are left off
        failed = plan.graph.result.failed
        produced = [out for out in plan.documents if out not in failed and out.exists()]
        entries = index_entries(
            (plan.documents[out].output_rel for out in produced),
            index_rel=cfg.index,
            exclude=cfg.index_exclude,
        )
        return write_index(cfg.index_path, render_index(entries, cfg.index_heading))
    return run

def _archive_action(cfg: BuildConfig, archive_path: Path):
    def run() -> None:
        n = write_archive(cfg.output_dir, archive_path)
        log.info(f"archived {n} files into {archive_path}")
    return run

def make_plan(cfg: BuildConfig, converter=None) -> BuildPlan:
    """Discover the input tree and lay out the target graph; nothing is built."""
    converter = converter or PandocConverter()
    routing = discover(
        cfg.input_dir,
        document_ext=cfg.document_ext,
        asset_exts=cfg.asset_exts,
        reserved=[cfg.index],
    )

    plan = BuildPlan(graph=Graph(), routing=routing)
    graph = plan.graph

    # every page also depends on the shared templates and the config file
    shared = tuple(p for p in (cfg.footer, cfg.stylesheet, cfg.config_file) if p is not None)

    for src in routing.documents:
        out = cfg.output_dir / src.output_rel
        graph.add(Target(
            output=out,
            action=_document_action(cfg, src, out, converter),
            sources=(src.path,) + shared,
            label="convert",
            preview=_document_preview(cfg, src, out),
        ))
        plan.documents[out] = src

    for src in routing.assets:
        out = cfg.output_dir / src.output_rel
        graph.add(Target(
            output=out,
            action=_asset_action(src, out),
            sources=(src.path,),
            label="copy",
        ))
        plan.assets[out] = src

    plan.index = cfg.index_path
    graph.add(Target(
        output=plan.index,
        action=_index_action(cfg, plan),
        after=tuple(plan.documents),
        always=True,
        tolerant=True,
        label="index",
    ))

    if cfg.archive is not None:
        plan.archive = cfg.archive
        graph.add(Target(
            output=plan.archive,
            action=_archive_action(cfg, plan.archive),
            after=tuple(t.output for t in graph.targets),
            label="archive",
        ))

    return plan

def _stats(plan: BuildPlan, res: GraphResult) -> BuildStats:
    built = set(res.built)
    return BuildStats(
        documents=len(plan.documents),
        assets=len(plan.assets),
        ignored=len(plan.routing.ignored),
        converted=len(built & set(plan.documents)),
        copied=len(built & set(plan.assets)),
        skipped=len(res.fresh),
        failed=len(res.failed),
        blocked=len(res.blocked),
        index_written=plan.index in built,
        archived=plan.archive is not None and plan.archive in built,
    )

def build(cfg: BuildConfig, converter=None) -> BuildStats:
    """
    One full pass: discover, convert stale documents, copy stale assets,
    refresh the site map and the archive. Raises only for fatal problems
    (configuration, unreadable input tree); per-file failures are counted.
    """
    check_templates(cfg)
    plan = make_plan(cfg, converter)
    if not cfg.dry_run:
        ensure_dir(cfg.output_dir)

    log.info(
        f"planned: documents={len(plan.documents)} assets={len(plan.assets)} "
        f"ignored={len(plan.routing.ignored)} suppressed={len(plan.routing.suppressed)}"
    )
    res = plan.graph.run(jobs=cfg.jobs, force=cfg.force, dry_run=cfg.dry_run)
    return _stats(plan, res)

def clean(cfg: BuildConfig) -> bool:
    """Delete the whole output tree. Returns False if there was nothing to delete."""
    if cfg.dry_run:
        log.info(f"[dry-run] would remove {cfg.output_dir}")
        return cfg.output_dir.exists()
    removed = remove_tree(cfg.output_dir)
    if removed:
        log.info(f"removed {cfg.output_dir}")
    return removed
