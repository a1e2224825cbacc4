from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from site_builder.config import ConfigError, load_config, override
from site_builder.logging import get_logger
from site_builder.pipeline.build import build, clean
from site_builder.stages.discover import DiscoveryError

log = get_logger()

COMMANDS = ("build", "clean")

def _path(s):
    return Path(s).expanduser().resolve() if s else None

def _parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="Build config (default: ./site.yml if present)")
    common.add_argument("--output", default=None, help="Output directory (default: web)")
    common.add_argument("--dry-run", action="store_true", help="No writes; report actions")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    p = argparse.ArgumentParser(prog="site-builder")
    sub = p.add_subparsers(dest="cmd", required=True)

    b = sub.add_parser("build", parents=[common], help="Build pages, copy assets, write the site map and archive (default)")
    b.add_argument("--input", default=None, help="Content directory (default: site)")
    b.add_argument("--archive", default=None, help="Archive path (default: site.tar.gz)")
    b.add_argument("--no-archive", action="store_true", help="Do not package the output tree")
    b.add_argument("--jobs", "-j", type=int, default=None, help="Parallel workers (default: CPU count)")
    b.add_argument("--force", action="store_true", help="Rebuild every target regardless of timestamps")

    sub.add_parser("clean", parents=[common], help="Delete the output tree")
    return p

def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in COMMANDS + ("-h", "--help"):
        argv = ["build"] + argv

    args = _parser().parse_args(argv)
    get_logger(verbose=args.verbose)

    try:
        cfg = load_config(_path(args.config))
        cfg = override(
            cfg,
            output_dir=_path(args.output),
            dry_run=bool(args.dry_run) or None,
        )
        if args.cmd == "clean":
            clean(cfg)
            return 0

        if args.jobs is not None and args.jobs < 1:
            raise ConfigError("--jobs must be at least 1")
        cfg = override(
            cfg,
            input_dir=_path(args.input),
            archive=_path(args.archive),
            jobs=args.jobs,
            force=bool(args.force) or None,
        )
        if args.no_archive:
            cfg = replace(cfg, archive=None)
        stats = build(cfg)
    except (ConfigError, DiscoveryError) as e:
        log.error(str(e))
        return 2

    log.info(
        "done: documents=%d assets=%d ignored=%d converted=%d copied=%d skipped=%d failed=%d blocked=%d index=%s archive=%s output=%s",
        stats.documents, stats.assets, stats.ignored, stats.converted, stats.copied,
        stats.skipped, stats.failed, stats.blocked,
        "written" if stats.index_written else "unchanged",
        "written" if stats.archived else "unchanged",
        cfg.output_dir,
    )
    return 0 if stats.ok else 1
