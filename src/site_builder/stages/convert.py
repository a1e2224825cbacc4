from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List

from site_builder.config import BuildConfig
from site_builder.core.sniff import BuildOptions, extra_flags_argv, sniff
from site_builder.io.fs import discard, read_text_utf8, temp_sibling
from site_builder.logging import get_logger

log = get_logger()


class ConversionError(RuntimeError):
    """The converter exited non-zero (or could not be started)."""

    def __init__(self, source: Path, message: str, diagnostics: str = "") -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
        self.diagnostics = diagnostics


@dataclass(frozen=True)
class Invocation:
    source: Path
    output: Path      # final artifact
    target: Path      # file the converter writes
    argv: List[str]
    options: BuildOptions


def humanize_title(stem: str) -> str:
    t = re.sub(r"[_\-]+", " ", stem or "")
    t = re.sub(r"\s+", " ", t).strip()
    return t or stem


def build_invocation(
    cfg: BuildConfig,
    source: Path,
    output: Path,
    options: BuildOptions,
) -> List[str]:
    """
    pandoc argv for one document. `output` is where pandoc writes, which is a
    temp sibling of the final artifact during a real build.
    """
    argv = [
        cfg.converter,
        "-f", cfg.input_format,
        str(source),
        "-t", "html",
        "-o", str(output),
        "--standalone",
    ]
    if cfg.footer is not None:
        argv += ["-A", str(cfg.footer)]
    if cfg.stylesheet is not None and not options.has_embedded_style:
        argv += ["-H", str(cfg.stylesheet)]
    if not options.has_embedded_title:
        argv += ["--metadata", f"pagetitle={humanize_title(source.stem)}"]
    argv += extra_flags_argv(options.extra_flags)
    return argv


class PandocConverter:
    """Runs the external converter; the output file only appears on success."""

    def convert(self, inv: Invocation) -> None:
        try:
            completed = subprocess.run(
                inv.argv,
                check=False,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise ConversionError(inv.source, f"converter not found: {inv.argv[0]}") from e
        if completed.returncode != 0:
            diagnostics = (completed.stderr or completed.stdout or "").rstrip()
            raise ConversionError(
                inv.source,
                f"converter exited with status {completed.returncode}",
                diagnostics,
            )
        if completed.stderr:
            log.warning(completed.stderr.rstrip())


def render_document(cfg: BuildConfig, source: Path, output: Path, converter) -> Invocation:
    """
    Sniff `source`, run the converter into a temp file and rename it over `output`.
    On failure the previous artifact (if any) is left as it was.
    """
    text = read_text_utf8(source)
    options = sniff(text)

    tmp = temp_sibling(output)
    try:
        inv = Invocation(
            source=source,
            output=output,
            target=tmp,
            argv=build_invocation(cfg, source, tmp, options),
            options=options,
        )
        converter.convert(inv)
        os.replace(tmp, output)
    except BaseException:
        discard(tmp)
        raise
    return inv


def dry_run_invocation(cfg: BuildConfig, source: Path, output: Path) -> Invocation:
    """Invocation that a real build would run, without touching the output tree."""
    options = sniff(read_text_utf8(source))
    return Invocation(
        source=source,
        output=output,
        target=output,
        argv=build_invocation(cfg, source, output, options),
        options=options,
    )
