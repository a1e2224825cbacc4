from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

DEFAULT_CONFIG_FILE = "site.yml"
DEFAULT_ASSET_EXTS = ("html", "jpg", "jpeg", "gif", "svg", "png", "pdf")


class ConfigError(RuntimeError):
    """Raised when the build configuration is unreadable or inconsistent."""


@dataclass(frozen=True)
class BuildConfig:
    input_dir: Path
    output_dir: Path
    stylesheet: Optional[Path] = None
    footer: Optional[Path] = None
    config_file: Optional[Path] = None    # the file itself is a dependency of every page
    archive: Optional[Path] = None
    document_ext: str = "md"
    asset_exts: Tuple[str, ...] = DEFAULT_ASSET_EXTS
    index: str = "README.html"            # output-relative path of the site map
    index_exclude: Tuple[str, ...] = ("index.html",)
    index_heading: str = "Site map:"
    converter: str = "pandoc"
    input_format: str = "markdown"
    jobs: Optional[int] = None            # None => os.cpu_count()
    force: bool = False
    dry_run: bool = False

    @property
    def index_path(self) -> Path:
        return self.output_dir / self.index


# keys accepted in site.yml, with the kind of value each holds
_PATH_KEYS = {"input_dir", "output_dir", "stylesheet", "footer", "archive"}
_STR_KEYS = {"document_ext", "index", "index_heading", "converter", "input_format"}
_LIST_KEYS = {"asset_exts", "index_exclude"}
_INT_KEYS = {"jobs"}

_DEFAULT_PATHS = {
    "input_dir": "site",
    "output_dir": "web",
    "stylesheet": "style.css",
    "footer": "footer.html",
    "archive": "site.tar.gz",
}


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Malformed config {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Malformed config {path}: top-level must be a mapping")
    return data


def _coerce(key: str, value: Any, base: Path) -> Any:
    if key in _PATH_KEYS:
        if value is None:
            return None
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{key}' must be a path string")
        return (base / Path(value).expanduser()).resolve()
    if key in _STR_KEYS:
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"'{key}' must be a non-empty string")
        return value.strip()
    if key in _LIST_KEYS:
        if isinstance(value, str):
            value = value.split()
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(f"'{key}' must be a list of strings")
        return tuple(v.strip().lstrip(".") if key == "asset_exts" else v.strip() for v in value if v.strip())
    if key in _INT_KEYS:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigError(f"'{key}' must be a positive integer")
        return value
    raise ConfigError(f"Unknown config key: '{key}'")


def load_config(path: Optional[Path] = None) -> BuildConfig:
    """
    Load site.yml (or return defaults when it does not exist).
    Relative paths resolve against the directory holding the config file.
    """
    config_file = Path(path or DEFAULT_CONFIG_FILE).expanduser().resolve()
    base = config_file.parent

    data: Dict[str, Any] = {}
    exists = config_file.is_file()
    if exists:
        data = _read_yaml(config_file)
    elif path is not None:
        raise ConfigError(f"Config file not found: {config_file}")

    values: Dict[str, Any] = {k: (base / v).resolve() for k, v in _DEFAULT_PATHS.items()}
    values["document_ext"] = BuildConfig.document_ext
    values["asset_exts"] = DEFAULT_ASSET_EXTS
    for key, value in data.items():
        values[str(key)] = _coerce(str(key), value, base)

    values["document_ext"] = values["document_ext"].lstrip(".")
    if values["document_ext"] in values["asset_exts"]:
        raise ConfigError("document_ext must not also be an asset extension")

    return BuildConfig(config_file=config_file if exists else None, **values)


def override(cfg: BuildConfig, **changes: Any) -> BuildConfig:
    """Apply CLI overrides; None means 'keep the file value'."""
    known = {f.name for f in fields(BuildConfig)}
    kept = {k: v for k, v in changes.items() if v is not None}
    unknown = set(kept) - known
    if unknown:
        raise ConfigError(f"Unknown override(s): {', '.join(sorted(unknown))}")
    return replace(cfg, **kept)


def check_templates(cfg: BuildConfig) -> None:
    """Shared templates must exist before anything is converted."""
    for name in ("stylesheet", "footer"):
        p = getattr(cfg, name)
        if p is not None and not p.is_file():
            raise ConfigError(f"{name} not found: {p}")
