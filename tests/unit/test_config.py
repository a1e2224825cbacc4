from pathlib import Path

import pytest

from site_builder.config import (
    DEFAULT_ASSET_EXTS,
    BuildConfig,
    ConfigError,
    check_templates,
    load_config,
    override,
)

def test_defaults_when_no_config_file(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    cfg = load_config()

    assert cfg.config_file is None
    assert cfg.input_dir == (tmp_path / "site").resolve()
    assert cfg.output_dir == (tmp_path / "web").resolve()
    assert cfg.stylesheet == (tmp_path / "style.css").resolve()
    assert cfg.archive == (tmp_path / "site.tar.gz").resolve()
    assert cfg.document_ext == "md"
    assert cfg.asset_exts == DEFAULT_ASSET_EXTS
    assert cfg.index == "README.html"
    assert cfg.index_exclude == ("index.html",)
    assert cfg.jobs is None

def test_parses_file_relative_to_its_directory(tmp_path: Path) -> None:
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf = conf_dir / "site.yml"
    conf.write_text(
        """
input_dir: ../essays
output_dir: out
stylesheet: null
archive: null
asset_exts: [png, .svg]
index: sitemap.html
index_exclude: [index.html, "drafts/*"]
index_heading: Essays
converter: /opt/pandoc/bin/pandoc
jobs: 3
""",
        encoding="utf-8",
    )

    cfg = load_config(conf)

    assert cfg.config_file == conf.resolve()
    assert cfg.input_dir == (tmp_path / "essays").resolve()
    assert cfg.output_dir == (conf_dir / "out").resolve()
    assert cfg.stylesheet is None
    assert cfg.archive is None
    assert cfg.footer == (conf_dir / "footer.html").resolve()
    assert cfg.asset_exts == ("png", "svg")
    assert cfg.index == "sitemap.html"
    assert cfg.index_path == cfg.output_dir / "sitemap.html"
    assert cfg.index_exclude == ("index.html", "drafts/*")
    assert cfg.index_heading == "Essays"
    assert cfg.converter == "/opt/pandoc/bin/pandoc"
    assert cfg.jobs == 3

def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    conf = tmp_path / "site.yml"
    conf.write_text("", encoding="utf-8")
    cfg = load_config(conf)
    assert cfg.config_file == conf.resolve()
    assert cfg.document_ext == "md"

@pytest.mark.parametrize(
    "body",
    [
        "- just\n- a list\n",
        "unknown_key: 1\n",
        "jobs: 0\n",
        "jobs: many\n",
        "asset_exts: 5\n",
        "document_ext: png\n",
        "input_dir: [a, b]\n",
        "output_dir: {\n",
    ],
)
def test_invalid_config_rejected(tmp_path: Path, body: str) -> None:
    conf = tmp_path / "site.yml"
    conf.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(conf)

def test_explicit_missing_config_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yml")

def test_override_keeps_file_values_for_none(tmp_path: Path) -> None:
    cfg = BuildConfig(input_dir=tmp_path / "in", output_dir=tmp_path / "out", jobs=2)
    cfg2 = override(cfg, output_dir=tmp_path / "other", jobs=None, force=True)
    assert cfg2.output_dir == tmp_path / "other"
    assert cfg2.jobs == 2
    assert cfg2.force is True
    with pytest.raises(ConfigError):
        override(cfg, colour="blue")

def test_check_templates(tmp_path: Path) -> None:
    footer = tmp_path / "footer.html"
    cfg = BuildConfig(input_dir=tmp_path, output_dir=tmp_path / "web", footer=footer)
    with pytest.raises(ConfigError, match="footer"):
        check_templates(cfg)
    footer.write_text("<footer/>", encoding="utf-8")
    check_templates(cfg)

def test_file_without_extension_keys_keeps_defaults(tmp_path: Path) -> None:
    conf = tmp_path / "site.yml"
    conf.write_text("output_dir: out\nindex_heading: Essays\n", encoding="utf-8")

    cfg = load_config(conf)

    assert cfg.document_ext == "md"
    assert cfg.asset_exts == DEFAULT_ASSET_EXTS
    assert cfg.output_dir == (tmp_path / "out").resolve()

def test_document_ext_leading_dot_stripped(tmp_path: Path) -> None:
    conf = tmp_path / "site.yml"
    conf.write_text("document_ext: .markdown\n", encoding="utf-8")
    assert load_config(conf).document_ext == "markdown"
