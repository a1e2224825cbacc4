from site_builder.core.sniff import (
    BuildOptions,
    extra_flags,
    extra_flags_argv,
    has_embedded_style,
    has_embedded_title,
    sniff,
)

def test_style_block_detected() -> None:
    text = "Intro\n\n<style>\nbody { color: red; }\n</style>\n"
    assert has_embedded_style(text)
    assert has_embedded_style('  <STYLE type="text/css">\n')

def test_style_absent() -> None:
    assert not has_embedded_style("# Heading\n\nA paragraph about <styles>.\n")
    assert not has_embedded_style("The <style> tag mid-line does not count.\n")
    assert not has_embedded_style("")

def test_title_block_on_first_line() -> None:
    assert has_embedded_title("% Pattern Matching for Java\n% Brian Goetz\n\nText\n")

def test_title_block_only_counts_on_first_line() -> None:
    assert not has_embedded_title("Text\n% not a title\n")

def test_title_tag_anywhere() -> None:
    assert has_embedded_title("<style>\n</style>\n\n<title>Records</title>\n")

def test_yaml_metadata_title() -> None:
    assert has_embedded_title("---\ntitle: Sealed classes\nauthor: x\n---\n\nBody\n")
    assert not has_embedded_title("---\nauthor: x\n...\n\nBody\n")
    assert not has_embedded_title("---\ntitle: [unclosed\n---\nBody\n")

def test_extra_flags_first_match_wins() -> None:
    text = '<meta pandoc-flags="--toc">\n\n<meta pandoc-flags="--number-sections">\n'
    assert extra_flags(text) == "--toc"

def test_extra_flags_unescaped_and_single_quoted() -> None:
    assert extra_flags('<meta pandoc-flags="--metadata=lang:&quot;en&quot;" />') == '--metadata=lang:"en"'
    assert extra_flags("<meta pandoc-flags='--toc --toc-depth=2'>") == "--toc --toc-depth=2"

def test_extra_flags_absent() -> None:
    assert extra_flags("# Title\n\nno directives here\n") == ""

def test_extra_flags_argv_splits_shell_style() -> None:
    assert extra_flags_argv("--toc --metadata 'subtitle=A draft'") == ["--toc", "--metadata", "subtitle=A draft"]
    assert extra_flags_argv("") == []

def test_sniff_matches_individual_derivations() -> None:
    text = '% Title\n<meta pandoc-flags="--toc">\n<style>\n</style>\n'
    assert sniff(text) == BuildOptions(
        has_embedded_style=has_embedded_style(text),
        has_embedded_title=has_embedded_title(text),
        extra_flags=extra_flags(text),
    )
    assert sniff(text) == BuildOptions(True, True, "--toc")

def test_sniff_plain_document() -> None:
    assert sniff("# Guide\n\nSome text.\n") == BuildOptions()
