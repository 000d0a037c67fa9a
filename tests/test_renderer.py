"""
Tests for list rendering and atomic writing.
"""

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from adapters.list_renderer import build_header, render_list
from adapters.list_writer import verify_rendered_file, write_rendered_list
from core.domain.formats import ListFormat, get_syntax
from core.domain.models import BuildConfig, ListHeader, RenderedList, SourceSpec
from core.errors import RenderError
from core.services.extraction import extract
from core.services.normalize import normalize
from core.services.validation import validate

FIXED_TIME = datetime(2024, 5, 1, 14, 30, tzinfo=ZoneInfo("Asia/Karachi"))


def _body(text: str, marker: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip() and not line.startswith(marker)]


@pytest.fixture
def header():
    return ListHeader(
        title="Personal Blocklist (Hosts Format)",
        description="Domains blocked based on personal preferences",
        generated_at=FIXED_TIME,
        domain_count=0,
    )


class TestFormats:
    """Per-domain lines and comment markers."""

    def test_lines(self):
        assert get_syntax(ListFormat.HOSTS).render_line("a.com") == "0.0.0.0 a.com"
        assert get_syntax(ListFormat.ADBLOCK).render_line("a.com") == "||a.com^"
        assert get_syntax(ListFormat.PLAIN).render_line("a.com") == "a.com"

    def test_markers(self):
        assert get_syntax(ListFormat.HOSTS).comment_marker == "#"
        assert get_syntax(ListFormat.ADBLOCK).comment_marker == "!"
        assert get_syntax(ListFormat.PLAIN).comment_marker == "#"

    def test_custom_sink_address(self):
        syntax = get_syntax(ListFormat.HOSTS, sink_address="127.0.0.1")
        assert syntax.render_line("a.com") == "127.0.0.1 a.com"
        assert "127.0.0.1 example.com" in syntax.syntax_hint

    def test_parse_aliases(self):
        assert ListFormat.parse("AdGuard") is ListFormat.ADBLOCK
        assert ListFormat.parse("simple") is ListFormat.PLAIN
        with pytest.raises(ValueError):
            ListFormat.parse("dnsmasq")


class TestRenderList:
    """Header and body layout."""

    def test_end_to_end_hosts_scenario(self, header):
        lines = ["# comment", "", "http://foo.bar/x", "FOO.BAR", "||baz.qux^"]
        tokens = [t for t in (extract(line) for line in lines) if t]
        domains = normalize(d for d in (validate(t) for t in tokens) if d)

        rendered = render_list(domains, ListFormat.HOSTS, header)

        assert _body(rendered.text, "#") == ["0.0.0.0 baz.qux", "0.0.0.0 foo.bar"]
        assert "# Number of unique domains: 2" in rendered.text
        assert rendered.domain_count == 2

    def test_header_layout(self, header):
        rendered = render_list(normalize(["a.com"]), ListFormat.HOSTS, header)
        lines = rendered.text.splitlines()
        assert lines[0] == "# Title: Personal Blocklist (Hosts Format)"
        assert lines[1] == "# Description: Domains blocked based on personal preferences"
        assert lines[2] == "# Last updated: 2024-05-01 02:30 PM PKT"
        assert lines[3] == "# Number of unique domains: 1"
        assert "# Hosts file format: 0.0.0.0 example.com" in lines
        assert lines[-2] == ""
        assert lines[-1] == "0.0.0.0 a.com"
        assert rendered.text.endswith("\n")

    def test_adblock_uses_bang_comments(self, header):
        rendered = render_list(normalize(["b.com", "a.com"]), ListFormat.ADBLOCK, header)
        assert all(line.startswith(("!", "||")) for line in rendered.text.splitlines() if line)
        assert _body(rendered.text, "!") == ["||a.com^", "||b.com^"]
        assert "! Blocklist format: ||example.com^" in rendered.text

    def test_adblock_compatibility_note(self, header):
        lines = render_list(normalize(["a.com"]), ListFormat.ADBLOCK, header).text.splitlines()
        note = lines.index("! Compatible with AdGuard Android and AdAway")
        assert lines[note + 1] == "!"
        assert lines[note + 2] == "! Blocklist format: ||example.com^"

    def test_hosts_and_plain_have_no_note(self, header):
        for fmt in (ListFormat.HOSTS, ListFormat.PLAIN):
            assert "Compatible with" not in render_list(normalize(["a.com"]), fmt, header).text

    def test_sources_listed(self, header):
        with_sources = header.model_copy(update={"sources": ["https://a.example/list.txt", "https://b.example/x"]})
        rendered = render_list(normalize(["a.com"]), ListFormat.PLAIN, with_sources)
        assert "# Sources:" in rendered.text
        assert "# - https://a.example/list.txt" in rendered.text
        assert "# - https://b.example/x" in rendered.text

    def test_empty_set_renders_header_only(self, header):
        rendered = render_list(normalize([]), ListFormat.HOSTS, header)
        assert "# Number of unique domains: 0" in rendered.text
        assert _body(rendered.text, "#") == []

    def test_rendering_does_not_mutate_set(self, header):
        domains = normalize(["b.com", "a.com"])
        render_list(domains, ListFormat.HOSTS, header)
        render_list(domains, ListFormat.ADBLOCK, header)
        assert domains.domains == ("a.com", "b.com")


class TestBuildHeader:
    """Header fields derived from the build configuration."""

    def test_title_gets_format_label(self):
        config = BuildConfig(title="Xiaomi Ads and Tracking Blocklist")
        header = build_header(config=config, fmt=ListFormat.ADBLOCK, domain_count=3, generated_at=FIXED_TIME)
        assert header.title == "Xiaomi Ads and Tracking Blocklist (AdGuard/AdAway Format)"
        assert header.domain_count == 3

    def test_sources_only_when_several_remote(self):
        single = BuildConfig(sources=(SourceSpec(location="https://a.example/x"),))
        many = BuildConfig(
            sources=(SourceSpec(location="https://a.example/x"), SourceSpec(location="https://b.example/y"))
        )
        assert build_header(config=single, fmt=ListFormat.HOSTS, domain_count=0).sources == []
        assert len(build_header(config=many, fmt=ListFormat.HOSTS, domain_count=0).sources) == 2


class TestWriter:
    """Atomic replace and verification."""

    def test_write_and_verify(self, tmp_path, header):
        rendered = render_list(normalize(["a.com", "b.com"]), ListFormat.HOSTS, header)
        path = write_rendered_list(rendered, tmp_path / "out" / "list.txt")
        assert path.read_text(encoding="utf-8") == rendered.text
        verify_rendered_file(rendered, path)
        assert [p.name for p in path.parent.iterdir()] == ["list.txt"]

    def test_failed_write_keeps_previous_file(self, tmp_path, header, monkeypatch):
        target = tmp_path / "list.txt"
        target.write_text("old content\n", encoding="utf-8")
        rendered = render_list(normalize(["a.com"]), ListFormat.HOSTS, header)

        def boom(self, other):
            raise OSError(13, "Permission denied")

        monkeypatch.setattr(Path, "replace", boom)
        with pytest.raises(RenderError):
            write_rendered_list(rendered, target)

        assert target.read_text(encoding="utf-8") == "old content\n"
        assert [p.name for p in tmp_path.iterdir()] == ["list.txt"]

    def test_failed_verification_keeps_previous_file(self, tmp_path):
        target = tmp_path / "list.txt"
        target.write_text("# old\n\n0.0.0.0 a.com\n", encoding="utf-8")
        broken = RenderedList(format=ListFormat.HOSTS, text="# new\n\n0.0.0.0 evil\n.com\n", domain_count=1)

        with pytest.raises(RenderError) as excinfo:
            write_rendered_list(broken, target)

        assert str(target) in excinfo.value.message
        assert target.read_text(encoding="utf-8") == "# old\n\n0.0.0.0 a.com\n"
        assert [p.name for p in tmp_path.iterdir()] == ["list.txt"]

    def test_verify_detects_mismatch(self, tmp_path):
        path = tmp_path / "list.txt"
        path.write_text("# header\n\n0.0.0.0 a.com\n", encoding="utf-8")
        rendered = RenderedList(format=ListFormat.HOSTS, text="", domain_count=2)
        with pytest.raises(RenderError):
            verify_rendered_file(rendered, path)
