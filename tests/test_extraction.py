"""
Tests for token extraction.
"""

import pytest

from core.services.extraction import (
    DEFAULT_STEPS,
    TokenExtractor,
    build_steps,
    extract,
    project_record,
    skip_comment,
    strip_adblock,
    strip_hosts_address,
    strip_path,
    strip_port,
    strip_scheme,
)


class TestSteps:
    """Each cleanup step in isolation."""

    @pytest.mark.parametrize("line", ["# comment", "   # indented", "! adblock comment", "", "   ", "-----", " - - "])
    def test_skip_comment_drops_non_entries(self, line):
        assert skip_comment(line) is None

    def test_skip_comment_keeps_entries(self):
        assert skip_comment("  example.com  ") == "example.com"

    def test_strip_scheme(self):
        assert strip_scheme("https://ads.example.com/x") == "ads.example.com/x"
        assert strip_scheme("ads.example.com") == "ads.example.com"

    def test_strip_path_query_fragment(self):
        assert strip_path("example.com/a/b") == "example.com"
        assert strip_path("example.com?x=1") == "example.com"
        assert strip_path("example.com#top") == "example.com"

    def test_strip_port(self):
        assert strip_port("example.com:8443") == "example.com"
        assert strip_port("example.com") == "example.com"

    def test_strip_adblock(self):
        assert strip_adblock("||tracker.net^") == "tracker.net"
        assert strip_adblock("tracker.net") == "tracker.net"

    def test_strip_hosts_address(self):
        assert strip_hosts_address("0.0.0.0 ads.example.com") == "ads.example.com"
        assert strip_hosts_address("127.0.0.1\tads.example.com  # note") == "ads.example.com"
        assert strip_hosts_address("ads.example.com") == "ads.example.com"

    def test_strip_hosts_address_any_ip_literal(self):
        assert strip_hosts_address("10.0.0.1 ads.example.com") == "ads.example.com"
        assert strip_hosts_address("fe80::2 ads.example.com") == "ads.example.com"

    def test_strip_hosts_address_custom_sink(self):
        assert strip_hosts_address("blackhole ads.example.com", {"blackhole"}) == "ads.example.com"
        assert strip_hosts_address("blackhole ads.example.com") == "blackhole ads.example.com"

    @pytest.mark.parametrize(
        "line",
        [
            "127.0.0.1 localhost",
            "127.0.0.1 localhost.localdomain",
            "::1 ip6-localhost",
            "255.255.255.255 broadcasthost",
            "0.0.0.0 0.0.0.0",
            "0.0.0.0 # disabled",
        ],
    )
    def test_hosts_placeholders_dropped(self, line):
        assert strip_hosts_address(line) is None
        assert extract(line) is None

    def test_steps_are_idempotent(self):
        for step, value in [
            (strip_scheme, "example.com"),
            (strip_path, "example.com"),
            (strip_port, "example.com"),
            (strip_adblock, "example.com"),
        ]:
            assert step(step(value)) == step(value)


class TestExtract:
    """The full chain."""

    def test_full_url(self):
        assert extract("https://ads.example.com:8443/track?x=1") == "ads.example.com"

    def test_adblock_rule(self):
        assert extract("||tracker.net^") == "tracker.net"

    def test_hosts_line(self):
        assert extract("0.0.0.0 baz.qux") == "baz.qux"

    def test_plain_domain_keeps_case(self):
        assert extract("FOO.BAR") == "FOO.BAR"

    def test_comment_and_blank(self):
        assert extract("# Title: something") is None
        assert extract("") is None

    def test_only_markup_yields_none(self):
        assert extract("||^") is None
        assert extract("https:///path") is None


class TestBuildSteps:
    """Chain configured for a custom hosts sink address."""

    def test_default_address_keeps_default_chain(self):
        assert build_steps() is DEFAULT_STEPS
        assert build_steps("0.0.0.0") is DEFAULT_STEPS

    def test_custom_address_is_stripped(self):
        extractor = TokenExtractor(steps=build_steps("blackhole"))
        assert extractor.extract("blackhole ads.example.com") == "ads.example.com"
        assert extractor.extract("blackhole blackhole") is None


class TestStructuredRecords:
    """Projection of query-log records."""

    @pytest.fixture
    def extractor(self):
        return TokenExtractor(predicate={"status": "REQUEST_BLOCKED", "device": "Phone"})

    def test_matching_record(self, extractor):
        record = {"status": "REQUEST_BLOCKED", "device": "Phone", "domain": "ads.example.com"}
        assert extractor.extract(record) == "ads.example.com"

    def test_non_matching_record(self, extractor):
        assert extractor.extract({"status": "REQUEST_ALLOWED", "device": "Phone", "domain": "a.com"}) is None
        assert extractor.extract({"status": "REQUEST_BLOCKED", "device": "Laptop", "domain": "a.com"}) is None

    def test_missing_domain_field(self, extractor):
        assert extractor.extract({"status": "REQUEST_BLOCKED", "device": "Phone"}) is None

    def test_domain_field_is_cleaned(self, extractor):
        record = {"status": "REQUEST_BLOCKED", "device": "Phone", "domain": "https://ads.example.com/x"}
        assert extractor.extract(record) == "ads.example.com"

    def test_project_record_custom_field(self):
        assert project_record({"qname": "a.com"}, predicate={}, domain_field="qname") == "a.com"
