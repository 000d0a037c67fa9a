"""
Tests for section-aware URL list deduplication.
"""

import logging

from core.services.url_list import dedupe_url_list, section_name

SAMPLE = [
    "#===== Ads =====",
    "ads.example.com",
    "tracker.example.com",
    "ads.example.com",
    "",
    "# keep this note",
    "#===== Social =====",
    "social.example.com",
    "  tracker.example.com  ",
    "social.example.com",
]


class TestSectionName:
    """Header text extraction."""

    def test_strips_markers(self):
        assert section_name("#===== Ads & Trackers =====") == "Ads & Trackers"
        assert section_name("#==Bare") == "Bare"


class TestDedupeUrlList:
    """Comments kept, duplicates dropped across sections."""

    def test_output_lines(self):
        result = dedupe_url_list(SAMPLE)
        assert result.lines == [
            "#===== Ads =====",
            "ads.example.com",
            "tracker.example.com",
            "",
            "# keep this note",
            "#===== Social =====",
            "social.example.com",
        ]

    def test_section_stats(self):
        result = dedupe_url_list(SAMPLE)
        assert [(s.name, s.original, s.unique, s.removed) for s in result.sections] == [
            ("Ads", 3, 2, 1),
            ("Social", 3, 1, 2),
        ]
        assert result.duplicates == ["ads.example.com", "tracker.example.com", "social.example.com"]

    def test_totals(self):
        result = dedupe_url_list(SAMPLE)
        assert result.original_total == 6
        assert result.unique_total == 3
        assert result.removed_total == 3
        assert result.reduction_percent == 50.0

    def test_entries_before_first_header_form_a_section(self):
        result = dedupe_url_list(["lead.example.com", "#=== Next", "lead.example.com"])
        assert [(s.name, s.original, s.unique) for s in result.sections] == [("", 1, 1), ("Next", 1, 0)]

    def test_no_duplicates(self):
        result = dedupe_url_list(["a.com", "b.com"])
        assert result.removed_total == 0
        assert result.reduction_percent == 0.0

    def test_empty_input(self):
        result = dedupe_url_list([])
        assert result.lines == []
        assert result.reduction_percent == 0.0

    def test_verbose_logs_duplicates(self, caplog):
        with caplog.at_level(logging.INFO, logger="core.services.url_list"):
            dedupe_url_list(["a.com", "a.com"], verbose=True)
        assert "Removing duplicate: a.com" in caplog.text
