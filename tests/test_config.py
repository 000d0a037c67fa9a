"""
Tests for settings, presets and build configuration resolution.
"""

from pathlib import Path

import pytest

from core.config import AppSettings, validate_timezone_name
from core.domain.formats import ListFormat
from core.domain.models import BuildConfig, FailurePolicy, SourceKind
from core.errors import ConfigurationError
from core.presets import PRESETS, XIAOMI_SPECIFIC_URL, get_preset, resolve_build_config


@pytest.fixture
def settings(monkeypatch, tmp_path):
    """Settings isolated from any `.env` on the developer machine."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return AppSettings(_env_file=None)


class TestAppSettings:
    """Defaults and environment overrides."""

    def test_defaults(self, settings):
        assert settings.http_timeout_seconds == 30.0
        assert settings.fetch_max_retries == 3
        assert settings.timezone == "Asia/Karachi"
        assert settings.output_dir == Path("blocklists")
        assert settings.log_file == Path(".logs") / "blocklist_generation.log"
        assert settings.chunk_size == 1000

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BLOCKLIST_TIMEZONE", "UTC")
        monkeypatch.setenv("BLOCKLIST_FETCH_MAX_RETRIES", "5")
        monkeypatch.setenv("BLOCKLIST_LOG_FILE", "")
        settings = AppSettings(_env_file=None)
        assert settings.timezone == "UTC"
        assert settings.fetch_max_retries == 5
        assert settings.log_file is None

    def test_invalid_timezone(self):
        with pytest.raises(ValueError):
            AppSettings(_env_file=None, timezone="Mars/Olympus")

    def test_log_level_normalized(self):
        assert AppSettings(_env_file=None, log_level="debug").log_level == "DEBUG"

    def test_validate_timezone_name(self):
        assert validate_timezone_name(" Europe/Berlin ") == "Europe/Berlin"
        with pytest.raises(ValueError):
            validate_timezone_name("")


class TestBuildConfig:
    """Per-run configuration rules."""

    def test_formats_parsed_and_deduped(self):
        config = BuildConfig(formats=["adguard", "hosts", "adblock"])
        assert config.formats == (ListFormat.ADBLOCK, ListFormat.HOSTS)

    def test_formats_required(self):
        with pytest.raises(ValueError):
            BuildConfig(formats=())

    def test_output_path(self, tmp_path):
        config = BuildConfig(name="xiaomi", output_dir=tmp_path)
        assert config.output_path(ListFormat.ADBLOCK) == tmp_path / "xiaomi_blocklist_adblock.txt"

    def test_blank_keywords_dropped(self):
        assert BuildConfig(keywords=["xiaomi", " ", "miui"]).keywords == ("xiaomi", "miui")


class TestPresets:
    """Built-in presets and precedence."""

    def test_known_presets(self):
        assert set(PRESETS) == {"personal", "xiaomi", "url-list"}

    def test_unknown_preset(self):
        with pytest.raises(ConfigurationError):
            get_preset("android")

    def test_get_preset_returns_copy(self):
        get_preset("xiaomi")["name"] = "changed"
        assert PRESETS["xiaomi"]["name"] == "xiaomi"

    def test_xiaomi_preset(self, settings):
        config = resolve_build_config(settings, preset="xiaomi")
        assert config.sources[0].location == XIAOMI_SPECIFIC_URL
        assert config.sources[0].apply_keywords is False
        assert all(spec.apply_keywords for spec in config.sources[1:])
        assert config.keywords == ("xiaomi", "miui")
        assert config.on_source_failure is FailurePolicy.SKIP
        assert config.allow_empty is False

    def test_personal_preset(self, settings):
        config = resolve_build_config(settings, preset="personal")
        assert config.sources[0].kind is SourceKind.QUERY_LOG
        assert config.record_filter == {"status": "REQUEST_BLOCKED", "device": "Phone"}
        assert config.formats == (ListFormat.PLAIN, ListFormat.ADBLOCK)
        assert config.allow_empty is True

    def test_precedence(self, settings):
        config = resolve_build_config(
            settings,
            preset="xiaomi",
            overrides={"formats": ["hosts"], "timezone": "UTC", "title": None},
        )
        assert config.formats == (ListFormat.HOSTS,)
        assert config.timezone == "UTC"
        assert config.title == "Xiaomi Ads and Tracking Blocklist"
        assert config.output_dir == settings.output_dir

    def test_invalid_override(self, settings):
        with pytest.raises(ConfigurationError) as excinfo:
            resolve_build_config(settings, overrides={"timezone": "Nowhere/Land"})
        assert "timezone" in str(excinfo.value)
