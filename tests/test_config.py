"""Tests for settings loading and timezone resolution."""
from __future__ import annotations

from datetime import timezone
import logging
import os
from unittest.mock import patch

import pytest

from sheet_utils.config import (
    ConfigError,
    Settings,
    load_settings,
    resolve_timezone,
)


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=True), patch("sheet_utils.config.load_dotenv"):
        yield


class TestLoadSettings:
    def test_missing_spreadsheet_id(self, clean_env):
        with pytest.raises(ConfigError, match="Missing spreadsheet id"):
            load_settings()

    def test_env_values(self, clean_env):
        os.environ.update({
            "SHEET_UTILS_SPREADSHEET_ID": " abc123 ",
            "SHEET_UTILS_SHEET_NAME": "People",
            "SHEET_UTILS_TIMEZONE": "Europe/Berlin",
            "SHEET_UTILS_CLIENT_ID": "id",
            "SHEET_UTILS_CLIENT_SECRET": "secret",
            "SHEET_UTILS_REFRESH_TOKEN": "token",
        })

        settings = load_settings()

        assert settings.spreadsheet_id == "abc123"
        assert settings.sheet_name == "People"
        assert settings.timezone == "Europe/Berlin"
        assert settings.highlight_color == "#fff59d"
        assert settings.clear_color == "white"
        assert settings.has_credentials

    def test_yaml_file_with_env_override(self, clean_env, tmp_path):
        config_file = tmp_path / "sheet_utils.yml"
        config_file.write_text(
            "spreadsheet_id: from-file\n"
            "sheet_name: Tasks\n"
            "highlight_color: '#ffcc00'\n",
            encoding="utf-8",
        )
        os.environ["SHEET_UTILS_SHEET_NAME"] = "Override"

        settings = load_settings(config_path=config_file)

        assert settings.spreadsheet_id == "from-file"
        assert settings.sheet_name == "Override"
        assert settings.highlight_color == "#ffcc00"
        assert not settings.has_credentials

    def test_config_path_from_env(self, clean_env, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text("spreadsheet_id: xyz\n", encoding="utf-8")
        os.environ["SHEET_UTILS_CONFIG"] = str(config_file)

        assert load_settings().spreadsheet_id == "xyz"

    def test_missing_config_file(self, clean_env, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(config_path=tmp_path / "nope.yml")

    def test_config_file_must_be_mapping(self, clean_env, tmp_path):
        config_file = tmp_path / "list.yml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(config_path=config_file)


class TestResolveTimezone:
    def test_default_is_utc(self):
        assert resolve_timezone(None) is timezone.utc
        assert resolve_timezone("UTC") is timezone.utc

    def test_named_zone(self):
        assert str(resolve_timezone("Asia/Tokyo")) == "Asia/Tokyo"

    def test_unknown_zone_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert resolve_timezone("Mars/Olympus_Mons") is timezone.utc
        assert "Unknown timezone" in caplog.text


def test_settings_defaults():
    settings = Settings(spreadsheet_id="abc")
    assert settings.sheet_name == "Sheet1"
    assert settings.timezone is None
    assert settings.environment == "local"
