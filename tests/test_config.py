# SPDX-License-Identifier: MIT
"""Tests for the settings reader."""

import json

import pytest


def write_config(config_dir, data):
    path = config_dir / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestGetSetting:
    def test_missing_file_returns_default(self):
        from kgcli.config import get_setting

        assert get_setting("api.base_url", "fallback") == "fallback"

    def test_dot_notation(self, config_dir):
        from kgcli.config import get_setting

        write_config(config_dir, {"api": {"base_url": "http://notes:9000"}})
        assert get_setting("api.base_url") == "http://notes:9000"
        assert get_setting("api.missing", 3) == 3
        assert get_setting("api.base_url.deeper", "x") == "x"

    def test_invalid_json_returns_default(self, config_dir):
        from kgcli.config import get_setting

        (config_dir / "config.json").write_text("{not json")
        assert get_setting("api.base_url", "d") == "d"

    def test_settings_env_var(self, tmp_path, monkeypatch):
        from kgcli.config import get_config_path, get_setting

        custom = tmp_path / "elsewhere.json"
        custom.write_text(json.dumps({"session": {"check_interval": 60}}))
        monkeypatch.setenv("KG_CLI_SETTINGS", str(custom))
        assert get_config_path() == custom
        assert get_setting("session.check_interval") == 60


class TestTypedSettings:
    @pytest.mark.parametrize("raw,expected", [
        (True, True), ("yes", True), ("1", True), ("false", False), (0, False),
    ])
    def test_bool(self, config_dir, raw, expected):
        from kgcli.config import get_bool_setting

        write_config(config_dir, {"flag": raw})
        assert get_bool_setting("flag") is expected

    def test_int_fallback(self, config_dir):
        from kgcli.config import get_int_setting

        write_config(config_dir, {"n": "12", "bad": "twelve"})
        assert get_int_setting("n") == 12
        assert get_int_setting("bad", 7) == 7


class TestLoadSettings:
    def test_defaults(self):
        from kgcli.config import Settings, load_settings

        assert load_settings() == Settings()

    def test_file_values(self, config_dir):
        from kgcli.config import load_settings

        write_config(config_dir, {
            "api": {"base_url": "http://notes:9000/", "timeout": 10},
            "session": {"check_interval": 120, "warning_threshold": 600},
            "notifications": {"clear_after": 8, "tag_clear_after": 3, "redirect_delay": 2},
        })
        settings = load_settings()
        assert settings.base_url == "http://notes:9000"
        assert settings.timeout == 10
        assert settings.session_check_interval == 120
        assert settings.session_warning_threshold == 600
        assert (settings.clear_after, settings.tag_clear_after, settings.redirect_delay) == (8, 3, 2)

    def test_env_overrides_file(self, config_dir, monkeypatch):
        from kgcli.config import load_settings

        write_config(config_dir, {"api": {"base_url": "http://file", "timeout": 10}})
        monkeypatch.setenv("KG_CLI_API_BASE_URL", "http://env:8080")
        monkeypatch.setenv("KG_CLI_API_TIMEOUT", "5")
        settings = load_settings()
        assert settings.base_url == "http://env:8080"
        assert settings.timeout == 5

    def test_bad_env_timeout_ignored(self, monkeypatch):
        from kgcli.config import DEFAULT_TIMEOUT, load_settings

        monkeypatch.setenv("KG_CLI_API_TIMEOUT", "soon")
        assert load_settings().timeout == DEFAULT_TIMEOUT

    def test_settings_are_frozen(self):
        from dataclasses import FrozenInstanceError

        from kgcli.config import Settings

        with pytest.raises(FrozenInstanceError):
            Settings().timeout = 1
