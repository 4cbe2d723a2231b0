"""Tests for core.settings module.

Covers:
- Defaults
- Environment variable override
- .env file loading
- Validation of bounds
"""

import pytest
from pydantic import ValidationError

from megaverse.core.settings import DEFAULT_BASE_URL, MegaverseSettings, clear_settings_cache, get_settings


class TestDefaults:
    def test_defaults(self):
        s = MegaverseSettings()
        assert s.candidate_id == ""
        assert s.base_url == DEFAULT_BASE_URL
        assert s.concurrency == 8
        assert s.dry_run is False
        assert s.retries == 6
        assert s.base_delay_ms == 900
        assert s.goal_retries == 4
        assert s.goal_base_delay_ms == 800
        assert s.attempt_timeout is None
        assert s.log_level == "INFO"
        assert s.log_json is None


class TestEnvOverride:
    def test_candidate_and_concurrency(self, monkeypatch):
        monkeypatch.setenv("CANDIDATE_ID", "abc-123")
        monkeypatch.setenv("CONCURRENCY", "3")
        s = MegaverseSettings()
        assert s.candidate_id == "abc-123"
        assert s.concurrency == 3

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1"])
    def test_dry_run_truthy(self, monkeypatch, raw):
        monkeypatch.setenv("DRY_RUN", raw)
        assert MegaverseSettings().dry_run is True

    def test_base_url_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("BASE_URL", "http://localhost:9000/api/")
        assert MegaverseSettings().base_url == "http://localhost:9000/api"

    def test_only_one_trailing_slash_stripped(self, monkeypatch):
        monkeypatch.setenv("BASE_URL", "http://localhost:9000/api//")
        assert MegaverseSettings().base_url == "http://localhost:9000/api/"

    def test_log_level_uppercased(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert MegaverseSettings().log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("CANDIDATE_ID=from-dotenv\nRETRIES=2\n")
        s = MegaverseSettings()
        assert s.candidate_id == "from-dotenv"
        assert s.retries == 2

    def test_unknown_env_ignored(self, tmp_path):
        (tmp_path / ".env").write_text("SOMETHING_ELSE=1\n")
        MegaverseSettings()


class TestValidation:
    def test_concurrency_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("CONCURRENCY", "0")
        with pytest.raises(ValidationError):
            MegaverseSettings()

    def test_retries_non_negative(self):
        with pytest.raises(ValidationError):
            MegaverseSettings(retries=-1)


class TestCache:
    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache_rereads_env(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CANDIDATE_ID", "changed")
        clear_settings_cache()
        second = get_settings()
        assert second is not first
        assert second.candidate_id == "changed"
