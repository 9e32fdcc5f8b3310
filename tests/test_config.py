"""Tests for environment-based settings and logging setup."""

import logging

import pytest

from patent_ranker.config import ScoringSettings, load_settings
from patent_ranker.utils.logger import configure_global_logging


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings({})
        assert settings.api_key is None
        assert not settings.has_credential
        assert settings.model == "gpt-4o"
        assert settings.chunk_size == 2
        assert settings.chunk_pause_seconds == 0.5
        assert settings.rate_limit_retries == 0

    def test_from_env(self):
        settings = load_settings(
            {
                "OPENAI_API_KEY": "sk-test",
                "PATENT_RANKER_MODEL": "gpt-4o-mini",
                "PATENT_RANKER_CHUNK_SIZE": "1",
                "PATENT_RANKER_TEMPERATURE": "0.0",
                "PATENT_RANKER_LOG_LEVEL": "debug",
            }
        )
        assert settings.has_credential
        assert settings.model == "gpt-4o-mini"
        assert settings.chunk_size == 1
        assert settings.temperature == 0.0
        assert settings.log_level == "DEBUG"

    def test_lowercase_log_level_accepted(self):
        assert ScoringSettings(log_level="warning").log_level == "warning"

    def test_blank_key_is_mock_mode(self):
        assert not load_settings({"OPENAI_API_KEY": ""}).has_credential
        assert not ScoringSettings(api_key="   ").has_credential

    @pytest.mark.parametrize(
        "name,value",
        [
            ("CHUNK_SIZE", "two"),
            ("CHUNK_SIZE", "0"),
            ("TEMPERATURE", "5"),
            ("TIMEOUT_SECONDS", "-1"),
            ("MODEL", "not-a-model"),
            ("LOG_LEVEL", "LOUD"),
        ],
    )
    def test_invalid_values(self, name, value):
        with pytest.raises(ValueError):
            load_settings({f"PATENT_RANKER_{name}": value})


class TestWithOverrides:
    def test_none_ignored(self):
        settings = ScoringSettings().with_overrides(chunk_size=None, max_tokens=1000)
        assert settings.chunk_size == 2
        assert settings.max_tokens == 1000


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureGlobalLogging:
    def test_levels(self):
        configure_global_logging("WARNING")
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger("LiteLLM").level == logging.WARNING

    def test_debug_unmutes_third_party(self):
        configure_global_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        configure_global_logging("INFO", log_file=log_file)
        logging.getLogger("patent_ranker.test").debug("written to file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "written to file only" in log_file.read_text()

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            configure_global_logging("LOUD")
