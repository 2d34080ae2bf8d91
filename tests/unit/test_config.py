"""Unit tests for environment configuration"""

import logging
import os
from pathlib import Path

import pytest

from lenny_search import config

BM25_VARS = ("BM25_K1", "BM25_B", "BM25_COVERAGE_BOOST")


@pytest.fixture
def clean_env(monkeypatch):
    for name in BM25_VARS + ("LENNYS_REPO_ROOT", "LENNYS_KNOWLEDGE_PATH", "LOG_LEVEL", "LOG_FILE",
                             "BATCH_SIZE", "MAX_EPISODES"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestLoadEnvironment:
    """Test .env.local / .env precedence"""

    def test_env_local_preferred(self, tmp_path, clean_env):
        clean_env.setenv("LENNY_TEST_SETTING", "process")
        (tmp_path / ".env.local").write_text("LENNY_TEST_SETTING=local\n", encoding="utf-8")
        (tmp_path / ".env").write_text("LENNY_TEST_SETTING=shared\n", encoding="utf-8")

        loaded = config.load_environment(tmp_path)

        assert loaded == tmp_path / ".env.local"
        assert os.environ["LENNY_TEST_SETTING"] == "local"

    def test_env_fallback(self, tmp_path, clean_env):
        clean_env.setenv("LENNY_TEST_SETTING", "process")
        (tmp_path / ".env").write_text("LENNY_TEST_SETTING=shared\n", encoding="utf-8")

        assert config.load_environment(tmp_path) == tmp_path / ".env"
        assert os.environ["LENNY_TEST_SETTING"] == "shared"

    def test_no_env_files(self, tmp_path):
        assert config.load_environment(tmp_path) is None


class TestPaths:

    def test_repo_root_from_env(self, clean_env, tmp_path):
        clean_env.setenv("LENNYS_REPO_ROOT", str(tmp_path))
        assert config.get_repo_root() == tmp_path

    def test_repo_root_default(self, clean_env):
        assert config.get_repo_root() == Path.cwd()

    def test_knowledge_path(self, clean_env):
        assert config.get_knowledge_path() is None
        clean_env.setenv("LENNYS_KNOWLEDGE_PATH", "/data/kb.json")
        assert config.get_knowledge_path() == Path("/data/kb.json")


class TestLogSettings:

    def test_defaults(self, clean_env):
        assert config.get_log_settings() == (config.DEFAULT_LOG_FILE, logging.INFO)

    def test_custom(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "debug")
        clean_env.setenv("LOG_FILE", "/tmp/lenny.log")
        assert config.get_log_settings() == ("/tmp/lenny.log", logging.DEBUG)

    def test_unknown_level_falls_back(self, clean_env):
        clean_env.setenv("LOG_LEVEL", "chatty")
        assert config.get_log_settings()[1] == logging.INFO


class TestScorerFromEnv:
    """Test BM25 parameters from the environment"""

    def test_defaults(self, clean_env):
        scorer = config.create_scorer_from_env()

        assert scorer.k1 == 1.2
        assert scorer.b == 0.75
        assert scorer.coverage_boost == 0.5

    def test_overrides(self, clean_env):
        clean_env.setenv("BM25_K1", "2.0")
        clean_env.setenv("BM25_B", "0")
        clean_env.setenv("BM25_COVERAGE_BOOST", " ")

        scorer = config.create_scorer_from_env()

        assert scorer.k1 == 2.0
        assert scorer.b == 0.0
        assert scorer.coverage_boost == 0.5

    def test_malformed_value_names_variable(self, clean_env):
        clean_env.setenv("BM25_B", "high")
        with pytest.raises(ValueError, match="BM25_B"):
            config.create_scorer_from_env()

    def test_out_of_range_value(self, clean_env):
        clean_env.setenv("BM25_B", "1.5")
        with pytest.raises(ValueError, match="b must be between 0 and 1"):
            config.create_scorer_from_env()


class TestBuildSettings:

    def test_defaults(self, clean_env):
        assert config.get_batch_size() == 3
        assert config.get_max_episodes() is None

    def test_values(self, clean_env):
        clean_env.setenv("BATCH_SIZE", "5")
        clean_env.setenv("MAX_EPISODES", "10")
        assert config.get_batch_size() == 5
        assert config.get_max_episodes() == 10

    @pytest.mark.parametrize("value", ["0", "-3", "three", "1.5"])
    def test_invalid_batch_size(self, clean_env, value):
        clean_env.setenv("BATCH_SIZE", value)
        with pytest.raises(ValueError, match="BATCH_SIZE"):
            config.get_batch_size()
