# tests/commands/test_config_command.py
"""Tests for the config command."""

import os

import pytest

from oracle_rag.commands import config_cmd
from oracle_rag.commands.config_cmd import DISPLAYED_SETTINGS


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run from an empty directory with no ORACLE_* variables set."""
    for key in list(os.environ):
        if key.startswith("ORACLE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def _by_name(result):
    return {s.name: s for s in result.settings}


class TestConfigCommand:
    """Tests for config_cmd.config()."""

    def test_defaults_without_config_file(self) -> None:
        result = config_cmd.config()

        assert result.success is True
        assert result.config_path is None
        assert result.provider == "litellm"
        assert result.storage == "local"
        assert result.llm_model
        assert result.embedding_model
        assert [s.name for s in result.settings] == DISPLAYED_SETTINGS
        assert {s.source for s in result.settings} == {"default"}

    def test_setting_sources(self, tmp_path, monkeypatch) -> None:
        path = tmp_path / "oracle.yaml"
        path.write_text(
            "storage: memory\n"
            "settings:\n"
            "  profile: focused\n"
            "  max_results: 4\n"
            "  stray_key: 1\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("ORACLE_CONFLICT_POLICY", "flag_both")

        result = config_cmd.config(path)

        assert result.success is True
        assert result.config_path == str(path)
        assert result.storage == "memory"
        settings = _by_name(result)
        assert settings["conflict_policy"].value == "flag_both"
        assert settings["conflict_policy"].source == "env var"
        assert settings["max_results"].value == "4"
        assert settings["max_results"].source == "yaml"
        assert settings["search_method"].value == "semantic"
        assert settings["search_method"].source == "profile (focused)"
        assert settings["num_retries"].source == "default"
        assert any("stray_key" in w for w in result.warnings)

    def test_found_config_file(self, tmp_path) -> None:
        (tmp_path / ".oraclerc").write_text("data_dir: ./corpus\n", encoding="utf-8")

        result = config_cmd.config()

        assert result.success is True
        assert result.config_path.endswith(".oraclerc")
        assert result.data_dir == "./corpus"

    def test_custom_provider_has_no_models(self, tmp_path) -> None:
        path = tmp_path / "oracle.yaml"
        path.write_text("provider: custom\nembedder: my_pkg.Embedder\n", encoding="utf-8")

        result = config_cmd.config(path)

        assert result.provider == "custom"
        assert result.llm_model is None
        assert result.embedding_model is None

    @pytest.mark.parametrize(
        "text,fragment",
        [
            ("settings: [oops\n", "Invalid YAML"),
            ("settings:\n  similarity_threshold: 2\n", "Invalid settings"),
        ],
    )
    def test_invalid_config(self, tmp_path, text, fragment) -> None:
        path = tmp_path / "oracle.yaml"
        path.write_text(text, encoding="utf-8")

        result = config_cmd.config(path)

        assert result.success is False
        assert fragment in result.error
