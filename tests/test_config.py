# tests/test_config.py
"""Tests for YAML and environment configuration loading."""

import os

import pytest

from oracle_rag.config import (
    ConfigError,
    OracleConfig,
    build_settings,
    create_oracle,
    find_config_file,
    get_oracle_config,
    get_settings_from_env,
    load_config,
    load_env_file,
    validate_config,
)
from oracle_rag.embedder import ClientEmbedder, Embedder
from oracle_rag.exceptions import ConfigurationError
from oracle_rag.stores import InMemoryPassageStore


class ConstantEmbedder(Embedder):
    def __init__(self, dims: int = 4) -> None:
        self.dims = dims

    def embed_text(self, text: str) -> list[float]:
        return [1.0] * self.dims

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_text(t) for t in texts]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ORACLE_"):
            monkeypatch.delenv(key)


def _write(path, text: str):
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_loads_mapping(self, tmp_path):
        path = _write(tmp_path / "oracle.yaml", "storage: memory\nsettings:\n  max_results: 4\n")
        assert load_config(path) == {"storage": "memory", "settings": {"max_results": 4}}

    def test_empty_file_is_empty_config(self, tmp_path):
        assert load_config(_write(tmp_path / "oracle.yaml", "")) == {}

    def test_invalid_yaml(self, tmp_path):
        path = _write(tmp_path / "oracle.yaml", "settings: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_mapping(self, tmp_path):
        path = _write(tmp_path / "oracle.yaml", "- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_find_config_in_parent(self, tmp_path):
        config = _write(tmp_path / ".oraclerc", "storage: memory\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == config

    def test_yaml_preferred_over_rc(self, tmp_path):
        _write(tmp_path / ".oraclerc", "")
        yaml_path = _write(tmp_path / "oracle.yaml", "")
        assert find_config_file(tmp_path) == yaml_path


class TestValidateConfig:
    def test_clean_config(self):
        assert validate_config({"storage": "local", "settings": {"max_results": 3}}) == []

    def test_unknown_keys(self):
        warnings = validate_config({"stroage": "local", "settings": {"max_resluts": 3}})
        assert len(warnings) == 2
        assert "stroage" in warnings[0]
        assert "max_resluts" in warnings[1]

    def test_unknown_profile(self):
        (warning,) = validate_config({"settings": {"profile": "thorough"}})
        assert "Unknown search profile 'thorough'" in warning


class TestEnvSettings:
    def test_reads_typed_values(self, monkeypatch):
        monkeypatch.setenv("ORACLE_MAX_RESULTS", "12")
        monkeypatch.setenv("ORACLE_SIMILARITY_THRESHOLD", "0.55")
        monkeypatch.setenv("ORACLE_QUERY_EXPANSION", "false")
        monkeypatch.setenv("ORACLE_SEARCH_METHOD", "hybrid")
        monkeypatch.setenv("ORACLE_CONFLICT_POLICY", "flag_both")
        assert get_settings_from_env() == {
            "max_results": 12,
            "similarity_threshold": 0.55,
            "query_expansion": False,
            "search_method": "hybrid",
            "conflict_policy": "flag_both",
        }

    def test_unparseable_numbers_ignored(self, monkeypatch):
        monkeypatch.setenv("ORACLE_MAX_RESULTS", "lots")
        assert get_settings_from_env() == {}

    def test_load_env_file_does_not_override(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "environ", {"ORACLE_MAX_RESULTS": "7"})
        env_file = _write(
            tmp_path / ".env",
            "# comment\nORACLE_MAX_RESULTS=99\nORACLE_SEARCH_METHOD='semantic'\n",
        )
        load_env_file(env_file)
        assert os.environ["ORACLE_MAX_RESULTS"] == "7"
        assert os.environ["ORACLE_SEARCH_METHOD"] == "semantic"


class TestBuildSettings:
    def test_defaults(self):
        settings = build_settings({}, {})
        assert settings.search_method == "adaptive"
        assert settings.max_results == 8

    def test_precedence(self):
        config = {"settings": {"profile": "focused", "similarity_threshold": 0.75}}
        settings = build_settings(config, {"max_results": 20})
        assert settings.search_method == "semantic"  # profile
        assert settings.similarity_threshold == 0.75  # yaml over profile
        assert settings.max_results == 20  # env over everything

    def test_env_profile(self):
        settings = build_settings({}, {"profile": "exploratory"})
        assert settings.search_method == "hybrid"
        assert settings.max_results == 10

    def test_unknown_profile_raises(self):
        with pytest.raises(ValueError):
            build_settings({"settings": {"profile": "thorough"}}, {})


class TestOracleConfig:
    def test_litellm_defaults(self, tmp_path):
        config = get_oracle_config(config_path=_write(tmp_path / "oracle.yaml", "{}\n"))
        assert isinstance(config, OracleConfig)
        assert config.provider == "litellm"
        assert config.storage == "local"
        assert config.data_dir == "./oracle_data"
        assert config.embedding_model

    def test_env_model_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ORACLE_LITELLM_EMBEDDING_MODEL", "openai/text-embedding-3-large")
        config = get_oracle_config(config_path=_write(tmp_path / "oracle.yaml", "{}\n"))
        assert config.embedding_model == "openai/text-embedding-3-large"

    def test_data_dir_argument_wins(self, tmp_path):
        path = _write(tmp_path / "oracle.yaml", "data_dir: ./from_yaml\n")
        assert get_oracle_config(data_dir="./explicit", config_path=path).data_dir == "./explicit"

    @pytest.mark.parametrize(
        "text,fragment",
        [
            ("storage: s3\n", "Unknown storage 's3'"),
            ("provider: bedrock\n", "Unknown provider 'bedrock'"),
            ("provider: custom\n", "requires an embedder class path"),
            ("settings:\n  max_results: 0\n", "Invalid settings"),
            ("settings: [oops\n", "Invalid YAML"),
        ],
    )
    def test_errors(self, tmp_path, text, fragment):
        result = get_oracle_config(config_path=_write(tmp_path / "oracle.yaml", text))
        assert isinstance(result, ConfigError)
        assert fragment in result.message
        assert result.suggestion


class TestCreateOracle:
    def test_custom_embedder_in_memory(self, tmp_path):
        path = _write(
            tmp_path / "oracle.yaml",
            f"provider: custom\nstorage: memory\nembedder: {__name__}.ConstantEmbedder\n"
            "embedder_kwargs:\n  dims: 3\n",
        )
        oracle = create_oracle(get_oracle_config(config_path=path))
        try:
            assert isinstance(oracle.store, InMemoryPassageStore)
            assert isinstance(oracle.embedder, ConstantEmbedder)
            assert oracle.embedder.dims == 3
        finally:
            oracle.close()

    def test_litellm_in_memory(self, tmp_path):
        path = _write(tmp_path / "oracle.yaml", "storage: memory\nsettings:\n  num_retries: 5\n")
        oracle = create_oracle(get_oracle_config(config_path=path))
        try:
            assert isinstance(oracle.embedder, ClientEmbedder)
            assert oracle.settings.num_retries == 5
        finally:
            oracle.close()
