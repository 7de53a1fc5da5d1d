# src/oracle_rag/config.py
"""Configuration loading utilities for Oracle.

Used by the CLI and by applications that want file/env based setup:
- Finding and loading oracle.yaml config files
- Loading .env files for API keys
- Building Settings from YAML and ORACLE_* environment variables
- Creating Oracle instances from configuration
"""

from __future__ import annotations

import importlib
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, cast

import yaml
from pydantic import ValidationError

from oracle_rag.exceptions import ConfigurationError
from oracle_rag.providers.litellm.client import DEFAULT_CHAT_MODEL, DEFAULT_EMBEDDING_MODEL
from oracle_rag.settings import SEARCH_PROFILES, Settings

if TYPE_CHECKING:
    from oracle_rag.oracle import Oracle

DEFAULT_DATA_DIR = "./oracle_data"
CONFIG_FILES = ["oracle.yaml", "oracle.yml", ".oraclerc"]
ENV_FILE = ".env"


@dataclass
class ConfigError:
    """Error during configuration loading."""

    message: str
    suggestion: str | None = None


def load_env_file(env_path: str | Path = ENV_FILE) -> None:
    """Load environment variables from a .env file if it exists.

    Existing environment variables are never overridden.
    """
    path = Path(env_path)
    if not path.exists():
        return

    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip("'\"")
                if key not in os.environ:
                    os.environ[key] = value


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find a config file in the start directory or its parents."""
    current = start_dir or Path.cwd()
    for _ in range(10):  # Limit search depth
        for config_name in CONFIG_FILES:
            config_path = current / config_name
            if config_path.exists():
                return config_path
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


VALID_ROOT_KEYS = {
    "provider",
    "llm_model",
    "embedding_model",
    "storage",
    "data_dir",
    "collection_name",
    # Custom provider
    "embedder",
    "embedder_kwargs",
    # Settings section
    "settings",
}

VALID_SETTINGS_KEYS = set(Settings.model_fields) | {"profile"}


def validate_config(config: dict[str, Any], config_path: Path | None = None) -> list[str]:
    """Validate config and return warnings about unknown keys.

    Args:
        config: The loaded configuration dictionary
        config_path: Path to config file (for messages)

    Returns:
        List of warning messages (empty if no issues)
    """
    warnings = []

    unknown_root = set(config.keys()) - VALID_ROOT_KEYS
    if unknown_root:
        path_str = str(config_path) if config_path else "config"
        warnings.append(f"Unknown config keys in {path_str}: {', '.join(sorted(unknown_root))}")

    settings = config.get("settings", {})
    if isinstance(settings, dict):
        unknown_settings = set(settings.keys()) - VALID_SETTINGS_KEYS
        if unknown_settings:
            warnings.append(f"Unknown settings keys: {', '.join(sorted(unknown_settings))}")

        profile = settings.get("profile")
        if profile is not None and profile not in SEARCH_PROFILES:
            warnings.append(
                f"Unknown search profile '{profile}'. Available: {', '.join(SEARCH_PROFILES)}"
            )

    return warnings


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """Load configuration from a YAML file.

    Args:
        config_path: Explicit path to config file, or None to search

    Returns:
        Configuration dictionary (empty if no config found)

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    config_path = Path(config_path) if config_path is not None else find_config_file()

    if config_path is None:
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return config


def _safe_int(value: str | None) -> int | None:
    """Parse int from string, returning None on invalid value."""
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _safe_float(value: str | None) -> float | None:
    """Parse float from string, returning None on invalid value."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


_ENV_INTS = {
    "ORACLE_MAX_RESULTS": "max_results",
    "ORACLE_MAX_CONCURRENT_SEARCHES": "max_concurrent_searches",
    "ORACLE_MAX_STRATEGIES": "max_strategies",
    "ORACLE_CACHE_MAX_ENTRIES": "cache_max_entries",
    "ORACLE_MINIMUM_SOURCE_COUNT": "minimum_source_count",
    "ORACLE_MAX_CANDIDATES": "max_candidates",
    "ORACLE_NUM_RETRIES": "num_retries",
}

_ENV_FLOATS = {
    "ORACLE_SIMILARITY_THRESHOLD": "similarity_threshold",
    "ORACLE_SEARCH_TIMEOUT_SECONDS": "search_timeout_seconds",
    "ORACLE_STRATEGY_RELEVANCE_GATE": "strategy_relevance_gate",
    "ORACLE_CACHE_TTL_MINUTES": "cache_ttl_minutes",
    "ORACLE_QUALITY_FLOOR": "quality_floor",
    "ORACLE_CONFIDENCE_EPSILON": "confidence_epsilon",
    "ORACLE_SYNTHESIS_TEMPERATURE": "synthesis_temperature",
}

_ENV_BOOLS = {
    "ORACLE_QUERY_EXPANSION": "query_expansion",
    "ORACLE_RESULT_DIVERSIFICATION": "result_diversification",
    "ORACLE_INCLUDE_CITATIONS": "include_citations",
    "ORACLE_SNIPPET_OPTIMIZATION": "snippet_optimization",
}


def get_settings_from_env() -> dict[str, Any]:
    """Read behavioral settings from ORACLE_* environment variables.

    Returns only values that are explicitly set, so YAML settings are used
    unless overridden. Unparseable numbers are ignored.
    """
    result: dict[str, Any] = {}

    for env_key, field in _ENV_INTS.items():
        if (val := _safe_int(os.environ.get(env_key))) is not None:
            result[field] = val
    for env_key, field in _ENV_FLOATS.items():
        if (fval := _safe_float(os.environ.get(env_key))) is not None:
            result[field] = fval
    for env_key, field in _ENV_BOOLS.items():
        if env_key in os.environ:
            result[field] = _parse_bool(os.environ[env_key])

    if "ORACLE_SEARCH_METHOD" in os.environ:
        result["search_method"] = os.environ["ORACLE_SEARCH_METHOD"]
    if "ORACLE_CONFLICT_POLICY" in os.environ:
        result["conflict_policy"] = os.environ["ORACLE_CONFLICT_POLICY"]
    if "ORACLE_SYNTHESIS_PROMPT" in os.environ:
        result["synthesis_prompt"] = os.environ["ORACLE_SYNTHESIS_PROMPT"] or None
    if "ORACLE_SEARCH_PROFILE" in os.environ:
        result["profile"] = os.environ["ORACLE_SEARCH_PROFILE"] or None

    return result


def get_settings_from_yaml(config: dict[str, Any]) -> dict[str, Any]:
    """Extract known settings from the 'settings:' section of a config."""
    yaml_settings = config.get("settings", {}) or {}
    return {k: v for k, v in yaml_settings.items() if k in VALID_SETTINGS_KEYS}


def build_settings(
    config: dict[str, Any] | None = None,
    env_settings: dict[str, Any] | None = None,
) -> Settings:
    """Build Settings from YAML config and env vars.

    Precedence (highest to lowest):
    1. Environment variables
    2. YAML settings: section
    3. Search profile, if one is named
    4. Settings class defaults
    """
    config = config or {}
    yaml_settings = get_settings_from_yaml(config)
    env_settings = env_settings if env_settings is not None else get_settings_from_env()

    merged = {**yaml_settings, **env_settings}
    profile = merged.pop("profile", None)
    if profile:
        return Settings.with_profile(profile, **merged)
    return Settings(**merged)


def import_class(class_path: str) -> type[Any]:
    """Import a class from a dotted path like 'my_package.module.ClassName'."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return cast(type[Any], getattr(module, class_name))


@dataclass
class OracleConfig:
    """Configuration for creating an Oracle instance."""

    provider: str
    llm_model: str | None
    embedding_model: str | None
    storage: str
    data_dir: str
    settings: Settings
    collection_name: str = "oracle"
    # Custom provider fields
    embedder_class: str | None = None
    embedder_kwargs: dict[str, Any] | None = None


def get_oracle_config(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> OracleConfig | ConfigError:
    """Get configuration for creating an Oracle instance.

    Extracts configuration without creating the instance, so the caller can
    handle errors and missing values.

    Args:
        data_dir: Override data directory
        config_path: Override config file path

    Returns:
        OracleConfig, or ConfigError if invalid
    """
    try:
        config = load_config(config_path)
        settings = build_settings(config, get_settings_from_env())
    except ConfigurationError as e:
        return ConfigError(message=str(e), suggestion="Fix the YAML syntax in your config file")
    except (ValidationError, ValueError) as e:
        return ConfigError(
            message=f"Invalid settings: {e}",
            suggestion="Check the settings: section and ORACLE_* environment variables",
        )

    effective_data_dir = data_dir or config.get("data_dir") or DEFAULT_DATA_DIR
    storage = config.get("storage", "local")
    if storage not in ("local", "memory"):
        return ConfigError(
            message=f"Unknown storage '{storage}'",
            suggestion="Supported storage: local, memory",
        )
    collection_name = config.get("collection_name", "oracle")
    provider = config.get("provider", "litellm")

    if provider == "litellm":
        llm_model = (
            config.get("llm_model")
            or os.environ.get("ORACLE_LITELLM_LLM_MODEL")
            or DEFAULT_CHAT_MODEL
        )
        embedding_model = (
            config.get("embedding_model")
            or os.environ.get("ORACLE_LITELLM_EMBEDDING_MODEL")
            or DEFAULT_EMBEDDING_MODEL
        )
        return OracleConfig(
            provider=provider,
            llm_model=llm_model,
            embedding_model=embedding_model,
            storage=storage,
            data_dir=effective_data_dir,
            settings=settings,
            collection_name=collection_name,
        )

    elif provider == "custom":
        embedder_class = config.get("embedder")
        if not embedder_class:
            return ConfigError(
                message="Custom provider requires an embedder class path.",
                suggestion="Add 'embedder: my_package.MyEmbedder' to oracle.yaml",
            )
        return OracleConfig(
            provider=provider,
            llm_model=None,
            embedding_model=None,
            storage=storage,
            data_dir=effective_data_dir,
            settings=settings,
            collection_name=collection_name,
            embedder_class=embedder_class,
            embedder_kwargs=config.get("embedder_kwargs", {}),
        )

    else:
        return ConfigError(
            message=f"Unknown provider '{provider}'",
            suggestion="Supported providers: litellm, custom",
        )


def create_oracle(config: OracleConfig) -> Oracle:
    """Create an Oracle instance from configuration.

    Raises:
        ImportError: If a custom embedder class cannot be imported
        ValueError: If the configuration is incomplete
    """
    from oracle_rag.configuration import InMemoryStorage, LiteLLMProvider, LocalStorage
    from oracle_rag.oracle import Oracle

    storage: LocalStorage | InMemoryStorage
    if config.storage == "memory":
        storage = InMemoryStorage()
    else:
        storage = LocalStorage(config.data_dir, collection_name=config.collection_name)

    if config.provider == "litellm":
        if not config.llm_model or not config.embedding_model:
            raise ValueError("LiteLLM provider requires llm_model and embedding_model")
        return Oracle(
            provider=LiteLLMProvider(llm=config.llm_model, embedding=config.embedding_model),
            storage=storage,
            settings=config.settings,
        )

    elif config.provider == "custom":
        if not config.embedder_class:
            raise ValueError("Custom provider requires an embedder class path")
        embedder_cls = import_class(config.embedder_class)
        return Oracle(
            embedder=embedder_cls(**(config.embedder_kwargs or {})),
            storage=storage,
            settings=config.settings,
        )

    else:
        raise ValueError(f"Unknown provider: {config.provider}")


def get_oracle(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> Oracle | ConfigError:
    """Create an Oracle instance based on configuration.

    Convenience wrapper around get_oracle_config and create_oracle.
    """
    config = get_oracle_config(data_dir, config_path)
    if isinstance(config, ConfigError):
        return config
    return create_oracle(config)
