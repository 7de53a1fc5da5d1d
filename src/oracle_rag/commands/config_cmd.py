# src/oracle_rag/commands/config_cmd.py
"""Config command - display the effective configuration and where it came from."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from oracle_rag.commands.base import ConfigResult, SettingInfo
from oracle_rag.config import (
    DEFAULT_DATA_DIR,
    build_settings,
    find_config_file,
    get_settings_from_env,
    get_settings_from_yaml,
    load_config,
    validate_config,
)
from oracle_rag.exceptions import ConfigurationError
from oracle_rag.providers.litellm.client import DEFAULT_CHAT_MODEL, DEFAULT_EMBEDDING_MODEL
from oracle_rag.settings import SEARCH_PROFILES

DISPLAYED_SETTINGS = [
    "search_method",
    "similarity_threshold",
    "max_results",
    "query_expansion",
    "result_diversification",
    "include_citations",
    "snippet_optimization",
    "max_concurrent_searches",
    "max_strategies",
    "cache_ttl_minutes",
    "conflict_policy",
    "minimum_source_count",
    "max_candidates",
    "quality_floor",
    "confidence_epsilon",
    "num_retries",
]


def _get_setting_source(
    key: str,
    yaml_settings: dict[str, Any],
    env_settings: dict[str, Any],
    profile: str | None,
) -> str:
    """Determine the source of a setting value."""
    if key in env_settings:
        return "env var"
    if key in yaml_settings:
        return "yaml"
    if profile and key in SEARCH_PROFILES.get(profile, {}):
        return f"profile ({profile})"
    return "default"


def config(config_path: str | Path | None = None) -> ConfigResult:
    """Get current configuration settings.

    Args:
        config_path: Override config file path

    Returns:
        ConfigResult with all settings and their sources
    """
    try:
        cli_config = load_config(config_path)
        env_settings = get_settings_from_env()
        yaml_settings = get_settings_from_yaml(cli_config)
        settings = build_settings(cli_config, env_settings)
    except ConfigurationError as e:
        return ConfigResult(success=False, error=str(e))
    except (ValidationError, ValueError) as e:
        return ConfigResult(success=False, error=f"Invalid settings: {e}")

    found_config_path = Path(config_path) if config_path else find_config_file()

    result = ConfigResult(success=True)
    result.config_path = str(found_config_path) if found_config_path else None
    result.warnings = validate_config(cli_config, found_config_path)
    result.provider = cli_config.get("provider", "litellm")
    result.storage = cli_config.get("storage", "local")
    result.data_dir = cli_config.get("data_dir") or DEFAULT_DATA_DIR

    if result.provider == "litellm":
        result.llm_model = (
            cli_config.get("llm_model")
            or os.environ.get("ORACLE_LITELLM_LLM_MODEL")
            or DEFAULT_CHAT_MODEL
        )
        result.embedding_model = (
            cli_config.get("embedding_model")
            or os.environ.get("ORACLE_LITELLM_EMBEDDING_MODEL")
            or DEFAULT_EMBEDDING_MODEL
        )

    profile = env_settings.get("profile") or yaml_settings.get("profile")
    values = settings.model_dump(mode="json")
    for key in DISPLAYED_SETTINGS:
        result.settings.append(
            SettingInfo(
                name=key,
                value=str(values[key]),
                source=_get_setting_source(key, yaml_settings, env_settings, profile),
            )
        )

    return result
