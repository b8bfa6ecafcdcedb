import os
from pathlib import Path
from typing import Optional

import yaml

from gitlog_core.errors import ConfigurationError
from gitlog_core.providers.base import LANGUAGES
from gitlog_core.utils.validation import is_valid_api_key, is_valid_model_id

DEFAULT_CONFIG: dict = {
    "api_key": None,  # None disables analyze-commit and generate-project-summary
    "model_id": None,
    "repository_path": ".",
    "output_directory": "./summaries",
    "max_commits": 100,
    "language": "id",
    "rate_limit_calls": 10,
    "rate_limit_window_ms": 60000,
    "tool_timeout": 120,
}

# Environment variable → config key. Values are strings; integers are coerced
# in validate_config.
ENV_VARS: dict = {
    "OPENROUTER_API_KEY": "api_key",
    "GITLOGMCP_MODEL_ID": "model_id",
    "GITLOGMCP_REPO_PATH": "repository_path",
    "GITLOGMCP_OUTPUT_DIR": "output_directory",
    "GITLOGMCP_MAX_COMMITS": "max_commits",
    "GITLOGMCP_LANGUAGE": "language",
}

_INT_KEYS = ("max_commits", "rate_limit_calls", "rate_limit_window_ms", "tool_timeout")


def load_config(config_path: str = ".gitlogmcp.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .gitlogmcp.yml in the current directory
      3. Environment variables (see ENV_VARS)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(f"{config_path} must contain a mapping of settings.")
        config.update(file_config)

    for env_name, key in ENV_VARS.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def validate_config(config: dict) -> dict:
    """Coerce and check a loaded config. Raises ConfigurationError on bad values.

    A missing API key or model id is valid; it only disables the
    completion-backed tools. A present but malformed one is an error.
    """
    for key in _INT_KEYS:
        try:
            config[key] = int(config[key])
        except (TypeError, ValueError):
            raise ConfigurationError(f"{key} must be an integer, got {config[key]!r}.")
        if config[key] < 1:
            raise ConfigurationError(f"{key} must be positive, got {config[key]}.")

    if config["language"] not in LANGUAGES:
        choices = ", ".join(sorted(LANGUAGES))
        raise ConfigurationError(f"language must be one of: {choices}; got {config['language']!r}.")

    if config.get("api_key") and not is_valid_api_key(config["api_key"]):
        raise ConfigurationError("api_key is malformed; OpenRouter keys start with 'sk-'.")
    if config.get("model_id") and not is_valid_model_id(config["model_id"]):
        raise ConfigurationError(f"model_id {config['model_id']!r} is malformed.")

    return config


def ai_configured(config: dict) -> bool:
    return bool(config.get("api_key") and config.get("model_id"))
