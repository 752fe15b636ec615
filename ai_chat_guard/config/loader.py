"""
Configuration management and loading.

Handles assistant settings from YAML files and environment variables.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ..core.model_policy import ModelPolicy, policy_from_name

MODEL_POLICIES = ("fixed", "weighted")
TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AssistantConfig:
    """Settings consumed by the assistant factory."""
    api_key: Optional[str] = None
    site_name: str = "My Chat App"
    force_local: bool = False
    model: Optional[str] = None
    model_policy: str = "fixed"
    timeout_seconds: float = 90.0
    max_retries: int = 2
    backoff_base_seconds: float = 1.0
    fallback_to_local: bool = False

    def __post_init__(self):
        """Validate numeric limits and the policy name."""
        if self.model_policy not in MODEL_POLICIES:
            raise ValueError(f"model_policy must be one of: {list(MODEL_POLICIES)}")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.backoff_base_seconds < 0:
            raise ValueError("backoff_base_seconds must be >= 0")

    def __repr__(self) -> str:
        masked = "***" if self.api_key else None
        return (
            f"AssistantConfig(api_key={masked!r}, site_name={self.site_name!r}, "
            f"force_local={self.force_local}, model={self.model!r}, "
            f"model_policy={self.model_policy!r})"
        )


def build_model_policy(config: AssistantConfig) -> ModelPolicy:
    """Turn the configured policy name into a ModelPolicy."""
    return policy_from_name(config.model_policy)


def load_assistant_config(path: str) -> AssistantConfig:
    """Load and validate assistant configuration from a YAML file.

    The file must contain a single top-level ``assistant`` section.
    Unknown keys are rejected so typos never silently fall back to defaults.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated AssistantConfig

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Assistant config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a mapping")

    unknown_keys = set(raw_config.keys()) - {'assistant'}
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    data = raw_config['assistant']
    if not isinstance(data, dict):
        raise ValueError("'assistant' must be a dictionary")

    return _parse_assistant_config(data)


def _parse_assistant_config(data: Dict[str, Any]) -> AssistantConfig:
    """Parse and type-check the assistant section."""
    allowed_keys = set(AssistantConfig.__dataclass_fields__)
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in assistant: {unknown_keys}")

    for key in ('api_key', 'model'):
        if key in data and data[key] is not None and not isinstance(data[key], str):
            raise ValueError(f"'{key}' in assistant must be a string")

    for key in ('site_name', 'model_policy'):
        if key in data and not isinstance(data[key], str):
            raise ValueError(f"'{key}' in assistant must be a string")

    for key in ('force_local', 'fallback_to_local'):
        if key in data and not isinstance(data[key], bool):
            raise ValueError(f"'{key}' in assistant must be true or false")

    for key in ('timeout_seconds', 'backoff_base_seconds'):
        if key in data and (isinstance(data[key], bool) or not isinstance(data[key], (int, float))):
            raise ValueError(f"'{key}' in assistant must be a number")

    if 'max_retries' in data and (isinstance(data['max_retries'], bool) or not isinstance(data['max_retries'], int)):
        raise ValueError("'max_retries' in assistant must be an integer")

    values = dict(data)
    if 'model_policy' in values:
        values['model_policy'] = values['model_policy'].lower()
    for key in ('timeout_seconds', 'backoff_base_seconds'):
        if key in values:
            values[key] = float(values[key])

    return AssistantConfig(**values)


def config_from_env(environ: Optional[Mapping[str, str]] = None, base: Optional[AssistantConfig] = None) -> AssistantConfig:
    """Overlay environment variables on a configuration.

    Recognised variables: OPENROUTER_API_KEY, SITE_NAME, USE_MOCK_ASSISTANT,
    OPENROUTER_MODEL, ASSISTANT_MODEL_POLICY.

    Args:
        environ: Environment mapping (defaults to os.environ)
        base: Configuration to overlay (defaults to AssistantConfig())

    Returns:
        New AssistantConfig with environment values applied
    """
    env = os.environ if environ is None else environ
    config = base or AssistantConfig()
    overrides: Dict[str, Any] = {}

    if env.get("OPENROUTER_API_KEY") and not config.api_key:
        overrides["api_key"] = env["OPENROUTER_API_KEY"]
    if env.get("SITE_NAME"):
        overrides["site_name"] = env["SITE_NAME"]
    if env.get("USE_MOCK_ASSISTANT"):
        overrides["force_local"] = env["USE_MOCK_ASSISTANT"].strip().lower() in TRUTHY
    if env.get("OPENROUTER_MODEL"):
        overrides["model"] = env["OPENROUTER_MODEL"]
    if env.get("ASSISTANT_MODEL_POLICY"):
        overrides["model_policy"] = env["ASSISTANT_MODEL_POLICY"].strip().lower()

    return replace(config, **overrides)
