"""
Configuration management and loading.

Handles the locations and display settings of the dashboard.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULT_SESSIONS_DIR = "~/.openclaw/agents/main/sessions"
DEFAULT_OUTPUT_PATH = "public/metrics.json"
DEFAULT_SOURCE_LABEL = "openclaw session jsonl usage records"
DEFAULT_LOG_SUFFIX = ".jsonl"
DEFAULT_TOP_MODELS = 20
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class DashboardConfig:
    """Complete dashboard configuration."""
    sessions_dir: Path
    output_path: Path
    source_label: str = DEFAULT_SOURCE_LABEL
    log_suffix: str = DEFAULT_LOG_SUFFIX
    metrics_url: Optional[str] = None
    top_models: int = DEFAULT_TOP_MODELS
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self):
        """Validate numeric settings are positive."""
        if self.top_models <= 0:
            raise ValueError("top_models must be > 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if not self.source_label:
            raise ValueError("source_label cannot be empty")
        if not self.log_suffix:
            raise ValueError("log_suffix cannot be empty")

    @property
    def dashboard_source(self) -> str:
        """Where the dashboard reads the payload from."""
        return self.metrics_url or str(self.output_path)


def default_config() -> DashboardConfig:
    """Configuration used when no file is given."""
    return DashboardConfig(
        sessions_dir=Path(DEFAULT_SESSIONS_DIR).expanduser(),
        output_path=Path(DEFAULT_OUTPUT_PATH),
    )


_STRING_KEYS = ('sessions_dir', 'output_path', 'source_label', 'log_suffix', 'metrics_url')


def load_dashboard_config(path: Optional[str] = None) -> DashboardConfig:
    """Load and validate dashboard configuration from a YAML file.

    Every key is optional and falls back to the defaults. Unknown keys
    are rejected so a typo never silently points the job at the wrong
    directory.

    Args:
        path: Path to YAML configuration file, or None for defaults

    Returns:
        Validated DashboardConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    if path is None:
        return default_config()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Dashboard config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if raw_config is None:
        return default_config()
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration file must contain a mapping")

    allowed_keys = set(_STRING_KEYS) | {'top_models', 'request_timeout'}
    unknown_keys = set(raw_config.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    for key in _STRING_KEYS:
        if key in raw_config and raw_config[key] is not None and not isinstance(raw_config[key], str):
            raise ValueError(f"'{key}' must be a string")

    return DashboardConfig(
        sessions_dir=Path(raw_config.get('sessions_dir') or DEFAULT_SESSIONS_DIR).expanduser(),
        output_path=Path(raw_config.get('output_path') or DEFAULT_OUTPUT_PATH).expanduser(),
        source_label=raw_config.get('source_label', DEFAULT_SOURCE_LABEL),
        log_suffix=raw_config.get('log_suffix', DEFAULT_LOG_SUFFIX),
        metrics_url=raw_config.get('metrics_url'),
        top_models=_parse_positive(raw_config, 'top_models', DEFAULT_TOP_MODELS, int),
        request_timeout=_parse_positive(raw_config, 'request_timeout', DEFAULT_REQUEST_TIMEOUT, float),
    )


def _parse_positive(data: Dict[str, Any], key: str, default, kind):
    """Parse and validate a positive number.

    Args:
        data: Raw configuration data
        key: Key to read
        default: Value used when the key is absent
        kind: int or float

    Returns:
        The validated value converted to ``kind``

    Raises:
        ValueError: If the value is not a positive number of the right kind
    """
    if key not in data:
        return default

    value = data[key]
    allowed = (int,) if kind is int else (int, float)
    if isinstance(value, bool) or not isinstance(value, allowed) or value <= 0:
        raise ValueError(f"'{key}' must be > 0")
    return kind(value)
