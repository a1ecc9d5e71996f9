"""Configuration models using Pydantic for validation."""
from typing import Any, Dict, Mapping, Optional, Tuple
import os

from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from omb_remote_write.errors import ConfigError
from omb_remote_write.labels import Label, parse_label_pairs

ENV_THANOS_URL = "THANOS_RECEIVER_URL"
ENV_BEARER_TOKEN = "THANOS_BEARER_TOKEN"
ENV_LOG_LEVEL = "LOG_LEVEL"


class WriterConfig(BaseModel):
    """Immutable settings for one upload run."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    thanos_url: str
    results_path: str
    labels: Tuple[Label, ...] = ()
    insecure_skip_verify: bool = False
    bearer_token: Optional[SecretStr] = None
    timeout_s: float = Field(default=1.0, gt=0)
    retries: int = Field(default=0, ge=0)
    log_level: str = "INFO"
    metrics_textfile: Optional[str] = None
    dry_run: bool = False

    @field_validator('thanos_url')
    @classmethod
    def validate_thanos_url(cls, v):
        if not v:
            raise ValueError(f"Thanos URL is required (--thanos or {ENV_THANOS_URL})")
        return v

    @field_validator('results_path')
    @classmethod
    def validate_results_path(cls, v):
        if not v:
            raise ValueError("results file path is required (--results)")
        return v

    @field_validator('labels', mode='before')
    @classmethod
    def parse_labels(cls, v):
        """Accept 'a:b,c:d' strings and {name: value} mappings as well as labels."""
        if v is None:
            return ()
        if isinstance(v, str):
            return tuple(parse_label_pairs(v))
        if isinstance(v, dict):
            return tuple(Label(str(k), str(val)) for k, val in v.items())
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return level

    def token(self) -> Optional[str]:
        """Bearer token in clear text, or None."""
        if self.bearer_token is None:
            return None
        return self.bearer_token.get_secret_value() or None


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Load raw settings from a YAML file."""
    import yaml

    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read configuration file {config_path}: {e}") from e

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return raw_config


def _first_set(*values):
    for value in values:
        if value is not None and value != "":
            return value
    return None


def resolve_config(
    flags: Mapping[str, Any],
    environ: Mapping[str, str] = None,
    file_config: Mapping[str, Any] = None,
) -> WriterConfig:
    """
    Merge command-line flags, environment and config file into one config.

    Precedence for every setting is: non-empty flag, then environment
    variable (where one exists), then config file, then the model default.

    Raises:
        ConfigError: if the merged settings are invalid
        LabelParseError: if a label token is malformed
    """
    environ = os.environ if environ is None else environ
    file_config = dict(file_config or {})

    env_values = {
        "thanos_url": environ.get(ENV_THANOS_URL),
        "bearer_token": environ.get(ENV_BEARER_TOKEN),
        "log_level": environ.get(ENV_LOG_LEVEL),
    }

    merged = {}
    for key in WriterConfig.model_fields:
        value = _first_set(flags.get(key), env_values.get(key), file_config.pop(key, None))
        if value is not None:
            merged[key] = value

    if file_config:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(file_config))}")

    # Required fields default to empty so validators report them clearly.
    merged.setdefault("thanos_url", "")
    merged.setdefault("results_path", "")

    try:
        return WriterConfig(**merged)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e
