"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local overrides (gitignored)
  4. Environment variables       : ``VISIBILITY_SCORER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands and collaborators (verifier, history store) receive an
``AppConfig`` instance.  The scoring core itself only ever sees a
``WeightConfig`` and a context; it never reads application config.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class ScoringConfig(BaseModel):
    """Scoring engine settings.

    ``default_context`` is not validated: unrecognised values
    resolve to ``hybrid`` at scoring time.
    """

    model_config = ConfigDict(frozen=True)

    default_context: str = "hybrid"
    weights_file: Optional[str] = None


class RecommendationConfig(BaseModel):
    """Impact tiering and list length for recommendations."""

    model_config = ConfigDict(frozen=True)

    high_gap_threshold: float = 15.0
    medium_gap_threshold: float = 5.0
    max_items: Optional[int] = None

    @field_validator("high_gap_threshold", "medium_gap_threshold")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"Gap thresholds must be non-negative, got {v}.")
        return v

    @field_validator("max_items")
    @classmethod
    def validate_max_items(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError(f"max_items must be >= 1 when set, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "RecommendationConfig":
        if self.high_gap_threshold < self.medium_gap_threshold:
            raise ValueError(
                f"high_gap_threshold ({self.high_gap_threshold}) must be >= "
                f"medium_gap_threshold ({self.medium_gap_threshold})."
            )
        return self


class VerificationConfig(BaseModel):
    """Image format verifier (network probing) settings."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 10.0
    max_image_size_mb: float = 5.0
    user_agent: str = "visibility-scorer/0.1 (+image-format-check)"
    max_workers: int = 4

    @field_validator("timeout_seconds", "max_image_size_mb")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}.")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}.")
        return v


class HistoryConfig(BaseModel):
    """SQLite score history settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/visibility_history.db"
    max_entries: int = 100
    wal_mode: bool = True
    busy_timeout_ms: int = 5000

    @field_validator("max_entries")
    @classmethod
    def validate_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_entries must be >= 1, got {v}.")
        return v


class OutputConfig(BaseModel):
    """Where report files are written."""

    model_config = ConfigDict(frozen=True)

    reports_dir: str = "data/outputs/reports"


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/visibility_scorer.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    scoring: ScoringConfig = ScoringConfig()
    recommendations: RecommendationConfig = RecommendationConfig()
    verification: VerificationConfig = VerificationConfig()
    history: HistoryConfig = HistoryConfig()
    output: OutputConfig = OutputConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing; never overrides real env)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = deep_merge(raw, local_raw)

    # 3. Apply VISIBILITY_SCORER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base`` without mutating either."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply VISIBILITY_SCORER_* env vars to the raw config dict.

    Supported overrides:
      VISIBILITY_SCORER_DB_PATH    → raw["history"]["db_path"]
      VISIBILITY_SCORER_LOG_LEVEL  → raw["logging"]["level"]
      VISIBILITY_SCORER_CONTEXT    → raw["scoring"]["default_context"]
      VISIBILITY_SCORER_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("VISIBILITY_SCORER_DB_PATH"):
        raw.setdefault("history", {})["db_path"] = db_path

    if log_level := os.environ.get("VISIBILITY_SCORER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if context := os.environ.get("VISIBILITY_SCORER_CONTEXT"):
        raw.setdefault("scoring", {})["default_context"] = context

    if debug := os.environ.get("VISIBILITY_SCORER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    # Flatten top-level keys that may be nested under [project]
    project = raw.pop("project", {})

    return AppConfig(
        scoring=ScoringConfig(**raw.get("scoring", {})),
        recommendations=RecommendationConfig(**raw.get("recommendations", {})),
        verification=VerificationConfig(**raw.get("verification", {})),
        history=HistoryConfig(**raw.get("history", {})),
        output=OutputConfig(**raw.get("output", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
