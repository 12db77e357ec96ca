"""
Tests for visibility_scorer/config.py.

What we test
------------
load_config():
  - Committed default.toml loads and matches model defaults.
  - Explicit TOML path; missing sections fall back to defaults.
  - local.toml beside the config is deep-merged over it.
  - VISIBILITY_SCORER_* environment overrides win over TOML.
  - Missing file -> FileNotFoundError.
  - Invalid values -> pydantic.ValidationError.

deep_merge():
  - Nested dicts merge; inputs are not mutated.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from visibility_scorer.config import (
    AppConfig,
    RecommendationConfig,
    deep_merge,
    load_config,
)

_ENV_VARS = (
    "VISIBILITY_SCORER_DB_PATH",
    "VISIBILITY_SCORER_LOG_LEVEL",
    "VISIBILITY_SCORER_CONTEXT",
    "VISIBILITY_SCORER_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


# ── load_config ───────────────────────────────────────────────────────────────


class TestLoadConfig:
    def test_default_toml(self):
        config = load_config()
        assert isinstance(config, AppConfig)
        assert config.scoring.default_context == "hybrid"
        assert config.recommendations.high_gap_threshold == 15.0
        assert config.history.max_entries == 100
        assert config.debug is False

    def test_explicit_path_with_partial_sections(self, tmp_path):
        path = _write(
            tmp_path / "app.toml",
            '[scoring]\ndefault_context = "need"\n\n[history]\nmax_entries = 7\n',
        )
        config = load_config(path)
        assert config.scoring.default_context == "need"
        assert config.history.max_entries == 7
        assert config.verification.timeout_seconds == 10.0
        assert config.logging.level == "INFO"

    def test_project_debug_flag(self, tmp_path):
        config = load_config(_write(tmp_path / "app.toml", "[project]\ndebug = true\n"))
        assert config.debug is True

    def test_local_toml_merged(self, tmp_path):
        path = _write(
            tmp_path / "app.toml",
            "[verification]\ntimeout_seconds = 3.0\nmax_workers = 2\n",
        )
        _write(tmp_path / "local.toml", "[verification]\nmax_workers = 8\n")
        config = load_config(path)
        assert config.verification.timeout_seconds == 3.0
        assert config.verification.max_workers == 8

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "app.toml", '[logging]\nlevel = "INFO"\n')
        monkeypatch.setenv("VISIBILITY_SCORER_DB_PATH", str(tmp_path / "h.db"))
        monkeypatch.setenv("VISIBILITY_SCORER_LOG_LEVEL", "debug")
        monkeypatch.setenv("VISIBILITY_SCORER_CONTEXT", "want")
        monkeypatch.setenv("VISIBILITY_SCORER_DEBUG", "yes")

        config = load_config(path)
        assert config.history.db_path == str(tmp_path / "h.db")
        assert config.logging.level == "DEBUG"
        assert config.scoring.default_context == "want"
        assert config.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_log_level(self, tmp_path):
        path = _write(tmp_path / "app.toml", '[logging]\nlevel = "LOUD"\n')
        with pytest.raises(ValidationError):
            load_config(path)

    def test_invalid_thresholds(self, tmp_path):
        path = _write(
            tmp_path / "app.toml",
            "[recommendations]\nhigh_gap_threshold = 2.0\nmedium_gap_threshold = 5.0\n",
        )
        with pytest.raises(ValidationError, match="high_gap_threshold"):
            load_config(path)


# ── Sub-config validation ─────────────────────────────────────────────────────


class TestSubConfigs:
    def test_max_items_must_be_positive(self):
        with pytest.raises(ValidationError):
            RecommendationConfig(max_items=0)

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            RecommendationConfig(medium_gap_threshold=-1.0)

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(ValidationError):
            config.debug = True


# ── deep_merge ────────────────────────────────────────────────────────────────


def test_deep_merge_nested() -> None:
    """Nested keys merge; unrelated keys survive; inputs untouched."""
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    override = {"a": {"y": 3}, "c": 4}
    merged = deep_merge(base, override)
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}
