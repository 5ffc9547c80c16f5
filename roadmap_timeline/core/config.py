from __future__ import annotations

import os
from dataclasses import dataclass, replace
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from roadmap_timeline.core.validate.validate_features import parse_date


ENV_PROJECT_START = "ROADMAP_TIMELINE_PROJECT_START"
ENV_MIN_OVERLAP_DAYS = "ROADMAP_TIMELINE_MIN_OVERLAP_DAYS"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class TimelineConfig:
    project_start: Optional[date] = None
    min_overlap_days: int = 1
    include_overlaps: bool = True


def load_config_file(path: str | Path) -> TimelineConfig:
    """Load settings from a YAML file.

    Format:
      project_start: 2024-01-01
      min_overlap_days: 1
      include_overlaps: true
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(str(p))
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f"could not read config file {p}: {e}") from e
    if raw is None:
        return TimelineConfig()
    if not isinstance(raw, dict):
        raise ConfigError("config file must be a mapping")

    unknown = set(raw) - {"project_start", "min_overlap_days", "include_overlaps"}
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    cfg = TimelineConfig()
    if raw.get("project_start") is not None:
        cfg = replace(cfg, project_start=_date_value(raw["project_start"], "project_start"))
    if raw.get("min_overlap_days") is not None:
        cfg = replace(cfg, min_overlap_days=_overlap_value(raw["min_overlap_days"]))
    if raw.get("include_overlaps") is not None:
        if not isinstance(raw["include_overlaps"], bool):
            raise ConfigError("include_overlaps must be a boolean")
        cfg = replace(cfg, include_overlaps=raw["include_overlaps"])
    return cfg


def apply_env(cfg: TimelineConfig, env: Mapping[str, str] | None = None) -> TimelineConfig:
    """Environment variables override file values."""
    env = os.environ if env is None else env
    if env.get(ENV_PROJECT_START):
        cfg = replace(cfg, project_start=_date_value(env[ENV_PROJECT_START], ENV_PROJECT_START))
    if env.get(ENV_MIN_OVERLAP_DAYS):
        try:
            days = int(env[ENV_MIN_OVERLAP_DAYS])
        except ValueError as e:
            raise ConfigError(f"{ENV_MIN_OVERLAP_DAYS} must be an integer") from e
        cfg = replace(cfg, min_overlap_days=_overlap_value(days))
    return cfg


def load_config(config_file: str | None, env: Mapping[str, str] | None = None) -> TimelineConfig:
    cfg = load_config_file(config_file) if config_file else TimelineConfig()
    return apply_env(cfg, env)


def _date_value(v: Any, name: str) -> date:
    d = parse_date(v)
    if d is None:
        raise ConfigError(f"{name} must be a YYYY-MM-DD date")
    return d


def _overlap_value(v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool) or v < 1:
        raise ConfigError("min_overlap_days must be an integer >= 1")
    return v
