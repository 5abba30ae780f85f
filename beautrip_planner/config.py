"""
Configuration for the ``beautrip`` CLI.

Sources, later ones winning:

  1. ``config/default.toml``  committed defaults
  2. ``config/local.toml``    per-machine overrides next to the file in use (gitignored)
  3. ``.env``                 loaded into the environment, never overriding it
  4. ``BEAUTRIP_*``           environment variables, see ``_ENV_OVERRIDES``

``load_config()`` returns a frozen ``AppConfig``.  Only the CLI calls it: the
ranking and schedule packages take plain arguments, and ranking constants
reach them as a ``RankingWeights`` built by ``RankingConfig.to_weights()``.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import fields
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

from beautrip_planner.ranking.scorer import RankingWeights

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_GROUP_LEVELS = ("large", "mid", "small")


class _Section(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class DatabaseConfig(_Section):
    """Where the per-user planner data (schedule, trip, favorites) lives."""

    db_path: str = "data/db/beautrip.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DataConfig(_Section):
    treatments_file: str = "data/raw/treatments.json"
    output_dir: str = "data/outputs/rankings"


class ApiConfig(_Section):
    """Hosted treatment catalogue used by ``--remote``."""

    treatments_url: str = (
        "https://raw.githubusercontent.com/watermin-hub/1205_api_practice/"
        "main/beautrip_treatments_sample_2000.json"
    )
    timeout_seconds: float = 10.0


class RankingConfig(_Section):
    """Ranking constants plus the category level used for grouping.

    Every field except ``group_level`` maps one-to-one onto ``RankingWeights``.
    """

    prior_weight: float = 20.0
    dedupe_limit_per_name: int = 2
    group_level: str = "mid"
    item_rating_weight: float = 0.6
    item_popularity_weight: float = 0.4
    group_rating_weight: float = 0.4
    group_review_weight: float = 0.3
    group_count_weight: float = 0.3
    review_penalty_threshold: int = 5
    count_penalty_threshold: int = 3
    count_penalty_exponent: float = 1.5
    count_score_exponent: float = 0.7

    @field_validator("prior_weight")
    @classmethod
    def _non_negative_prior(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"prior_weight cannot be negative (got {v}).")
        return v

    @field_validator("group_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        if v not in _GROUP_LEVELS:
            raise ValueError(f"group_level '{v}' is not one of {', '.join(_GROUP_LEVELS)}.")
        return v

    def to_weights(self) -> RankingWeights:
        names = {f.name for f in fields(RankingWeights)}
        return RankingWeights(**self.model_dump(include=names))


class ScheduleConfig(_Section):
    default_user: str = "local"
    max_recommendations_per_group: int = 10


class LoggingConfig(_Section):
    level: str = "INFO"
    log_file: str = "data/logs/beautrip.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def _known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Unknown log level '{v}'; use one of {', '.join(_LOG_LEVELS)}.")
        return level


class AppConfig(_Section):
    """Everything the CLI needs, one attribute per TOML table."""

    database: DatabaseConfig = DatabaseConfig()
    data: DataConfig = DataConfig()
    api: ApiConfig = ApiConfig()
    ranking: RankingConfig = RankingConfig()
    schedule: ScheduleConfig = ScheduleConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loading ───────────────────────────────────────────────────────────────────

def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# env var -> (table or None for top level, key, converter)
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "BEAUTRIP_DB_PATH":   ("database", "db_path", str),
    "BEAUTRIP_LOG_LEVEL": ("logging", "level", str),
    "BEAUTRIP_API_URL":   ("api", "treatments_url", str),
    "BEAUTRIP_USER":      ("schedule", "default_user", str),
    "BEAUTRIP_DEBUG":     (None, "debug", _truthy),
}


def _project_root() -> Path:
    """Nearest ancestor of this package that holds ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``base`` with ``override`` laid over it, table by table."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _env_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for var, (table, key, convert) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        target = layer if table is None else layer.setdefault(table, {})
        target[key] = convert(value)
    return layer


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Read, merge and validate configuration.

    Args:
        config_path: TOML file to start from; ``config/default.toml`` under
            the project root when omitted.

    Raises:
        FileNotFoundError: ``config_path`` does not exist.
        pydantic.ValidationError: A merged value is out of range.
    """
    root = _project_root()
    load_dotenv(root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.is_file():
        raise FileNotFoundError(
            f"Config file not found: {path}. Create it or pass --config."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.is_file():
        raw = _deep_merge(raw, _read_toml(local))
    raw = _deep_merge(raw, _env_layer())

    # [project] debug is the TOML spelling of the top-level flag.
    project = raw.pop("project", {})
    raw.setdefault("debug", project.get("debug", False))
    return AppConfig.model_validate(raw)
