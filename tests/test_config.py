"""
Tests for beautrip_planner/config.py.

What we test
------------
load_config():
  - Reads an explicit TOML file; missing file raises FileNotFoundError.
  - local.toml next to the config file is deep-merged over it.
  - BEAUTRIP_* environment variables override file values.
  - Invalid values raise pydantic.ValidationError.

RankingConfig.to_weights():
  - Carries every ranking constant into RankingWeights.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from beautrip_planner.config import AppConfig, RankingConfig, _deep_merge, load_config
from beautrip_planner.ranking.scorer import DEFAULT_WEIGHTS

_ENV_VARS = (
    "BEAUTRIP_DB_PATH", "BEAUTRIP_LOG_LEVEL", "BEAUTRIP_API_URL",
    "BEAUTRIP_USER", "BEAUTRIP_DEBUG",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_defaults_from_minimal_file(self, tmp_path: Path):
        cfg = load_config(_write(tmp_path / "default.toml", ""))
        assert isinstance(cfg, AppConfig)
        assert cfg.ranking.prior_weight == 20.0
        assert cfg.ranking.group_level == "mid"
        assert cfg.schedule.default_user == "local"

    def test_file_values(self, tmp_path: Path):
        cfg = load_config(_write(tmp_path / "default.toml", """
[database]
db_path = "x.db"

[ranking]
prior_weight = 5
group_level = "small"

[project]
debug = true
"""))
        assert cfg.database.db_path == "x.db"
        assert cfg.ranking.prior_weight == 5.0
        assert cfg.ranking.group_level == "small"
        assert cfg.debug is True

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.toml")

    def test_local_override_merged(self, tmp_path: Path):
        cfg_path = _write(tmp_path / "default.toml", '[ranking]\nprior_weight = 5\ngroup_level = "large"\n')
        _write(tmp_path / "local.toml", "[ranking]\nprior_weight = 7\n")
        cfg = load_config(cfg_path)
        assert cfg.ranking.prior_weight == 7.0
        assert cfg.ranking.group_level == "large"

    def test_env_overrides(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("BEAUTRIP_DB_PATH", "/tmp/env.db")
        monkeypatch.setenv("BEAUTRIP_LOG_LEVEL", "debug")
        monkeypatch.setenv("BEAUTRIP_USER", "alice")
        monkeypatch.setenv("BEAUTRIP_DEBUG", "yes")
        cfg = load_config(_write(tmp_path / "default.toml", '[database]\ndb_path = "file.db"\n'))
        assert cfg.database.db_path == "/tmp/env.db"
        assert cfg.logging.level == "DEBUG"
        assert cfg.schedule.default_user == "alice"
        assert cfg.debug is True

    @pytest.mark.parametrize(
        "body",
        [
            '[ranking]\ngroup_level = "tiny"\n',
            "[ranking]\nprior_weight = -1\n",
            '[logging]\nlevel = "LOUD"\n',
        ],
    )
    def test_invalid_values(self, tmp_path: Path, body: str):
        with pytest.raises(ValidationError):
            load_config(_write(tmp_path / "default.toml", body))

    def test_repo_default_config_loads(self):
        cfg = load_config()
        assert cfg.ranking.to_weights() == DEFAULT_WEIGHTS


class TestRankingConfig:
    def test_to_weights(self):
        weights = RankingConfig(prior_weight=10, dedupe_limit_per_name=3).to_weights()
        assert weights.prior_weight == 10
        assert weights.dedupe_limit_per_name == 3
        assert weights.item_rating_weight == DEFAULT_WEIGHTS.item_rating_weight


def test_deep_merge_nested():
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
