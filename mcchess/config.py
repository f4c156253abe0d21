"""Match configuration loaded from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Optional

import yaml

logger = logging.getLogger("mcchess.config")


@dataclass
class SearchConfig:
    """Rollout search settings."""
    time_budget: float = 5.0  # seconds per move
    max_depth: int = 8  # half-moves per rollout
    seed: Optional[int] = None


@dataclass
class EngineConfig:
    """External UCI engine settings. No path means no engine."""
    path: Optional[str] = None
    args: list[str] = field(default_factory=list)
    movetime_ms: int = 1000
    read_timeout: float = 10.0
    options: dict = field(default_factory=dict)


@dataclass
class MatchConfig:
    search: SearchConfig = field(default_factory=SearchConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    games: int = 1
    move_pause: float = 0.5  # seconds between moves
    max_plies: int = 400
    log_level: str = "INFO"


def _build(cls, data: dict, section: str):
    known = {f.name for f in fields(cls)}
    for key in data:
        if key not in known:
            logger.warning(f"Ignoring unknown config key '{section}{key}'")
    return {k: v for k, v in data.items() if k in known}


def config_from_dict(data: Optional[dict]) -> MatchConfig:
    """Build a MatchConfig from a parsed YAML mapping."""
    data = dict(data or {})
    search = SearchConfig(**_build(SearchConfig, data.pop("search", None) or {}, "search."))
    engine = EngineConfig(**_build(EngineConfig, data.pop("engine", None) or {}, "engine."))
    return MatchConfig(search=search, engine=engine, **_build(MatchConfig, data, ""))


def load_config(path: Optional[str] = None) -> MatchConfig:
    """Load a YAML config file; defaults are used when path is None."""
    if path is None:
        return MatchConfig()
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config {path} must be a mapping")
    return config_from_dict(data)
