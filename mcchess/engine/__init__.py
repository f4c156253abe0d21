"""Move selection: evaluation, rollout search, external engine, agents."""

from mcchess.engine.evaluation import evaluate
from mcchess.engine.rollout import RolloutSearch, SearchResult
from mcchess.engine.uci import EngineError, UCIEngine
from mcchess.engine.agents import Agent, RandomAgent, RolloutAgent, UCIEngineAgent

__all__ = [
    "evaluate", "RolloutSearch", "SearchResult", "EngineError", "UCIEngine",
    "Agent", "RandomAgent", "RolloutAgent", "UCIEngineAgent",
]
