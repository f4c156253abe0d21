"""mcchess: chess rules engine with a time-boxed random-rollout move search."""

__version__ = "0.1.0"
