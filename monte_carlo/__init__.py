# -*- coding: utf-8 -*-
"""
Module containing the time-bounded Monte Carlo Tree Search for Kalah.
"""
from .actor import MonteCarloAgent
from .config import ExpansionPolicy, Phase, SearchConfig, SelectionPolicy, default_config, fast_config
from .context import SearchContext, TimeBudget
from .node import Node
from .outcome import evaluate

__all__ = [
    "ExpansionPolicy",
    "MonteCarloAgent",
    "Node",
    "Phase",
    "SearchConfig",
    "SearchContext",
    "SelectionPolicy",
    "TimeBudget",
    "default_config",
    "evaluate",
    "fast_config",
]
