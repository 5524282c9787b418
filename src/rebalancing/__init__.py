"""Rebalancing module for keeping the hedge delta-neutral."""

from src.rebalancing.engine import (
    RebalanceAction,
    RebalanceDecision,
    RebalanceDecisionEngine,
    RebalanceOutcome,
    RebalanceTrigger,
    decide,
)
from src.rebalancing.hedger import DeltaHedger

__all__ = [
    "DeltaHedger",
    "RebalanceAction",
    "RebalanceDecision",
    "RebalanceDecisionEngine",
    "RebalanceOutcome",
    "RebalanceTrigger",
    "decide",
]
