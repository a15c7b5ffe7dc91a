"""
Workflows module - Orchestration of a single aggregation run.
"""
from workflows.aggregator import AggregationEngine
from workflows.runner import deliver_all, run_once

__all__ = [
    "AggregationEngine",
    "deliver_all",
    "run_once",
]
