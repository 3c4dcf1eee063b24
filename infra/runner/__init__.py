"""Gauntlet orchestration: batches, test start, waiting, result collection."""

from infra.runner.batches import split_into_batches, batch_offsets
from infra.runner.models import StartedTest, CollectionResult, RunReport
from infra.runner.starting import start_tests
from infra.runner.waiting import wait_for_test, wait_for_tests
from infra.runner.collect import collect_summaries, collect_profiles
from infra.runner.run import run

__all__ = [
    "split_into_batches",
    "batch_offsets",
    "StartedTest",
    "CollectionResult",
    "RunReport",
    "start_tests",
    "wait_for_test",
    "wait_for_tests",
    "collect_summaries",
    "collect_profiles",
    "run",
]
