from functools import partial
from typing import List, Optional, Tuple

from infra.pool import WorkPool, gather_settled
from infra.pipeline.logger import RunLogger
from infra.webpagetest.client import WebPageTestClient
from .batches import split_into_batches, batch_offsets
from .models import StartedTest


async def start_tests(
    client: WebPageTestClient,
    pool: WorkPool,
    runs: int,
    max_runs_per_test: int,
    url: Optional[str] = None,
    script: Optional[str] = None,
    first_run_index: int = 0,
    logger: Optional[RunLogger] = None
) -> Tuple[List[StartedTest], List[Tuple[int, Exception]]]:
    """
    Start enough tests to cover `runs`, each with at most `max_runs_per_test`.

    Every start request goes through the pool. A failed start does not abort
    the others.

    Args:
        runs: Runs to start in this batch
        first_run_index: Global index of the batch's first run

    Returns:
        (started tests in request order, [(runs, error)] for failed starts)
    """
    runs_for_tests = split_into_batches(runs, max_runs_per_test)
    offsets = batch_offsets(runs_for_tests, start=first_run_index)

    futures = [
        pool.submit(partial(client.run_test, url=url, script=script, runs=test_runs))
        for test_runs in runs_for_tests
    ]
    outcomes = await gather_settled(futures)

    started = []
    failed = []
    for test_runs, offset, outcome in zip(runs_for_tests, offsets, outcomes):
        if isinstance(outcome, BaseException):
            failed.append((test_runs, outcome))
            if logger:
                logger.error(f"Starting test with {test_runs} runs failed: {outcome}", error=str(outcome))
        else:
            started.append(StartedTest(test_id=outcome, runs=test_runs, batch_offset=offset))

    return started, failed
