"""
Waiting for remote tests to finish.

One status poll is one unit of pool work; the loop itself is not, so a long
wait never holds a slot between polls. Outcomes:
- status 200: the test is ready, return its status
- status >= 400: TestFailedError
- deadline reached: TestTimeoutError
- transport error: propagated immediately, without waiting for the deadline
"""

import asyncio
import dataclasses
from typing import List, Optional, Tuple

from infra.pool import WorkPool, gather_settled
from infra.pipeline.logger import RunLogger
from infra.pipeline.rich_progress import RichProgressBar
from infra.webpagetest.client import TestStatus, WebPageTestClient
from infra.webpagetest.errors import TestFailedError, TestTimeoutError
from .models import StartedTest


async def wait_for_test(
    client: WebPageTestClient,
    test_id: str,
    timeout_minutes: float,
    poll_interval: float = 5.0,
    pool: Optional[WorkPool] = None,
    logger: Optional[RunLogger] = None
) -> TestStatus:
    try:
        return await asyncio.wait_for(
            _poll_until_ready(client, test_id, poll_interval, pool, logger),
            timeout=timeout_minutes * 60
        )
    except asyncio.TimeoutError:
        raise TestTimeoutError(test_id, timeout_minutes) from None


async def _poll_until_ready(
    client: WebPageTestClient,
    test_id: str,
    poll_interval: float,
    pool: Optional[WorkPool],
    logger: Optional[RunLogger]
) -> TestStatus:
    while True:
        if pool is not None:
            status = await pool.submit(lambda: client.get_test_status(test_id))
        else:
            status = await client.get_test_status(test_id)

        if status.is_complete:
            return status

        if status.is_failed:
            raise TestFailedError(test_id, status.status_code, status.status_text)

        if logger:
            logger.info(
                f"testId: {test_id} - {status.status_text or 'No status yet'}",
                test_id=test_id,
                status_code=status.status_code
            )

        await asyncio.sleep(poll_interval)


async def wait_for_tests(
    client: WebPageTestClient,
    pool: WorkPool,
    tests: List[StartedTest],
    timeout_minutes: float,
    poll_interval: float = 5.0,
    logger: Optional[RunLogger] = None,
    progress: bool = False
) -> Tuple[List[StartedTest], List[Tuple[StartedTest, BaseException]]]:
    """
    Wait for every test; one failing or timing out does not stop the rest.

    Returns:
        (completed tests with `runs` taken from their final status,
         [(test, error)] for tests that failed, timed out or could not be polled)
    """
    with RichProgressBar(len(tests), prefix="Waiting ", unit="tests", disable=not progress) as bar:

        async def wait_one(test: StartedTest) -> TestStatus:
            try:
                status = await wait_for_test(
                    client, test.test_id, timeout_minutes,
                    poll_interval=poll_interval, pool=pool, logger=logger
                )
            except Exception:
                bar.advance(failed=True)
                raise
            bar.advance()
            return status

        outcomes = await gather_settled([wait_one(test) for test in tests])

    completed = []
    failed = []
    for test, outcome in zip(tests, outcomes):
        if isinstance(outcome, BaseException):
            failed.append((test, outcome))
            if logger:
                logger.warning(
                    f"Waiting for test {test.test_id} failed: {outcome}",
                    test_id=test.test_id,
                    error=str(outcome)
                )
        else:
            completed.append(dataclasses.replace(test, runs=outcome.runs))

    return completed, failed
