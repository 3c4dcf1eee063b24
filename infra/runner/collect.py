#!/usr/bin/env python3
"""
Result collection for completed tests.

Summary and profile fetches each go through the pool, one unit per remote
call. Output files are numbered by global run index:

    index = offset_index + test.batch_offset + run

so numbering stays stable when a test in the middle of the gauntlet fails.
"""

from typing import List, Optional

from infra.pool import WorkPool, gather_settled
from infra.pipeline.logger import RunLogger
from infra.pipeline.rich_progress import RichProgressBar
from infra.storage.results import ResultWriter
from infra.webpagetest.client import WebPageTestClient
from .models import CollectionResult, StartedTest


async def collect_summaries(
    client: WebPageTestClient,
    pool: WorkPool,
    tests: List[StartedTest],
    writer: ResultWriter,
    offset_index: int = 0,
    logger: Optional[RunLogger] = None,
    progress: bool = False
) -> CollectionResult:
    """
    Fetch summary results for each test and write one file per run.

    Files: {output}-summary-{index}.json
    """
    result = CollectionResult()

    futures = [pool.submit(lambda test=test: client.get_test_results(test.test_id)) for test in tests]

    with RichProgressBar(len(tests), prefix="Summaries ", unit="tests", disable=not progress) as bar:
        outcomes = await gather_settled(futures)

        for test, outcome in zip(tests, outcomes):
            if isinstance(outcome, BaseException):
                result.failures[test.test_id] = str(outcome)
                bar.advance(failed=True)
                if logger:
                    logger.error(
                        f"Fetching summaries for {test.test_id} failed: {outcome}",
                        test_id=test.test_id,
                        error=str(outcome)
                    )
                continue

            for run, summary in enumerate(outcome):
                index = offset_index + test.batch_offset + run
                result.written.append(writer.write("summary", index, summary))
            bar.advance()

    return result


async def collect_profiles(
    client: WebPageTestClient,
    pool: WorkPool,
    tests: List[StartedTest],
    writer: ResultWriter,
    offset_index: int = 0,
    logger: Optional[RunLogger] = None,
    progress: bool = False
) -> CollectionResult:
    """
    Fetch timeline data for every run of every test.

    Each fetch-and-write is one pool unit. Failures are recorded per file
    key ("{test_id}/{run}") and do not stop other fetches.

    Files: {output}-profile-{index}.json
    """
    result = CollectionResult()

    timelines_to_fetch = [
        (test, run, offset_index + test.batch_offset + run)
        for test in tests
        for run in range(test.runs)
    ]

    async def fetch_and_write(test: StartedTest, run: int, index: int):
        # WebPageTest numbers runs from 1
        timeline_data = await client.get_timeline_data(test.test_id, run + 1)
        return writer.write("profile", index, timeline_data)

    futures = [
        pool.submit(lambda test=test, run=run, index=index: fetch_and_write(test, run, index))
        for test, run, index in timelines_to_fetch
    ]

    with RichProgressBar(len(futures), prefix="Profiles ", unit="files", disable=not progress) as bar:
        for (test, run, index), future in zip(timelines_to_fetch, futures):
            try:
                path = await future
            except Exception as e:
                result.failures[f"{test.test_id}/{run}"] = str(e)
                bar.advance(failed=True)
                if logger:
                    logger.error(
                        f"Fetching profile {index} ({test.test_id} run {run + 1}) failed: {e}",
                        test_id=test.test_id,
                        run=run + 1,
                        index=index,
                        error=str(e)
                    )
                continue
            result.written.append(path)
            bar.advance()

    return result
