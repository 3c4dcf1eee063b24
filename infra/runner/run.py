#!/usr/bin/env python3
"""
Gauntlet run: start tests batch by batch, wait, collect results.

A single WorkPool is created per run and handed to every phase that talks
to WebPageTest (starting, polling, fetching), so the configured `pool`
bounds the total number of concurrent remote calls.

Tests that failed to start, failed remotely or timed out are reported and
left out of result collection.
"""

import asyncio
import dataclasses
from pathlib import Path
from typing import Optional

from infra.config import RunConfig
from infra.pool import WorkPool
from infra.pipeline.logger import RunLogger, create_logger
from infra.storage.results import ResultWriter
from infra.webpagetest.client import WebPageTestClient
from .batches import split_into_batches
from .collect import collect_profiles, collect_summaries
from .models import RunReport, StartedTest
from .starting import start_tests
from .waiting import wait_for_tests


def read_script(config: RunConfig, logger: RunLogger) -> Optional[str]:
    if not config.script:
        return None

    script = Path(config.script).expanduser().read_text(encoding="utf-8")
    if config.url:
        logger.warning(
            "Both URL and script provided: Script takes precedence and the url provided will be ignored"
        )
    return script


async def run(
    config: RunConfig,
    client: WebPageTestClient,
    logger: Optional[RunLogger] = None,
    progress: bool = False
) -> RunReport:
    """
    Execute a full gauntlet run.

    Args:
        config: Resolved run configuration (must name a url, script or test ids)
        client: WebPageTest client
        logger: Run logger (default: console only)
        progress: Show rich progress bars

    Returns:
        RunReport with test ids and files written
    """
    config.require_target()
    logger = logger or create_logger(level=config.log_level)

    pool = WorkPool(config.pool)
    writer = ResultWriter(Path(config.output_directory), prefix=config.output)
    report = RunReport()

    if config.test_ids:
        completed = await _wait_for_existing(config, client, pool, logger, report, progress)
    else:
        completed = await _run_batches(config, client, pool, logger, report, progress)

    if not completed:
        logger.error("No tests completed; nothing to collect.")
        return report

    if config.wants_summary:
        logger.info("Collecting summaries.")
        report.summaries = await collect_summaries(
            client, pool, completed, writer,
            offset_index=config.offset_index, logger=logger, progress=progress
        )
        logger.info(
            f"{len(report.summaries.written)} summaries written to files in {writer.output_dir}"
        )

    if config.wants_profile:
        logger.info("Collecting profiles.")
        report.profiles = await collect_profiles(
            client, pool, completed, writer,
            offset_index=config.offset_index, logger=logger, progress=progress
        )
        logger.info(
            f"{len(report.profiles.written)} profiles written to files in {writer.output_dir}"
        )

    return report


async def _run_batches(config, client, pool, logger, report, progress):
    script = read_script(config, logger)
    batches_to_run = split_into_batches(config.runs, config.batch_size)

    completed = []
    first_run_index = 0
    for batch_index, batch_runs in enumerate(batches_to_run, 1):
        started, start_failures = await start_tests(
            client, pool, batch_runs, config.max_runs_per_test,
            url=config.url, script=script,
            first_run_index=first_run_index, logger=logger
        )
        first_run_index += batch_runs

        report.started.extend(test.test_id for test in started)
        report.start_failures.extend(str(error) for _, error in start_failures)

        logger.info(
            f"Test batch {batch_index} of {len(batches_to_run)} started. "
            f"testIds in batch: {','.join(test.test_id for test in started)}",
            batch=batch_index
        )
        logger.info(f"Waiting {config.timeout:g} minutes for tests to be completed")

        batch_completed, batch_failed = await wait_for_tests(
            client, pool, started, config.timeout,
            poll_interval=config.poll_interval, logger=logger, progress=progress
        )
        _record_wait(report, batch_completed, batch_failed)
        completed.extend(batch_completed)

        logger.info(
            f"Batch {batch_index} completed: {len(batch_completed)} ready, {len(batch_failed)} failed.",
            batch=batch_index
        )

        if config.batch_delay and batch_index < len(batches_to_run):
            logger.info(f"Waiting {config.batch_delay:g}s before next batch")
            await asyncio.sleep(config.batch_delay)

    logger.info(f"All tests complete. testIds: {','.join(report.completed)}")
    return completed


async def _wait_for_existing(config, client, pool, logger, report, progress):
    logger.info(f"testIds provided: {','.join(config.test_ids)}. Skipped kicking off new tests.")
    logger.info(f"Waiting {config.timeout:g} minutes for tests to be completed")

    # Run counts are only known once each test reports its status
    tests = [StartedTest(test_id=test_id, runs=0) for test_id in config.test_ids]

    completed, failed = await wait_for_tests(
        client, pool, tests, config.timeout,
        poll_interval=config.poll_interval, logger=logger, progress=progress
    )
    _record_wait(report, completed, failed)

    logger.info("All tests completed.")
    return _number_runs(completed)


def _number_runs(tests):
    """Lay completed tests end to end in input order: [15, 3] runs -> offsets [0, 15]."""
    numbered = []
    position = 0
    for test in tests:
        numbered.append(dataclasses.replace(test, batch_offset=position))
        position += test.runs
    return numbered


def _record_wait(report: RunReport, completed, failed):
    report.completed.extend(test.test_id for test in completed)
    for test, error in failed:
        report.failed[test.test_id] = str(error) or type(error).__name__
