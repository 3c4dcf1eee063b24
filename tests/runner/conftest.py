"""
Shared fixtures for orchestration tests.

See fakes.py for the in-memory WebPageTest client.
"""

import pytest

from fakes import FakeWebPageTestClient
from infra.pipeline.logger import RunLogger
from infra.storage.results import ResultWriter


@pytest.fixture
def fake_client():
    return FakeWebPageTestClient()


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "output"


@pytest.fixture
def writer(output_dir):
    return ResultWriter(output_dir, prefix="test")


@pytest.fixture
def run_logger(tmp_path):
    """Quiet logger writing only to tmp_path/logs/gauntlet.jsonl."""
    logger = RunLogger(run_id="test-run", log_dir=tmp_path / "logs", console_output=False)
    yield logger
    logger.close()
