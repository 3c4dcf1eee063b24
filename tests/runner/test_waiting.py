"""
Tests for waiting on remote tests.

Poll intervals are a few milliseconds and timeouts are given in fractions
of a minute so the suite stays fast.
"""

import pytest

from fakes import FakeWebPageTestClient, read_log_messages
from infra.pool import WorkPool
from infra.runner.models import StartedTest
from infra.runner.waiting import wait_for_test, wait_for_tests
from infra.webpagetest.errors import TestFailedError, TestTimeoutError

# 0.05 seconds
SHORT_TIMEOUT = 0.05 / 60


class TestWaitForTest:

    @pytest.mark.asyncio
    async def test_complete_on_first_poll(self, fake_client):
        status = await wait_for_test(fake_client, "test-0", 1, poll_interval=0.001)
        assert status.is_complete
        assert fake_client.polls["test-0"] == 1

    @pytest.mark.asyncio
    async def test_pending_then_complete(self, run_logger):
        client = FakeWebPageTestClient(pending_polls=2)

        status = await wait_for_test(client, "test-0", 1, poll_interval=0.001, logger=run_logger)

        assert status.status_code == 200
        assert client.polls["test-0"] == 3
        messages = read_log_messages(run_logger)
        assert messages.count("testId: test-0 - Test Pending") == 2

    @pytest.mark.asyncio
    async def test_failed_status(self):
        client = FakeWebPageTestClient(status_codes={"test-0": 400})

        with pytest.raises(TestFailedError) as exc_info:
            await wait_for_test(client, "test-0", 1, poll_interval=0.001)

        assert exc_info.value.test_id == "test-0"
        assert exc_info.value.status_code == 400
        assert client.polls["test-0"] == 1

    @pytest.mark.asyncio
    async def test_timeout(self):
        client = FakeWebPageTestClient(pending_polls=10_000)

        with pytest.raises(TestTimeoutError) as exc_info:
            await wait_for_test(client, "test-0", SHORT_TIMEOUT, poll_interval=0.005)

        assert exc_info.value.test_id == "test-0"
        assert client.polls["test-0"] >= 2

    @pytest.mark.asyncio
    async def test_transport_error_not_retried(self):
        client = FakeWebPageTestClient(status_codes={"test-0": ConnectionError("reset")})

        with pytest.raises(ConnectionError):
            await wait_for_test(client, "test-0", 1, poll_interval=0.001)

        assert client.polls["test-0"] == 1

    @pytest.mark.asyncio
    async def test_polls_go_through_pool(self):
        client = FakeWebPageTestClient(pending_polls=1)
        pool = WorkPool(1)

        await wait_for_test(client, "test-0", 1, poll_interval=0.001, pool=pool)

        assert client.polls["test-0"] == 2
        assert pool.pending == 0


class TestWaitForTests:

    @pytest.mark.asyncio
    async def test_partitions_outcomes(self, run_logger):
        client = FakeWebPageTestClient(
            status_codes={"test-1": 500},
            runs_by_id={"test-0": 10, "test-2": 4},
        )
        tests = [
            StartedTest("test-0", runs=10, batch_offset=0),
            StartedTest("test-1", runs=10, batch_offset=10),
            StartedTest("test-2", runs=4, batch_offset=20),
        ]

        completed, failed = await wait_for_tests(
            client, WorkPool(2), tests, 1, poll_interval=0.001, logger=run_logger
        )

        assert [t.test_id for t in completed] == ["test-0", "test-2"]
        assert [t.batch_offset for t in completed] == [0, 20]
        assert len(failed) == 1
        test, error = failed[0]
        assert test.test_id == "test-1"
        assert isinstance(error, TestFailedError)
        assert any("Waiting for test test-1 failed" in m for m in read_log_messages(run_logger))

    @pytest.mark.asyncio
    async def test_runs_taken_from_status(self):
        client = FakeWebPageTestClient(runs_by_id={"abc": 7})
        completed, _ = await wait_for_tests(
            client, WorkPool(1), [StartedTest("abc", runs=0, batch_offset=10)], 1, poll_interval=0.001
        )
        assert completed[0].runs == 7
        assert completed[0].batch_offset == 10

    @pytest.mark.asyncio
    async def test_timeout_does_not_stop_others(self):
        client = FakeWebPageTestClient(status_codes={"slow": 100}, runs_by_id={"fast": 1})
        tests = [StartedTest("slow", runs=1), StartedTest("fast", runs=1)]

        completed, failed = await wait_for_tests(
            client, WorkPool(2), tests, SHORT_TIMEOUT, poll_interval=0.005
        )

        assert [t.test_id for t in completed] == ["fast"]
        assert isinstance(failed[0][1], TestTimeoutError)

    @pytest.mark.asyncio
    async def test_polls_bounded_by_pool(self):
        client = FakeWebPageTestClient(pending_polls=3, latency=0.003)
        tests = [StartedTest(f"t{i}", runs=1) for i in range(8)]

        completed, failed = await wait_for_tests(client, WorkPool(3), tests, 1, poll_interval=0.001)

        assert len(completed) == 8 and failed == []
        assert client.max_in_flight <= 3

    @pytest.mark.asyncio
    async def test_empty(self, fake_client):
        assert await wait_for_tests(fake_client, WorkPool(1), [], 1) == ([], [])
