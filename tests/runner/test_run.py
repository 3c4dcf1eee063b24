"""
End-to-end gauntlet runs against the in-memory client.
"""

import asyncio

import pytest

from fakes import FakeWebPageTestClient, read_log_messages
from infra.config import ConfigError, RunConfig
from infra.runner import run


def make_config(output_dir, **overrides):
    values = dict(
        url="https://example.org",
        output_directory=str(output_dir),
        poll_interval=0.001,
    )
    values.update(overrides)
    return RunConfig(**values)


def files(output_dir, kind):
    return sorted(
        int(p.stem.rsplit("-", 1)[1]) for p in output_dir.glob(f"test-{kind}-*.json")
    )


class TestBatchRun:

    @pytest.mark.asyncio
    async def test_forty_four_runs(self, output_dir, run_logger):
        client = FakeWebPageTestClient(pending_polls=1)
        config = make_config(
            output_dir, runs=44, batch_size=20, max_runs_per_test=10, pool=3,
            result_type="profile,summary"
        )

        report = await run(config, client, logger=run_logger)

        # Batches of 20, 20, 4 -> tests of 10, 10 | 10, 10 | 4
        assert [call["runs"] for call in client.started] == [10, 10, 10, 10, 4]
        assert len(report.completed) == 5
        assert not report.all_failed
        assert files(output_dir, "profile") == list(range(44))
        assert files(output_dir, "summary") == list(range(44))
        assert client.max_in_flight <= 3

        messages = read_log_messages(run_logger)
        assert any(m.startswith("Test batch 1 of 3 started. testIds in batch: test-0,test-1") for m in messages)
        assert any(m.startswith("Test batch 3 of 3 started") for m in messages)

    @pytest.mark.asyncio
    async def test_failed_test_excluded(self, output_dir, run_logger):
        client = FakeWebPageTestClient(status_codes={"test-1": 400})
        config = make_config(output_dir, runs=30, batch_size=30, max_runs_per_test=10)

        report = await run(config, client, logger=run_logger)

        assert report.completed == ["test-0", "test-2"]
        assert list(report.failed) == ["test-1"]
        # test-1 covered indices 10..19
        assert files(output_dir, "profile") == list(range(0, 10)) + list(range(20, 30))
        assert all(test_id != "test-1" for test_id, _ in client.timeline_calls)

    @pytest.mark.asyncio
    async def test_start_failure_reported(self, output_dir, run_logger):
        client = FakeWebPageTestClient(failing_starts={0})
        config = make_config(output_dir, runs=20, max_runs_per_test=10)

        report = await run(config, client, logger=run_logger)

        assert len(report.start_failures) == 1
        assert report.completed == ["test-0"]
        assert files(output_dir, "profile") == list(range(10, 20))

    @pytest.mark.asyncio
    async def test_offset_index(self, output_dir, run_logger):
        config = make_config(output_dir, runs=3, offset_index=44, result_type="summary")
        await run(config, FakeWebPageTestClient(), logger=run_logger)
        assert files(output_dir, "summary") == [44, 45, 46]
        assert files(output_dir, "profile") == []

    @pytest.mark.asyncio
    async def test_batch_delay(self, output_dir, run_logger):
        config = make_config(output_dir, runs=3, batch_size=1, batch_delay=0.05)

        loop = asyncio.get_running_loop()
        started = loop.time()
        await run(config, FakeWebPageTestClient(), logger=run_logger)

        # Two delays between three batches
        assert loop.time() - started >= 0.1

    @pytest.mark.asyncio
    async def test_nothing_completes(self, output_dir, run_logger):
        client = FakeWebPageTestClient(status_codes={"test-0": 500})
        config = make_config(output_dir, runs=1)

        report = await run(config, client, logger=run_logger)

        assert report.all_failed
        assert client.timeline_calls == []
        assert "No tests completed; nothing to collect." in read_log_messages(run_logger)


class TestScript:

    @pytest.mark.asyncio
    async def test_script_takes_precedence(self, tmp_path, output_dir, run_logger):
        script = tmp_path / "flow.txt"
        script.write_text("navigate\thttps://example.org\n")
        client = FakeWebPageTestClient()
        config = make_config(output_dir, script=str(script))

        await run(config, client, logger=run_logger)

        assert client.started[0]["script"] == "navigate\thttps://example.org\n"
        assert any("Script takes precedence" in m for m in read_log_messages(run_logger))

    @pytest.mark.asyncio
    async def test_missing_script_file(self, tmp_path, output_dir, run_logger):
        client = FakeWebPageTestClient()
        config = make_config(output_dir, script=str(tmp_path / "missing.txt"))
        with pytest.raises(ConfigError, match="Script file not found"):
            await run(config, client, logger=run_logger)
        assert client.started == []


class TestExistingTestIds:

    @pytest.mark.asyncio
    async def test_skips_starting(self, output_dir, run_logger):
        client = FakeWebPageTestClient(runs_by_id={"abc": 2, "def": 3})
        config = make_config(output_dir, url=None, test_ids="abc,def", max_runs_per_test=10)

        report = await run(config, client, logger=run_logger)

        assert client.started == []
        assert report.completed == ["abc", "def"]
        assert files(output_dir, "profile") == [0, 1, 2, 3, 4]
        assert any("Skipped kicking off new tests" in m for m in read_log_messages(run_logger))

    @pytest.mark.asyncio
    async def test_runs_beyond_max_runs_per_test_keep_their_own_files(self, output_dir, run_logger):
        client = FakeWebPageTestClient(runs_by_id={"abc": 15, "def": 3})
        config = make_config(
            output_dir, url=None, test_ids="abc,def", max_runs_per_test=10,
            result_type="profile,summary"
        )

        report = await run(config, client, logger=run_logger)

        assert files(output_dir, "profile") == list(range(18))
        assert files(output_dir, "summary") == list(range(18))
        assert len(set(report.profiles.written)) == len(report.profiles.written) == 18

    @pytest.mark.asyncio
    async def test_failed_test_leaves_no_gap(self, output_dir, run_logger):
        client = FakeWebPageTestClient(runs_by_id={"abc": 2, "ghi": 3}, status_codes={"def": 500})
        config = make_config(output_dir, url=None, test_ids="abc,def,ghi", offset_index=100)

        report = await run(config, client, logger=run_logger)

        assert report.completed == ["abc", "ghi"]
        assert files(output_dir, "profile") == [100, 101, 102, 103, 104]


@pytest.mark.asyncio
async def test_requires_target(output_dir, run_logger):
    with pytest.raises(ConfigError):
        await run(RunConfig(output_directory=str(output_dir)), FakeWebPageTestClient(), logger=run_logger)
