#!/usr/bin/env python3
"""
Async WebPageTest client.

Wraps each blocking transport call as one coroutine that either returns the
parsed payload or raises, so callers can hand it straight to a WorkPool.

Endpoints used:
- runtest.php: start a test
- testStatus.php: poll a test
- jsonResult.php: summary results per run
- getTimeline.php: timeline/trace data for one run
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from infra.webpagetest.errors import TestStartError, WebPageTestError
from infra.webpagetest.transport import WebPageTestTransport

DEFAULT_LABEL = "wpt-gauntlet"

STATUS_COMPLETE = 200
STATUS_ERROR_THRESHOLD = 400

# Options every gauntlet test is started with
MEASUREMENT_OPTIONS = {
    'fvonly': 1,
    'timeline': 1,
    'profiler': 1,
    'timelineStack': 5,
    'trace': 1,
    'traceCategories': 'cc,benchmark',
}


@dataclass
class TestStatus:
    test_id: str
    status_code: int
    status_text: str = ""
    data: Dict[str, Any] = field(default_factory=dict)

    __test__ = False

    @property
    def is_complete(self) -> bool:
        return self.status_code == STATUS_COMPLETE

    @property
    def is_failed(self) -> bool:
        return self.status_code >= STATUS_ERROR_THRESHOLD

    @property
    def runs(self) -> int:
        test_info = self.data.get('testInfo') or {}
        return int(test_info.get('runs') or 1)


class WebPageTestClient:
    def __init__(self, transport: WebPageTestTransport, request_timeout: int = 60):
        self.transport = transport
        self.request_timeout = request_timeout

    async def run_test(
        self,
        url: Optional[str] = None,
        script: Optional[str] = None,
        runs: int = 1,
        label: str = DEFAULT_LABEL
    ) -> str:
        """
        Start a test and return its id.

        Args:
            url: Page to test (ignored when script is given)
            script: WebPageTest script body
            runs: Number of runs inside this single test
            label: Label shown in the WebPageTest UI

        Raises:
            TestStartError: Service answered with a non-200 statusCode
        """
        if not url and not script:
            raise ValueError("run_test needs a url or a script")

        params = dict(MEASUREMENT_OPTIONS)
        params['runs'] = runs
        params['label'] = label
        if script:
            params['script'] = script
        else:
            params['url'] = url

        body = await self._get('runtest.php', params)

        status_code = int(body.get('statusCode', 0))
        if status_code != STATUS_COMPLETE:
            raise TestStartError(status_code, body.get('statusText', ''))

        test_id = (body.get('data') or {}).get('testId')
        if not test_id:
            raise WebPageTestError(f"runtest.php response missing data.testId: {body}")
        return test_id

    async def get_test_status(self, test_id: str) -> TestStatus:
        body = await self._get('testStatus.php', {'test': test_id})
        return TestStatus(
            test_id=test_id,
            status_code=int(body.get('statusCode', 0)),
            status_text=body.get('statusText') or "",
            data=body.get('data') or {},
        )

    async def get_test_results(self, test_id: str) -> List[Dict[str, Any]]:
        """
        Fetch summary results, one entry per run.

        Only first view is collected (tests run with fvonly=1), so each run's
        `firstView` object is returned, ordered by run number.
        """
        body = await self._get('jsonResult.php', {'test': test_id})
        runs = (body.get('data') or {}).get('runs')
        if not isinstance(runs, dict):
            raise WebPageTestError(f"jsonResult.php response for {test_id} has no runs")

        return [runs[key].get('firstView') for key in sorted(runs, key=int)]

    async def get_timeline_data(self, test_id: str, run: int) -> Any:
        """Fetch timeline data for one run (1-based run number)."""
        return await self._get('getTimeline.php', {'test': test_id, 'run': run})

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(
            self.transport.get, endpoint, params, self.request_timeout
        )

    def close(self):
        self.transport.close()
