class WebPageTestError(Exception):
    pass


class TestStartError(WebPageTestError):
    """The service refused to start a test."""

    def __init__(self, status_code: int, status_text: str):
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"Test start rejected ({status_code}): {status_text}")


class TestFailedError(WebPageTestError):
    """A test reported an error status while we were waiting on it."""

    def __init__(self, test_id: str, status_code: int, status_text: str):
        self.test_id = test_id
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"Test {test_id} failed ({status_code}): {status_text}")


class TestTimeoutError(WebPageTestError):
    def __init__(self, test_id: str, timeout_minutes: float):
        self.test_id = test_id
        self.timeout_minutes = timeout_minutes
        super().__init__(f"Waiting for test {test_id} timed out after {timeout_minutes} minutes")


# Keep pytest from collecting these as test classes
TestStartError.__test__ = False
TestFailedError.__test__ = False
TestTimeoutError.__test__ = False
