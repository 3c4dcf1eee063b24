"""
WebPageTest API client components.

Clean separation of concerns:
- transport.py: HTTP requests
- client.py: async operations (start, status, results, timeline)
- errors.py: error types
"""

from .transport import WebPageTestTransport, DEFAULT_HOST
from .client import WebPageTestClient, TestStatus
from .errors import WebPageTestError, TestStartError, TestFailedError, TestTimeoutError

__all__ = [
    'WebPageTestTransport',
    'DEFAULT_HOST',
    'WebPageTestClient',
    'TestStatus',
    'WebPageTestError',
    'TestStartError',
    'TestFailedError',
    'TestTimeoutError',
]
