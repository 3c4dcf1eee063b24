from infra.pool import WorkPool

from infra.webpagetest import (
    WebPageTestTransport,
    WebPageTestClient,
    TestStatus,
    WebPageTestError,
)

from infra.config import (
    RunConfig,
    ConfigError,
    load_run_config,
    get_api_key,
)

from infra.pipeline import (
    RunLogger,
    create_logger,
)

from infra.storage import ResultWriter

__all__ = [
    "WorkPool",

    "WebPageTestTransport",
    "WebPageTestClient",
    "TestStatus",
    "WebPageTestError",

    "RunConfig",
    "ConfigError",
    "load_run_config",
    "get_api_key",

    "RunLogger",
    "create_logger",

    "ResultWriter",
]
