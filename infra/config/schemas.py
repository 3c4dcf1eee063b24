"""
Configuration schema for a gauntlet run.

Values come from (highest priority first): command-line flags, a discovered
config file, and the defaults declared here. Config files may use either
snake_case or camelCase keys
(e.g. `outputDirectory`, `batchSize`).
"""

from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from infra.webpagetest.transport import DEFAULT_HOST


RESULT_TYPES = ("profile", "summary")


class ConfigError(Exception):
    pass


def _split_csv(value):
    if value is None:
        return None
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


class RunConfig(BaseModel):
    """Flat settings for one gauntlet run."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    url: Optional[str] = Field(None, description="The url to test")
    script: Optional[str] = Field(None, description="Path to a WebPageTest script (takes precedence over url)")
    output: str = Field("test", description="Output file name prefix, suffixed with the index: {output}-profile-1.json")
    output_directory: str = Field("output", description="Output directory for result files")
    runs: int = Field(1, ge=1, description="Total number of runs to perform")
    timeout: float = Field(2, gt=0, description="Max minutes to wait for each test result")
    pool: int = Field(10, ge=0, description="Max concurrent requests against WebPageTest")
    batch_size: int = Field(20, ge=1, description="Max number of runs started before waiting for results")
    batch_delay: float = Field(0, ge=0, description="Seconds to wait between batches")
    offset_index: int = Field(0, ge=0, description="Index offset for output file names, useful for extending batches")
    result_type: List[str] = Field(default_factory=lambda: ["profile"], description="Data to collect: profile, summary")
    test_ids: Optional[List[str]] = Field(None, description="Existing test ids to fetch; skips starting tests")
    max_runs_per_test: int = Field(10, ge=1, description="Max runs inside one WebPageTest test")
    poll_interval: float = Field(5.0, gt=0, description="Seconds between test status polls")
    host: str = Field(DEFAULT_HOST, description="WebPageTest host")
    log_level: str = Field("INFO", description="Console log level")

    @field_validator("result_type", mode="before")
    @classmethod
    def _parse_result_type(cls, value):
        types = _split_csv(value) or []
        unknown = [t for t in types if t not in RESULT_TYPES]
        if unknown:
            raise ValueError(f"unknown result type(s) {unknown}, expected any of {list(RESULT_TYPES)}")
        return types

    @field_validator("test_ids", mode="before")
    @classmethod
    def _parse_test_ids(cls, value):
        return _split_csv(value) or None

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def wants_summary(self) -> bool:
        return "summary" in self.result_type

    @property
    def wants_profile(self) -> bool:
        return "profile" in self.result_type

    def require_target(self) -> None:
        """Raise ConfigError unless there is something to run or fetch and the script file exists."""
        if not (self.url or self.script or self.test_ids):
            raise ConfigError("Nothing to do: provide --url, --script or --test-ids")
        if self.script and not Path(self.script).expanduser().is_file():
            raise ConfigError(f"Script file not found: {self.script}")
