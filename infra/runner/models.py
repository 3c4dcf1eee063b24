from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List


@dataclass
class StartedTest:
    """A remote test plus where its runs land in the output numbering.

    `batch_offset` is the index of the test's first run across the whole
    gauntlet, so run `i` of this test is written as index
    offset_index + batch_offset + i.
    """
    test_id: str
    runs: int
    batch_offset: int = 0

    __test__ = False


@dataclass
class CollectionResult:
    written: List[Path] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)


@dataclass
class RunReport:
    started: List[str] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    start_failures: List[str] = field(default_factory=list)
    summaries: CollectionResult = field(default_factory=CollectionResult)
    profiles: CollectionResult = field(default_factory=CollectionResult)

    @property
    def all_failed(self) -> bool:
        return not self.completed

