"""Storage subsystem: ResultWriter"""

from infra.storage.results import ResultWriter

__all__ = [
    "ResultWriter",
]
