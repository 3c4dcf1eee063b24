"""
Run logging.

Every gauntlet run gets one RunLogger. Lines go to the console as
"LEVEL: message" and, when a log directory is given, are appended as JSON
objects to {log_dir}/gauntlet.jsonl. Keyword arguments passed to the log
methods become fields of the JSON entry:

    logger.error("fetch failed", test_id="230101_AB_1", run=3, index=12)

Handlers are attached on the first message, so a run that never logs never
creates a log file.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, TextIO

# Structured fields copied from the log record into the JSON entry
EXTRA_FIELDS = ('run_id', 'test_id', 'batch', 'run', 'index', 'status_code', 'duration_seconds', 'error')

CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class FlushingFileHandler(logging.FileHandler):
    """Flushes after each record so the .jsonl file can be tailed during a run."""

    def emit(self, record):
        super().emit(record)
        self.flush()


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        entry.update(
            (name, record.__dict__[name]) for name in EXTRA_FIELDS if name in record.__dict__
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class RunLogger:
    def __init__(
        self,
        run_id: str,
        log_dir: Optional[Path] = None,
        console_output: bool = True,
        json_output: bool = True,
        level: str = "INFO",
        filename: str = "gauntlet.jsonl",
        stream: Optional[TextIO] = None
    ):
        self.run_id = run_id
        self.log_dir = Path(log_dir) if log_dir else None
        self.console_output = console_output
        self.json_output = json_output and self.log_dir is not None
        self.level = logging.getLevelName(level.upper())
        self.filename = filename
        self.stream = stream

        self.log_file: Optional[Path] = None
        self._logger: Optional[logging.Logger] = None

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = self._build_logger()
        return self._logger

    def _build_logger(self) -> logging.Logger:
        # One logging.Logger per instance, so two runs in one process never share handlers
        logger = logging.getLogger(f"gauntlet.run.{self.run_id}.{id(self)}")
        logger.setLevel(self.level)
        logger.propagate = False

        if self.console_output:
            handler = logging.StreamHandler(self.stream or sys.stdout)
            handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            logger.addHandler(handler)

        if self.json_output:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / self.filename
            handler = FlushingFileHandler(self.log_file, mode='a', encoding='utf-8')
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        return logger

    def log(self, level: int, message: str, exc_info=None, **fields):
        self.logger.log(level, message, exc_info=exc_info, extra={'run_id': self.run_id, **fields})

    def debug(self, message: str, **fields):
        self.log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields):
        self.log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields):
        self.log(logging.WARNING, message, **fields)

    def error(self, message: str, **fields):
        self.log(logging.ERROR, message, **fields)

    def close(self):
        if self._logger is None:
            return
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def create_logger(run_id: Optional[str] = None, **kwargs) -> RunLogger:
    """Create a RunLogger; run_id defaults to the current local time."""
    return RunLogger(run_id or datetime.now().strftime("%Y%m%d-%H%M%S"), **kwargs)
