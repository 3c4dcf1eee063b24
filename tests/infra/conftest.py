"""
Shared fixtures for infra tests.

All tests use real filesystem operations with temporary directories.
"""

import pytest


@pytest.fixture
def output_dir(tmp_path):
    """Directory result files are written into (not created up front)."""
    return tmp_path / "output"


@pytest.fixture
def log_dir(tmp_path):
    """Create a temp directory for logs."""
    log_path = tmp_path / "logs"
    log_path.mkdir()
    return log_path


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory so no config file or .env is discovered."""
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir
