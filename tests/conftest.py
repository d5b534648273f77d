"""Shared pytest fixtures for fanout tests."""

import threading
import time

import pytest
from typer.testing import CliRunner

from fanout.runners import ExecutionOutcome


class RecordingRunner:
    """
    Fake command runner with deterministic outcomes.

    Records every executed command and the peak number of commands that were
    executing at the same time.
    """

    def __init__(self, outcomes=None, delay: float = 0.0):
        self.outcomes = outcomes or {}
        self.delay = delay
        self.executed: list[str] = []
        self.active = 0
        self.peak = 0
        self._lock = threading.Lock()

    def execute(self, command: str) -> ExecutionOutcome:
        with self._lock:
            self.executed.append(command)
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self.outcomes.get(command, ExecutionOutcome.succeeded())
        finally:
            with self._lock:
                self.active -= 1


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_runner():
    """Factory for RecordingRunner instances."""
    return RecordingRunner


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep user config files and FANOUT_* variables out of tests."""
    for var in ("FANOUT_JOBS", "FANOUT_SHELL", "FANOUT_POLICY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("FANOUT_CONFIG_DIR", str(tmp_path / "no-config"))
    monkeypatch.chdir(tmp_path)
