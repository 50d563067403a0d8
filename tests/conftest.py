"""
Shared fixtures.

The Commons Logging facade is stood in for by RecordingLog / LogFactory:
plain Python objects with the same method names, so transformed units can
be run through the interpreter.
"""

import pytest

from logguard.strategies import reset_facade_binding
from logguard.strategies.commons import LOGGER_FACTORY_TYPE_NAME, LOGGER_TYPE_NAME
from logguard.typesystem import ClassPath

LEVELS = ("fatal", "error", "warn", "info", "debug", "trace")


class RecordingLog:
    """A Log that records what it was asked to log."""

    def __init__(self, owner, enabled=LEVELS):
        self.owner = owner
        self.enabled = set(enabled)
        self.records = []
        self.checks = []

    def __getattr__(self, name):
        if name in LEVELS:
            return lambda *args: self.records.append((name, args))
        if name.startswith("is") and name.endswith("Enabled"):
            level = name[2:-len("Enabled")].lower()
            if level in LEVELS:
                def check():
                    self.checks.append(level)
                    return level in self.enabled
                return check
        raise AttributeError(name)

    def toString(self):
        return f"RecordingLog({getattr(self.owner, 'name', self.owner)})"


class LogFactory:
    """Stands in for org.apache.commons.logging.LogFactory."""

    def __init__(self, enabled=LEVELS):
        self.enabled = enabled
        self.created = []

    def getLog(self, owner):
        log = RecordingLog(owner, self.enabled)
        self.created.append(log)
        return log


@pytest.fixture(autouse=True)
def fresh_facade_binding(monkeypatch):
    """Every test resolves the process-wide facade binding from scratch."""
    monkeypatch.delenv("LOGGUARD_CONFIG", raising=False)
    monkeypatch.delenv("LOGGUARD_LOG_LEVEL", raising=False)
    reset_facade_binding()
    yield
    reset_facade_binding()


@pytest.fixture
def facade_classpath():
    return ClassPath([LOGGER_TYPE_NAME, LOGGER_FACTORY_TYPE_NAME])


@pytest.fixture
def log_factory():
    return LogFactory()


@pytest.fixture
def make_log_factory():
    """LogFactory with only the given levels enabled."""
    return LogFactory
