"""Pytest configuration and fixtures."""

import io

import pytest
from rich.console import Console

from flagcheck.constraints.context import ConstraintContext
from flagcheck.constraints.schema import Mode
from flagcheck.diagnostics import DiagnosticSink
from flagcheck.flags.platform import Platform
from flagcheck.flags.store import FlagStore


@pytest.fixture
def platform() -> Platform:
    """A 64-bit x86 build with both compilers and tiering."""
    return Platform()


@pytest.fixture
def store() -> FlagStore:
    """All flags at their defaults."""
    return FlagStore()


@pytest.fixture
def sink() -> DiagnosticSink:
    """Diagnostic sink writing to an in-memory console."""
    return DiagnosticSink(Console(file=io.StringIO(), width=200))


@pytest.fixture
def make_ctx(store: FlagStore, platform: Platform, sink: DiagnosticSink):
    """Factory for constraint contexts sharing the fixture store and sink."""

    def _make(mode: Mode = Mode.STRICT, verbose: bool = True, **overrides) -> ConstraintContext:
        fields = {"store": store, "platform": platform, "sink": sink, "mode": mode, "verbose": verbose}
        fields.update(overrides)
        return ConstraintContext(**fields)

    return _make
