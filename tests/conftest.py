# tests/conftest.py
"""Shared test fixtures.

Fixtures:
- stage_harness: wires a transform/expansion between a feeding task and a
  collecting consumer and returns what came out
- fake_probe: deterministic PressureProbe with scripted readings
- zip_bytes / gzip_bytes: build archives in memory

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import gzip
import os
from collections.abc import Awaitable, Callable, Iterable

import pytest
from hypothesis import Phase, Verbosity, settings

from filestages.contracts import Record
from filestages.core.logging import configure_logging
from tests.fixtures.stages import FakePressureProbe, HarnessResult, StageFactory, build_zip, run_stage

# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def _configure_logging() -> None:
    """Route structlog through stdlib logging so caplog sees stage events."""
    configure_logging(level="DEBUG")


# =============================================================================
# Stage fixtures
# =============================================================================


@pytest.fixture
def stage_harness() -> Callable[[StageFactory, Iterable[Record]], Awaitable[HarnessResult]]:
    """Return run_stage for tests that wire a single stage."""
    return run_stage


@pytest.fixture
def fake_probe() -> Callable[..., FakePressureProbe]:
    """Factory for FakePressureProbe: fake_probe(0, 10, 0)."""

    def make(*readings: int) -> FakePressureProbe:
        return FakePressureProbe(readings)

    return make


@pytest.fixture
def zip_bytes() -> Callable[..., bytes]:
    return build_zip


@pytest.fixture
def gzip_bytes() -> Callable[[bytes], bytes]:
    return gzip.compress


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
