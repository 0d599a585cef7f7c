# tests/conftest.py
import os
from typing import Callable

import pytest
from hypothesis import HealthCheck, settings

from fuzz.config import CONFIG_ENV_VAR, reset_config
from fuzz.prng import Replayed

# Generating thousands of cases per example is slow under coverage; no deadline.
settings.register_profile(
    "fuzz",
    max_examples=60,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
settings.register_profile(
    "ci",
    parent=settings.get_profile("fuzz"),
    max_examples=300,
    print_blob=True,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "fuzz"))


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Every test starts from the built-in limits, never a user YAML."""
    monkeypatch.setenv(CONFIG_ENV_VAR, os.path.join(os.path.dirname(__file__), "missing.yaml"))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def replay_log() -> Callable[..., Replayed]:
    """
    Build a Replayed state from draws listed in chronological order.

    The recorded buffer is newest-first, so the draws are reversed before
    wrapping: ``replay_log(1, 2)`` replays ``1`` then ``2``.
    """

    def build(*draws: int) -> Replayed:
        return Replayed.from_choices(bytes(reversed(draws)))

    return build
