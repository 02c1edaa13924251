import os
import sys
from pathlib import Path

import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# config is read at import time; keep the module singletons off disk and off the network
os.environ.setdefault("QA_MODE", "true")
os.environ.setdefault("IDENTITY_TOKEN_SECRET", "pytest-identity-secret")


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("QA_MODE", "true")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key")
    monkeypatch.setenv("IDENTITY_TOKEN_SECRET", "pytest-identity-secret")


@pytest.fixture(autouse=True)
def _clean_metrics():
    from resonance.system_metrics import reset_metrics

    reset_metrics()
    yield
    reset_metrics()


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()
