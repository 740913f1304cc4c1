import asyncio
import os
import sys

import pytest

# Ensure imports like `from app.main import app` work when pytest is run from repo root
BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from app.crs.transform import Point  # noqa: E402


class FakeEngine:
    """Projection engine double: counts loads, optional delay/failure, scales points by 1/1000."""

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.load_calls = 0
        self.project_calls = 0
        self.gate = None  # asyncio.Event; load blocks on it when set

    async def load(self):
        self.load_calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("engine module failed to load")

    def project(self, point, target):
        self.project_calls += 1
        return Point(point.x / 1000.0, point.y / 1000.0, target)


@pytest.fixture
def make_engine():
    return FakeEngine


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def gated_engine():
    eng = FakeEngine()
    eng.gate = asyncio.Event()
    return eng
