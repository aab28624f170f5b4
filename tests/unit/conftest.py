"""Fixtures wiring the orchestrator to in-memory collaborators."""

import random

import pytest

from bridge_e2e.orchestrator import TestOrchestrator
from bridge_e2e.poller import PollPolicy
from bridge_e2e.runner import CaseRunner
from bridge_e2e.testing.fakes import FakeAccount, FakeBridge, FakeClock, FakeRegistrar


@pytest.fixture
def clock() -> FakeClock:
    """Clock advanced only by the poller's sleeps."""
    return FakeClock()


@pytest.fixture
def bridge() -> FakeBridge:
    """Bridge with no working routes; tests add the ones they need."""
    return FakeBridge()


@pytest.fixture
def registrar() -> FakeRegistrar:
    """Registrar accepting every route."""
    return FakeRegistrar()


@pytest.fixture
def account() -> FakeAccount:
    """Test account."""
    return FakeAccount()


@pytest.fixture
def policy() -> PollPolicy:
    """Short poll policy: three seconds, one read per second."""
    return PollPolicy(poll_interval=1.0, timeout=3.0, progress_interval=10.0)


@pytest.fixture
def runner(bridge: FakeBridge, clock: FakeClock, policy: PollPolicy) -> CaseRunner:
    """Case runner over the fake bridge."""
    return CaseRunner(
        balances=bridge,
        funder=bridge,
        policy=policy,
        clock=clock,
        rng=random.Random(1234),
    )


@pytest.fixture
def orchestrator(runner: CaseRunner, registrar: FakeRegistrar) -> TestOrchestrator:
    """Orchestrator over the fake collaborators."""
    return TestOrchestrator(runner=runner, registrar=registrar)
