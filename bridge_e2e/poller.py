"""Waiting for a bridged balance to arrive on the target chain."""

import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Protocol

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import BalanceReader

log = logging.getLogger(__name__)


class Clock(Protocol):
    """Monotonic time source with cooperative sleep."""

    def now(self) -> float:
        """Current monotonic time in seconds."""
        ...

    async def sleep(self, seconds: float) -> None:
        """Suspend the current task."""
        ...


class LoopClock:
    """Clock backed by the running event loop."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


@dataclass(frozen=True, kw_only=True)
class PollPolicy:
    """Timing of balance polling, in seconds."""

    poll_interval: float = 0.5
    timeout: float = 120.0
    progress_interval: float = 10.0


class PollState(enum.Enum):
    """States of a balance poll."""

    POLLING = "polling"
    INCREASED = "increased"
    TIMED_OUT = "timed_out"


async def await_increase(
    reader: BalanceReader,
    chain: ChainSpec,
    asset: str,
    address: str,
    baseline: int,
    *,
    policy: PollPolicy | None = None,
    clock: Clock | None = None,
) -> bool:
    """Poll a balance until it exceeds the baseline or the timeout elapses.

    An unchanged balance is not progress: only a strictly greater balance
    counts as an arrival.

    Args:
        reader: Balance reader for the target chain
        chain: Target chain
        asset: Target asset symbol
        address: Account to watch
        baseline: Balance recorded before funding
        policy: Poll interval, timeout and progress log interval
        clock: Time source (defaults to the event loop clock)

    Returns:
        True if an increase was observed, False once the timeout has elapsed

    """
    policy = policy or PollPolicy()
    clock = clock or LoopClock()

    start = clock.now()
    last_progress = 0.0
    state = PollState.POLLING

    while state is PollState.POLLING:
        balance = await reader.get_balance(chain, asset, address)
        elapsed = clock.now() - start

        if balance > baseline:
            log.info("Balance increased: %d -> %d", baseline, balance)
            state = PollState.INCREASED
        elif elapsed >= policy.timeout:
            log.info("No balance increase after %.1fs", elapsed)
            state = PollState.TIMED_OUT
        else:
            if elapsed - last_progress >= policy.progress_interval:
                log.info("Waiting for bridge... (%ds)", round(elapsed))
                last_progress = elapsed
            await clock.sleep(min(policy.poll_interval, policy.timeout - elapsed))

    return state is PollState.INCREASED
