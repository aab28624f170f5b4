"""Execution of a single fund → poll → classify test case."""

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import BalanceReader, Funder
from bridge_e2e.errors import PollTimeout, UnsupportedAssetError
from bridge_e2e.models.plan import TestCase
from bridge_e2e.models.result import TestResult, Tier
from bridge_e2e.poller import Clock, LoopClock, PollPolicy, await_increase
from bridge_e2e.report import format_duration

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class FundingBase:
    """Lower bound of randomized funding amounts for an asset."""

    testnet: Decimal
    mainnet: Decimal
    decimals: int

    def units(self, chain: ChainSpec) -> int:
        """Base amount in smallest units for the chain's tier."""
        base = self.testnet if chain.testnet else self.mainnet
        return int(base.scaleb(self.decimals))


FUNDING_BASES: Mapping[str, FundingBase] = {
    "ETH": FundingBase(
        testnet=Decimal("0.0001"), mainnet=Decimal("0.00015"), decimals=18
    ),
    "USDC": FundingBase(testnet=Decimal("0.2"), mainnet=Decimal("0.2"), decimals=6),
    "WETH": FundingBase(
        testnet=Decimal("0.0002"), mainnet=Decimal("0.00015"), decimals=18
    ),
}

MAX_VARIANCE = Decimal("0.2")


def random_fund_amount(chain: ChainSpec, asset: str, rng: random.Random) -> int:
    """Pick a funding amount in [base, 1.2 × base) smallest units.

    Randomizing the amount keeps repeated runs from sending identical
    transfers; the exact value carries no meaning.

    Raises:
        UnsupportedAssetError: If the asset has no funding base

    """
    try:
        funding_base = FUNDING_BASES[asset]
    except KeyError:
        raise UnsupportedAssetError(f"Unknown token: {asset}") from None

    variance = 1 + Decimal(rng.random()) * MAX_VARIANCE
    return int(funding_base.units(chain) * variance)


@dataclass(frozen=True, kw_only=True)
class CaseRunner:
    """Runs one test case against the environment's collaborators."""

    balances: BalanceReader
    funder: Funder
    policy: PollPolicy = field(default_factory=PollPolicy)
    clock: Clock = field(default_factory=LoopClock)
    rng: random.Random = field(default_factory=random.Random, repr=False)

    async def run_case(
        self,
        address: str,
        case: TestCase,
        tier: Tier,
        *,
        baseline: int | None = None,
    ) -> TestResult:
        """Fund the source leg and wait for the target balance to increase.

        Every error is converted into a failing result; a case is attempted
        exactly once.

        Args:
            address: Test account address
            case: Route leg to verify
            tier: Tier the case belongs to
            baseline: Target balance already known to the caller, skips the
                baseline read when given

        Returns:
            A pass or fail result, with the elapsed time since the call started

        """
        log.info(
            "Testing: %s (%s) → %s (%s)",
            case.source.name,
            case.source_asset,
            case.target.name,
            case.target_asset,
        )
        start = self.clock.now()

        try:
            if baseline is None:
                baseline = await self.balances.get_balance(
                    case.target, case.target_asset, address
                )
            amount = case.amount or random_fund_amount(
                case.source, case.source_asset, self.rng
            )
            await self.funder.transfer(
                case.source, case.source_asset, address, amount
            )
            log.info("Funded %d %s on %s", amount, case.source_asset, case.source.name)

            arrived = await await_increase(
                self.balances,
                case.target,
                case.target_asset,
                address,
                baseline,
                policy=self.policy,
                clock=self.clock,
            )
            if not arrived:
                raise PollTimeout("Timeout")
        except PollTimeout as exc:
            duration_ms = self._elapsed_ms(start)
            log.warning("FAIL: %s (%s)", exc, format_duration(duration_ms))
            return TestResult.for_case(
                case, tier=tier, outcome="fail", duration_ms=duration_ms, error=str(exc)
            )
        except Exception as exc:
            duration_ms = self._elapsed_ms(start)
            log.error(
                "FAIL: %s (%s)", exc, format_duration(duration_ms), exc_info=exc
            )
            return TestResult.for_case(
                case,
                tier=tier,
                outcome="fail",
                duration_ms=duration_ms,
                error=str(exc) or type(exc).__name__,
            )

        duration_ms = self._elapsed_ms(start)
        log.info("PASS (%s)", format_duration(duration_ms))
        return TestResult.for_case(
            case, tier=tier, outcome="pass", duration_ms=duration_ms
        )

    def _elapsed_ms(self, start: float) -> int:
        return round((self.clock.now() - start) * 1000)
