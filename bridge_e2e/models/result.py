"""Models for test execution results."""

from dataclasses import dataclass
from typing import Literal

from bridge_e2e.models.plan import TestCase

type Tier = Literal["testnet", "mainnet"]
type Outcome = Literal["pass", "fail", "skip"]


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Terminal outcome of one test case in one tier.

    Route fields hold chain display names, as they appear in the report.
    """

    __test__ = False

    tier: Tier
    source_chain: str
    source_asset: str
    target_chain: str
    target_asset: str
    outcome: Outcome
    duration_ms: int | None = None
    error: str | None = None

    @classmethod
    def for_case(
        cls,
        case: TestCase,
        *,
        tier: Tier,
        outcome: Outcome,
        duration_ms: int | None = None,
        error: str | None = None,
    ) -> "TestResult":
        """Build a result carrying the route fields of a test case."""
        return cls(
            tier=tier,
            source_chain=case.source.name,
            source_asset=case.source_asset,
            target_chain=case.target.name,
            target_asset=case.target_asset,
            outcome=outcome,
            duration_ms=duration_ms,
            error=error,
        )

    @property
    def route(self) -> str:
        """Route label (e.g. "Base USDC → Plasma USDT0")."""
        return (
            f"{self.source_chain} {self.source_asset} → "
            f"{self.target_chain} {self.target_asset}"
        )
