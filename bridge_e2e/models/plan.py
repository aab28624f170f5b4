"""Models for test plans loaded from plan.yaml files."""

from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import Field, field_validator

from bridge_e2e.chains import ChainSpec, get_chain
from bridge_e2e.errors import UnknownChainError
from bridge_e2e.models.base import Model


class TestCase(Model):
    """One route leg to verify: source chain/asset into target chain/asset."""

    __test__ = False

    source_chain: str = Field(..., description="Chain key the treasury funds")
    source_asset: str = Field(..., description="Asset symbol sent on the source")
    target_chain: str = Field(..., description="Chain key the bridge delivers to")
    target_asset: str = Field(..., description="Asset symbol expected on target")
    amount: int | None = Field(
        default=None,
        gt=0,
        description="Funding amount in smallest units (None means randomized)",
    )

    @field_validator("source_chain", "target_chain")
    @classmethod
    def _known_chain(cls, value: str) -> str:
        try:
            get_chain(value)
        except UnknownChainError as exc:
            raise ValueError(str(exc)) from exc
        return value

    @property
    def source(self) -> ChainSpec:
        """Source chain spec."""
        return get_chain(self.source_chain)

    @property
    def target(self) -> ChainSpec:
        """Target chain spec."""
        return get_chain(self.target_chain)

    @property
    def route_key(self) -> tuple[str, str]:
        """Key of the target group this case belongs to."""
        return (self.target_chain, self.target_asset)


class TestPlan(Model):
    """Complete test plan: testnet cases, then mainnet cases."""

    __test__ = False

    version: str = Field(..., description="Test plan schema version")
    testnet: Sequence[TestCase] = Field(default_factory=list)
    mainnet: Sequence[TestCase] = Field(default_factory=list)


@dataclass(frozen=True, kw_only=True)
class TargetGroup:
    """Test cases sharing one (target chain, target asset) route."""

    target_chain: str
    target_asset: str
    cases: Sequence[TestCase]

    @property
    def target(self) -> ChainSpec:
        """Target chain spec."""
        return get_chain(self.target_chain)

    def session_chains(self) -> Sequence[ChainSpec]:
        """Distinct source chains in first-seen order, then the target chain."""
        keys: list[str] = []
        for case in self.cases:
            if case.source_chain not in keys:
                keys.append(case.source_chain)
        if self.target_chain not in keys:
            keys.append(self.target_chain)
        return [get_chain(key) for key in keys]


def group_by_target(cases: Sequence[TestCase]) -> Sequence[TargetGroup]:
    """Partition cases by target route, keeping first-seen order.

    Group order follows the first appearance of each route; case order within
    a group follows the input list.
    """
    buckets: dict[tuple[str, str], list[TestCase]] = {}
    for case in cases:
        buckets.setdefault(case.route_key, []).append(case)

    return [
        TargetGroup(target_chain=chain, target_asset=asset, cases=members)
        for (chain, asset), members in buckets.items()
    ]
