"""Test orchestrator: route groups, skip cascades and the testnet gate."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from bridge_e2e.environments.base import InitData, RouteRegistrar, TestAccount
from bridge_e2e.models.plan import TargetGroup, TestCase, TestPlan, group_by_target
from bridge_e2e.models.result import TestResult, Tier
from bridge_e2e.runner import CaseRunner
from bridge_e2e.sweeper import sweep

log = logging.getLogger(__name__)

PREVIOUS_TEST_FAILED = "Previous test failed"
PREVIOUS_GROUP_FAILED = "Previous group failed"
TESTNET_FAILED = "Testnet failed"


@dataclass(frozen=True, kw_only=True)
class RunState:
    """Everything one harness invocation has established so far."""

    address: str
    init_data: InitData
    results: Sequence[TestResult] = ()
    testnet_tier_passed: bool | None = None
    mainnet_tier_aborted: bool = False

    def extend(self, results: Sequence[TestResult]) -> "RunState":
        """Return a copy with results appended."""
        return replace(self, results=(*self.results, *results))

    @property
    def has_failures(self) -> bool:
        """Whether any case failed in either tier."""
        return any(r.outcome == "fail" for r in self.results)


@dataclass(frozen=True, kw_only=True)
class TierPolicy:
    """How failures propagate within a tier."""

    tier: Tier
    cascade_across_groups: bool


TESTNET = TierPolicy(tier="testnet", cascade_across_groups=False)
MAINNET = TierPolicy(tier="mainnet", cascade_across_groups=True)


@dataclass(frozen=True, kw_only=True)
class GroupRun:
    """Results of one target group."""

    results: Sequence[TestResult]
    failed: bool


@dataclass(frozen=True, kw_only=True)
class TierRun:
    """Results of one tier."""

    results: Sequence[TestResult]
    aborted: bool

    @property
    def passed(self) -> bool:
        """Whether every case passed; an empty tier passes."""
        return all(r.outcome == "pass" for r in self.results)


def skipped(cases: Sequence[TestCase], tier: Tier, reason: str) -> list[TestResult]:
    """Skip results for cases that will not be attempted."""
    return [
        TestResult.for_case(case, tier=tier, outcome="skip", error=reason)
        for case in cases
    ]


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs a test plan tier by tier, group by group, case by case.

    Nothing runs concurrently: cases in a group share the treasury and the
    target balance, so each baseline must be read after the previous case
    settled.
    """

    __test__ = False

    runner: CaseRunner
    registrar: RouteRegistrar

    async def run(
        self,
        account: TestAccount,
        plan: TestPlan,
        recipient: str,
        report: Callable[[Sequence[TestResult]], None],
    ) -> RunState:
        """Run both tiers, report, then sweep every target route.

        Args:
            account: Test account receiving deposits
            plan: Testnet and mainnet cases
            recipient: Address receiving swept funds
            report: Called once with all results before sweeping

        Returns:
            Final run state; every case has exactly one result

        """
        state = RunState(address=account.address, init_data=account.init_data)
        log.info("Account address: %s", state.address)

        state = await self.run_tiers(account, plan, state)

        try:
            report(state.results)
        finally:
            await self.sweep_routes(account, plan, recipient)
        return state

    async def run_tiers(
        self, account: TestAccount, plan: TestPlan, state: RunState
    ) -> RunState:
        """Run the testnet tier, then the mainnet tier only if testnet passed."""
        log.info("=== TESTNET TESTS ===")
        testnet = await self.run_tier(account, plan.testnet, TESTNET)
        state = replace(
            state.extend(testnet.results), testnet_tier_passed=testnet.passed
        )

        if not testnet.passed:
            log.warning("Testnet tests failed. Skipping mainnet tests.")
            return state.extend(skipped(plan.mainnet, "mainnet", TESTNET_FAILED))

        if plan.mainnet:
            log.info("=== MAINNET TESTS ===")
        mainnet = await self.run_tier(account, plan.mainnet, MAINNET)
        return replace(
            state.extend(mainnet.results), mainnet_tier_aborted=mainnet.aborted
        )

    async def run_tier(
        self,
        account: TestAccount,
        cases: Sequence[TestCase],
        policy: TierPolicy,
    ) -> TierRun:
        """Group cases by target route and run the groups."""
        return await self.run_groups(account, group_by_target(cases), policy)

    async def run_groups(
        self,
        account: TestAccount,
        groups: Sequence[TargetGroup],
        policy: TierPolicy,
    ) -> TierRun:
        """Run groups in order.

        With cross-group cascading, a failed group skips every case of the
        groups after it without registering them.
        """
        results: list[TestResult] = []
        aborted = False

        for group in groups:
            if aborted:
                results.extend(
                    skipped(group.cases, policy.tier, PREVIOUS_GROUP_FAILED)
                )
                continue

            group_run = await self.run_group(account, group, policy.tier)
            results.extend(group_run.results)

            if group_run.failed and policy.cascade_across_groups:
                log.warning(
                    "Group %s (%s) failed, skipping remaining %s groups",
                    group.target.name,
                    group.target_asset,
                    policy.tier,
                )
                aborted = True

        return TierRun(results=results, aborted=aborted)

    async def run_group(
        self, account: TestAccount, group: TargetGroup, tier: Tier
    ) -> GroupRun:
        """Register the group's route once, then run its cases in order.

        A registration failure fails the first case and skips the rest, the
        same way a failing case does.
        """
        log.info("Target: %s (%s)", group.target.name, group.target_asset)

        start = self.runner.clock.now()
        try:
            await self.register_group(account, group)
        except Exception as exc:
            duration_ms = round((self.runner.clock.now() - start) * 1000)
            log.error(
                "Registration failed for %s (%s): %s",
                group.target.name,
                group.target_asset,
                exc,
                exc_info=exc,
            )
            first, *rest = group.cases
            return GroupRun(
                results=[
                    TestResult.for_case(
                        first,
                        tier=tier,
                        outcome="fail",
                        duration_ms=duration_ms,
                        error=str(exc) or type(exc).__name__,
                    ),
                    *skipped(rest, tier, PREVIOUS_TEST_FAILED),
                ],
                failed=True,
            )

        results: list[TestResult] = []
        failed = False
        for case in group.cases:
            if failed:
                results.append(
                    TestResult.for_case(
                        case, tier=tier, outcome="skip", error=PREVIOUS_TEST_FAILED
                    )
                )
                continue

            result = await self.runner.run_case(account.address, case, tier)
            results.append(result)
            failed = result.outcome == "fail"

        return GroupRun(results=results, failed=failed)

    async def register_group(self, account: TestAccount, group: TargetGroup) -> None:
        """Authorize sessions on the group's chains and register its route."""
        chains = group.session_chains()
        log.info(
            "Registering route %s (%s) with sessions on: %s",
            group.target.name,
            group.target_asset,
            ", ".join(chain.name for chain in chains),
        )
        session = await account.authorize_session(chains)
        await self.registrar.register_route(
            account.address,
            account.init_data,
            session,
            group.target,
            group.target_asset,
        )

    async def sweep_routes(
        self, account: TestAccount, plan: TestPlan, recipient: str
    ) -> None:
        """Sweep each distinct target route of both tiers once.

        Sweep failures are logged; recorded outcomes are already final.
        """
        for group in group_by_target([*plan.testnet, *plan.mainnet]):
            try:
                await sweep(
                    account,
                    self.runner.balances,
                    group.target,
                    group.target_asset,
                    recipient,
                )
            except Exception as exc:
                log.error(
                    "Sweep failed for %s (%s): %s",
                    group.target.name,
                    group.target_asset,
                    exc,
                    exc_info=exc,
                )
