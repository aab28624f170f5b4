"""Tests for the test orchestrator."""

from collections.abc import Sequence
from unittest.mock import AsyncMock

import pytest

from bridge_e2e.models.plan import TestCase, TestPlan, group_by_target
from bridge_e2e.models.result import TestResult
from bridge_e2e.orchestrator import (
    MAINNET,
    PREVIOUS_GROUP_FAILED,
    PREVIOUS_TEST_FAILED,
    TESTNET,
    TESTNET_FAILED,
    RunState,
    TestOrchestrator,
)
from bridge_e2e.testing.factories import TestCaseFactory
from bridge_e2e.testing.fakes import FakeAccount, FakeBridge, FakeRegistrar

RECIPIENT = "0x08EAfb4AA851AA866a20d3a66b5AB99C418D2181"


def case(source: str, source_asset: str, target: str, target_asset: str) -> TestCase:
    """Build a test case from chain keys and asset symbols."""
    return TestCaseFactory.build(
        source_chain=source,
        source_asset=source_asset,
        target_chain=target,
        target_asset=target_asset,
    )


def outcomes(results: Sequence[TestResult]) -> list[tuple[str, str | None]]:
    """(outcome, error) pairs for compact assertions."""
    return [(r.outcome, r.error) for r in results]


class Reports:
    """Report callback recording what it was given."""

    def __init__(self) -> None:
        self.calls: list[Sequence[TestResult]] = []

    def __call__(self, results: Sequence[TestResult]) -> None:
        self.calls.append(results)


async def run_plan(
    orchestrator: TestOrchestrator,
    account: FakeAccount,
    testnet: Sequence[TestCase] = (),
    mainnet: Sequence[TestCase] = (),
) -> RunState:
    """Run a plan with a throwaway report callback."""
    plan = TestPlan(version="1.0", testnet=list(testnet), mainnet=list(mainnet))
    return await orchestrator.run(account, plan, RECIPIENT, Reports())


class TestGroupScheduling:
    """Tests for groups within one tier."""

    async def test_failure_skips_rest_of_group_without_funding(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """After a timeout, later cases of the group are skipped unfunded."""
        bridge.routes[("base", "ETH")] = ("plasma", "USDT0")
        cases = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "ETH", "plasma", "USDT0"),
        ]

        state = await run_plan(orchestrator, account, mainnet=cases)

        assert outcomes(state.results) == [
            ("fail", "Timeout"),
            ("skip", PREVIOUS_TEST_FAILED),
        ]
        assert [t[:2] for t in bridge.transfers] == [("optimism", "USDC")]
        assert state.results[1].duration_ms is None

    async def test_registers_each_group_once_before_its_cases(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
        registrar: FakeRegistrar,
    ) -> None:
        """One registration per group, re-derived even for a repeated route."""
        bridge.routes[("base", "USDC")] = ("plasma", "USDT0")
        bridge.routes[("optimism", "USDC")] = ("plasma", "USDT0")
        bridge.routes[("arbitrum", "USDC")] = ("optimism", "ETH")
        plan_cases = [
            case("base", "USDC", "plasma", "USDT0"),
            case("arbitrum", "USDC", "optimism", "ETH"),
            case("optimism", "USDC", "plasma", "USDT0"),
        ]

        state = await run_plan(
            orchestrator,
            account,
            testnet=plan_cases[:2],
            mainnet=plan_cases,
        )

        assert [key for _, key in registrar.registrations] == [
            ("plasma", "USDT0"),
            ("optimism", "ETH"),
            ("plasma", "USDT0"),
            ("optimism", "ETH"),
        ]
        assert all(r.outcome == "pass" for r in state.results)

    async def test_session_covers_source_chains_and_target(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
    ) -> None:
        """Sessions span distinct source chains in order, then the target."""
        cases = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "ETH", "plasma", "USDT0"),
            case("optimism", "ETH", "plasma", "USDT0"),
            case("base", "USDC", "base", "USDC"),
        ]

        await run_plan(orchestrator, account, mainnet=cases)

        assert account.sessions[0] == ["optimism", "base", "plasma"]

    async def test_session_for_same_chain_route_lists_chain_once(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
    ) -> None:
        """A target that is also a source is not repeated."""
        cases = [case("base", "USDC", "base", "USDC")]

        await run_plan(orchestrator, account, testnet=cases)

        assert account.sessions == [["base"]]

    async def test_registration_failure_fails_first_and_skips_rest(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
        registrar: FakeRegistrar,
    ) -> None:
        """A rejected registration fails the first case and skips the others."""
        registrar.failing_targets.add(("plasma", "USDT0"))
        cases = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "ETH", "plasma", "USDT0"),
            case("arbitrum", "ETH", "plasma", "USDT0"),
        ]

        state = await run_plan(orchestrator, account, testnet=cases)

        testnet = [r for r in state.results if r.tier == "testnet"]
        assert outcomes(testnet) == [
            ("fail", "Registration failed (500): internal error"),
            ("skip", PREVIOUS_TEST_FAILED),
            ("skip", PREVIOUS_TEST_FAILED),
        ]
        assert bridge.transfers == []

    async def test_session_failure_counts_as_registration_failure(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """Errors while authorizing the session fail the group the same way."""
        account.authorize_session = AsyncMock(  # type: ignore[method-assign]
            side_effect=RuntimeError("Failed to sign session: 502 Bad Gateway")
        )
        cases = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "ETH", "plasma", "USDT0"),
        ]

        state = await run_plan(orchestrator, account, mainnet=cases)

        assert outcomes(state.results) == [
            ("fail", "Failed to sign session: 502 Bad Gateway"),
            ("skip", PREVIOUS_TEST_FAILED),
        ]
        assert bridge.transfers == []

    async def test_testnet_groups_do_not_cascade(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """A failing testnet group does not stop later testnet groups."""
        bridge.routes[("base-sepolia", "USDC")] = ("optimism-sepolia", "ETH")
        cases = [
            case("base-sepolia", "USDC", "arbitrum-sepolia", "USDC"),
            case("base-sepolia", "USDC", "optimism-sepolia", "ETH"),
        ]

        run = await orchestrator.run_tier(account, cases, TESTNET)

        assert outcomes(run.results) == [("fail", "Timeout"), ("pass", None)]
        assert run.aborted is False

    async def test_mainnet_failed_group_skips_later_groups(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
        registrar: FakeRegistrar,
    ) -> None:
        """A failing mainnet group skips every later group unregistered."""
        bridge.routes[("base", "USDC")] = ("optimism", "ETH")
        cases = [
            case("base", "USDC", "arbitrum", "ETH"),
            case("base", "USDC", "optimism", "ETH"),
            case("arbitrum", "USDC", "plasma", "USDT0"),
            case("base", "USDC", "plasma", "USDT0"),
        ]

        state = await run_plan(orchestrator, account, mainnet=cases)

        assert outcomes(state.results) == [
            ("fail", "Timeout"),
            ("skip", PREVIOUS_GROUP_FAILED),
            ("skip", PREVIOUS_GROUP_FAILED),
            ("skip", PREVIOUS_GROUP_FAILED),
        ]
        assert [key for _, key in registrar.registrations] == [("arbitrum", "ETH")]
        assert state.mainnet_tier_aborted is True

    async def test_results_follow_group_order(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """Cases are run group by group in first-seen order."""
        bridge.routes[("base", "USDC")] = ("plasma", "USDT0")
        bridge.routes[("optimism", "USDC")] = ("arbitrum", "ETH")
        bridge.routes[("arbitrum", "USDC")] = ("plasma", "USDT0")
        cases = [
            case("base", "USDC", "plasma", "USDT0"),
            case("optimism", "USDC", "arbitrum", "ETH"),
            case("arbitrum", "USDC", "plasma", "USDT0"),
        ]

        run = await orchestrator.run_groups(account, group_by_target(cases), MAINNET)

        assert [r.source_chain for r in run.results] == [
            "Base",
            "Arbitrum One",
            "OP Mainnet",
        ]


class TestTierGate:
    """Tests for gating mainnet on testnet."""

    async def test_testnet_failure_skips_all_mainnet_cases(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
        registrar: FakeRegistrar,
    ) -> None:
        """Mainnet is skipped without funding or registration."""
        testnet = [case("base-sepolia", "USDC", "optimism-sepolia", "ETH")]
        mainnet = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "USDC", "arbitrum", "ETH"),
        ]

        state = await run_plan(orchestrator, account, testnet, mainnet)

        assert state.testnet_tier_passed is False
        mainnet_results = [r for r in state.results if r.tier == "mainnet"]
        assert outcomes(mainnet_results) == [
            ("skip", TESTNET_FAILED),
            ("skip", TESTNET_FAILED),
        ]
        assert [key for _, key in registrar.registrations] == [
            ("optimism-sepolia", "ETH")
        ]
        assert all(t[0] == "base-sepolia" for t in bridge.transfers)

    async def test_empty_testnet_counts_as_passed(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """With no testnet cases, mainnet runs."""
        bridge.routes[("optimism", "USDC")] = ("plasma", "USDT0")
        mainnet = [case("optimism", "USDC", "plasma", "USDT0")]

        state = await run_plan(orchestrator, account, mainnet=mainnet)

        assert state.testnet_tier_passed is True
        assert outcomes(state.results) == [("pass", None)]

    async def test_passing_testnet_runs_mainnet(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """Mainnet failures leave testnet results untouched."""
        bridge.routes[("base-sepolia", "USDC")] = ("optimism-sepolia", "ETH")
        testnet = [case("base-sepolia", "USDC", "optimism-sepolia", "ETH")]
        mainnet = [case("base", "USDC", "arbitrum", "ETH")]

        state = await run_plan(orchestrator, account, testnet, mainnet)

        assert state.testnet_tier_passed is True
        assert [(r.tier, r.outcome) for r in state.results] == [
            ("testnet", "pass"),
            ("mainnet", "fail"),
        ]
        assert state.has_failures is True

    async def test_every_case_gets_exactly_one_result(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """Result count per tier equals case count per tier."""
        bridge.routes[("base", "USDC")] = ("plasma", "USDT0")
        mainnet = [
            case("base", "USDC", "plasma", "USDT0"),
            case("optimism", "ETH", "plasma", "USDT0"),
            case("arbitrum", "WETH", "plasma", "USDT0"),
            case("base", "USDC", "arbitrum", "ETH"),
            case("base", "USDC", "optimism", "ETH"),
        ]

        state = await run_plan(orchestrator, account, mainnet=mainnet)

        assert len([r for r in state.results if r.tier == "mainnet"]) == 5
        assert [r.outcome for r in state.results] == [
            "pass",
            "fail",
            "skip",
            "skip",
            "skip",
        ]


class TestReportingAndSweeping:
    """Tests for the report and sweep stages."""

    async def test_reports_all_results_before_sweeping(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """The report sees every result while nothing has been swept yet."""
        bridge.routes[("optimism", "USDC")] = ("plasma", "USDT0")
        plan = TestPlan(
            version="1.0", mainnet=[case("optimism", "USDC", "plasma", "USDT0")]
        )
        sweeps_at_report: list[int] = []

        def report(results: Sequence[TestResult]) -> None:
            sweeps_at_report.append(len(account.sweeps))
            assert len(results) == 1

        state = await orchestrator.run(account, plan, RECIPIENT, report)

        assert sweeps_at_report == [0]
        assert account.sweeps == [("plasma", "USDT0", 1, RECIPIENT)]
        assert state.has_failures is False

    async def test_sweeps_even_when_report_raises(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """A failing report callback still leaves the funds swept."""
        bridge.routes[("optimism", "USDC")] = ("plasma", "USDT0")
        plan = TestPlan(
            version="1.0", mainnet=[case("optimism", "USDC", "plasma", "USDT0")]
        )

        def report(results: Sequence[TestResult]) -> None:
            raise OSError("No such file or directory")

        with pytest.raises(OSError, match="No such file"):
            await orchestrator.run(account, plan, RECIPIENT, report)

        assert account.sweeps == [("plasma", "USDT0", 1, RECIPIENT)]

    async def test_sweeps_each_target_route_once(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """Routes shared across tiers are swept once; empty routes not at all."""
        bridge.balances[("plasma", "USDT0")] = 7
        testnet = [case("base", "USDC", "plasma", "USDT0")]
        mainnet = [
            case("optimism", "USDC", "plasma", "USDT0"),
            case("base", "USDC", "arbitrum", "ETH"),
        ]
        plan = TestPlan(version="1.0", testnet=testnet, mainnet=mainnet)

        await orchestrator.sweep_routes(account, plan, RECIPIENT)

        assert account.sweeps == [("plasma", "USDT0", 7, RECIPIENT)]

    async def test_sweep_failure_does_not_change_results(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
        bridge: FakeBridge,
    ) -> None:
        """A failing sweep is logged and the run still passes."""
        bridge.routes[("optimism", "USDC")] = ("plasma", "USDT0")
        bridge.routes[("base", "USDC")] = ("arbitrum", "ETH")
        account.sweep_out = AsyncMock(  # type: ignore[method-assign]
            side_effect=RuntimeError("Failed to submit transfer: 500")
        )
        plan = TestPlan(
            version="1.0",
            mainnet=[
                case("optimism", "USDC", "plasma", "USDT0"),
                case("base", "USDC", "arbitrum", "ETH"),
            ],
        )

        state = await orchestrator.run(account, plan, RECIPIENT, Reports())

        assert [r.outcome for r in state.results] == ["pass", "pass"]
        assert state.has_failures is False
        assert account.sweep_out.await_count == 2

    async def test_run_state_carries_account(
        self,
        orchestrator: TestOrchestrator,
        account: FakeAccount,
    ) -> None:
        """The run state records the account and its init data."""
        state = await run_plan(orchestrator, account)

        assert state.address == account.address
        assert state.init_data == account.init_data
        assert state.results == ()
        assert state.testnet_tier_passed is True
        assert state.mainnet_tier_aborted is False
