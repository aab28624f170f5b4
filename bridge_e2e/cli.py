"""CLI entry point for the bridge end-to-end harness."""

import argparse
import asyncio
import json
import logging
import random
import secrets
import sys
from collections.abc import Sequence
from pathlib import Path

from bridge_e2e.environments.loading import (
    available_environments,
    load_environment_manifest,
)
from bridge_e2e.models.result import TestResult
from bridge_e2e.orchestrator import TestOrchestrator
from bridge_e2e.plan_loader import load_test_plan
from bridge_e2e.poller import PollPolicy
from bridge_e2e.report import format_output, render_report
from bridge_e2e.runner import CaseRunner

DEFAULT_RECIPIENT = "0x08EAfb4AA851AA866a20d3a66b5AB99C418D2181"


def generate_owner_key() -> str:
    """Random private key for a throwaway test account owner."""
    return f"0x{secrets.token_hex(32)}"


def print_report(results: Sequence[TestResult], output_json: Path | None) -> None:
    """Print the result tables and optionally write the JSON summary."""
    print(render_report(results))
    if output_json is None:
        return
    try:
        output_json.write_text(json.dumps(format_output(results), indent=2))
    except OSError as exc:
        logging.getLogger("bridge_e2e").error(
            "Failed to write results to %s: %s", output_json, exc
        )


async def run(
    environment_key: str,
    environment_config_json: str,
    plan_path: Path,
    recipient: str = DEFAULT_RECIPIENT,
    owner_key: str | None = None,
    policy: PollPolicy | None = None,
    seed: int | None = None,
    output_json: Path | None = None,
) -> int:
    """Run the test plan and return exit code."""
    log = logging.getLogger("bridge_e2e")

    log.info("Loading environment: %s", environment_key)
    manifest = load_environment_manifest(environment_key)

    config_dict = json.loads(environment_config_json)
    config = manifest.config_cls(**config_dict)

    plan = await load_test_plan(plan_path)
    log.info(
        "Loaded plan %s: %d testnet case(s), %d mainnet case(s)",
        plan_path,
        len(plan.testnet),
        len(plan.mainnet),
    )

    async with manifest.environment_factory(config) as environment:
        account = await environment.accounts.create_test_account(
            owner_key or generate_owner_key()
        )
        runner = CaseRunner(
            balances=environment.balances,
            funder=environment.funder,
            policy=policy or PollPolicy(),
            rng=random.Random(seed),
        )
        orchestrator = TestOrchestrator(
            runner=runner, registrar=environment.registrar
        )
        state = await orchestrator.run(
            account,
            plan,
            recipient,
            report=lambda results: print_report(results, output_json),
        )

    return 1 if state.has_failures else 0


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Verify cross-chain deposit routes end to end"
    )
    parser.add_argument(
        "--environment",
        default="rhinestone",
        help=f"Environment key (installed: {', '.join(available_environments())})",
    )
    parser.add_argument(
        "--environment-config",
        required=True,
        help="JSON configuration for the environment",
    )
    parser.add_argument(
        "--plan",
        type=Path,
        default=Path("plan.yaml"),
        help="Path to the YAML test plan",
    )
    parser.add_argument(
        "--recipient",
        default=DEFAULT_RECIPIENT,
        help="Address receiving swept funds after the run",
    )
    parser.add_argument(
        "--owner-key",
        default=None,
        help="Owner private key of the test account (random when omitted)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=0.5,
        help="Seconds between target balance reads",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120.0,
        help="Seconds to wait for a bridged balance before failing a case",
    )
    parser.add_argument(
        "--progress-interval",
        type=float,
        default=10.0,
        help="Seconds between progress log lines while waiting",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for randomized funding amounts",
    )
    parser.add_argument(
        "--output-json",
        type=Path,
        default=None,
        help="Write a JSON summary of the results to this path",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            environment_key=args.environment,
            environment_config_json=args.environment_config,
            plan_path=args.plan,
            recipient=args.recipient,
            owner_key=args.owner_key,
            policy=PollPolicy(
                poll_interval=args.poll_interval,
                timeout=args.timeout,
                progress_interval=args.progress_interval,
            ),
            seed=args.seed,
            output_json=args.output_json,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
