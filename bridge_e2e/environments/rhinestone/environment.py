"""Assembly of the Rhinestone environment's collaborators."""

from collections.abc import AsyncGenerator
from contextlib import AsyncExitStack, asynccontextmanager

from eth_account import Account

from bridge_e2e.environments.base import BridgeEnvironment
from bridge_e2e.environments.rhinestone.account_service import AccountServiceClient
from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.environments.rhinestone.deposit_processor import (
    DepositProcessorClient,
)
from bridge_e2e.environments.rhinestone.onchain import (
    TreasuryFunder,
    Web3BalanceReader,
    Web3Chains,
)


@asynccontextmanager
async def open_rhinestone_environment(
    config: RhinestoneConfig,
) -> AsyncGenerator[BridgeEnvironment, None]:
    """Open HTTP sessions and RPC clients for one run, closing them after."""
    chains = Web3Chains(
        config=config,
        treasury=Account.from_key(config.funding_private_key.get_secret_value()),
    )

    async with AsyncExitStack() as stack:
        stack.push_async_callback(chains.close)
        registrar = await stack.enter_async_context(
            DepositProcessorClient.from_config(config)
        )
        accounts = await stack.enter_async_context(
            AccountServiceClient.from_config(config)
        )
        yield BridgeEnvironment(
            balances=Web3BalanceReader(chains=chains),
            funder=TreasuryFunder(chains=chains, receipt_timeout=config.receipt_timeout),
            registrar=registrar,
            accounts=accounts,
        )
