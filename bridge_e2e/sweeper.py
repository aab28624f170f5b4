"""Returning residual test funds to an operator address."""

import logging

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import BalanceReader, TestAccount

log = logging.getLogger(__name__)


async def sweep(
    account: TestAccount,
    balances: BalanceReader,
    target_chain: ChainSpec,
    target_asset: str,
    recipient: str,
) -> str | None:
    """Move the account's whole balance of an asset to the recipient.

    Returns:
        The submitted intent ID, or None when there was nothing to sweep

    """
    balance = await balances.get_balance(target_chain, target_asset, account.address)
    if balance == 0:
        log.info("No %s to sweep on %s", target_asset, target_chain.name)
        return None

    log.info(
        "Sweeping %d %s on %s to %s",
        balance,
        target_asset,
        target_chain.name,
        recipient,
    )
    intent_id = await account.sweep_out(target_chain, target_asset, balance, recipient)
    log.info("Sweep intent submitted: %s", intent_id)
    return intent_id
