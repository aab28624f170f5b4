"""Balance reads and treasury funding over JSON-RPC."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.contract import AsyncContract
from web3.exceptions import Web3Exception
from web3.middleware import SignAndSendRawMiddlewareBuilder

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import BalanceReader, Funder
from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.errors import BalanceReadError, FundingError

log = logging.getLogger(__name__)

ERC20_ABI: Sequence[Mapping[str, Any]] = [
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "transfer",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "type": "function",
        "name": "deposit",
        "stateMutability": "payable",
        "inputs": [],
        "outputs": [],
    },
]

WRAPPED_NATIVE_ASSETS = frozenset(["WETH"])

# ValueError covers malformed addresses
RPC_ERRORS = (Web3Exception, aiohttp.ClientError, TimeoutError, ValueError)


@dataclass(frozen=True, kw_only=True)
class Web3Chains:
    """One AsyncWeb3 client per chain, signing as the treasury."""

    config: RhinestoneConfig
    treasury: LocalAccount = field(repr=False)
    _clients: dict[int, AsyncWeb3] = field(default_factory=dict, repr=False)

    def client(self, chain: ChainSpec) -> AsyncWeb3:
        """Return the chain's client, creating it on first use."""
        if (w3 := self._clients.get(chain.chain_id)) is None:
            w3 = AsyncWeb3(AsyncHTTPProvider(self.config.rpc_url(chain)))
            w3.middleware_onion.inject(
                SignAndSendRawMiddlewareBuilder.build(self.treasury), layer=0
            )
            self._clients[chain.chain_id] = w3
        return w3

    def token(self, chain: ChainSpec, symbol: str) -> AsyncContract:
        """ERC-20 contract for a token symbol on a chain."""
        address = self.config.token_address(chain, symbol)
        return self.client(chain).eth.contract(
            address=AsyncWeb3.to_checksum_address(address), abi=ERC20_ABI
        )

    async def close(self) -> None:
        """Close the HTTP sessions of all created clients."""
        for w3 in self._clients.values():
            await w3.provider.disconnect()
        self._clients.clear()


@dataclass(frozen=True, kw_only=True)
class Web3BalanceReader(BalanceReader):
    """Reads balances with eth_getBalance or ERC-20 balanceOf."""

    chains: Web3Chains

    async def get_balance(self, chain: ChainSpec, asset: str, address: str) -> int:
        try:
            owner = AsyncWeb3.to_checksum_address(address)
            if chain.is_native(asset):
                balance: int = await self.chains.client(chain).eth.get_balance(owner)
            else:
                token = self.chains.token(chain, asset)
                balance = await token.functions.balanceOf(owner).call()
        except RPC_ERRORS as exc:
            raise BalanceReadError(
                f"Failed to read {asset} balance on {chain.name}: {exc}"
            ) from exc
        return balance


@dataclass(frozen=True, kw_only=True)
class TreasuryFunder(Funder):
    """Funds test accounts from the treasury key.

    Native assets are sent as plain value transfers, tokens with ERC-20
    transfer. For wrapped native tokens, the treasury first wraps whatever
    it lacks of the amount.
    """

    chains: Web3Chains
    receipt_timeout: float = 120.0

    async def transfer(
        self, chain: ChainSpec, asset: str, to_address: str, amount: int
    ) -> None:
        sender = self.chains.treasury.address
        w3 = self.chains.client(chain)

        try:
            recipient = AsyncWeb3.to_checksum_address(to_address)
            if chain.is_native(asset):
                tx_hash = await w3.eth.send_transaction(
                    {"from": sender, "to": recipient, "value": amount}
                )
            else:
                token = self.chains.token(chain, asset)
                if asset in WRAPPED_NATIVE_ASSETS:
                    await self.wrap_shortfall(w3, token, chain, amount)
                tx_hash = await token.functions.transfer(recipient, amount).transact(
                    {"from": sender}
                )
            await self.wait_for_success(w3, tx_hash, f"{asset} transfer")
        except RPC_ERRORS as exc:
            raise FundingError(
                f"Failed to fund {asset} on {chain.name}: {exc}"
            ) from exc

        log.info("Prefunded %d %s to %s on %s", amount, asset, recipient, chain.name)

    async def wrap_shortfall(
        self, w3: AsyncWeb3, token: AsyncContract, chain: ChainSpec, amount: int
    ) -> None:
        """Wrap native currency until the treasury holds `amount` of the token."""
        sender = self.chains.treasury.address
        held: int = await token.functions.balanceOf(sender).call()
        if held >= amount:
            return

        log.info("Wrapping %d wei on %s", amount - held, chain.name)
        tx_hash = await token.functions.deposit().transact(
            {"from": sender, "value": amount - held}
        )
        await self.wait_for_success(w3, tx_hash, "wrap")

    async def wait_for_success(
        self, w3: AsyncWeb3, tx_hash: bytes, description: str
    ) -> None:
        """Wait for a receipt and require a successful status.

        Raises:
            FundingError: If the transaction reverted

        """
        receipt = await w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout
        )
        if receipt["status"] != 1:
            raise FundingError(f"{description} reverted: {AsyncWeb3.to_hex(tx_hash)}")
