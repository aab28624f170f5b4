"""Registry of the chains and tokens the harness knows how to test."""

from collections.abc import Mapping

from pydantic import Field

from bridge_e2e.errors import UnknownChainError, UnknownTokenError
from bridge_e2e.models.base import Model


class ChainSpec(Model):
    """Static description of an EVM chain."""

    key: str = Field(..., description="Short identifier used in test plans")
    name: str = Field(..., description="Human-readable chain name")
    chain_id: int
    testnet: bool = False
    native_symbol: str = "ETH"
    rpc_url: str = Field(..., description="Default public RPC endpoint")
    tokens: Mapping[str, str] = Field(
        default_factory=dict, description="Token symbol to contract address"
    )

    @property
    def caip2(self) -> str:
        """CAIP-2 chain identifier (e.g. eip155:8453)."""
        return f"eip155:{self.chain_id}"

    def is_native(self, asset: str) -> bool:
        """Whether the asset symbol is the chain's native currency."""
        return asset == self.native_symbol

    def token_address(self, symbol: str) -> str:
        """Look up a token contract address.

        Raises:
            UnknownTokenError: If the token is not deployed on this chain

        """
        try:
            return self.tokens[symbol]
        except KeyError:
            raise UnknownTokenError(
                f"Token {symbol} is not known on {self.name}"
            ) from None


WETH_OP_STACK = "0x4200000000000000000000000000000000000006"

CHAINS: Mapping[str, ChainSpec] = {
    chain.key: chain
    for chain in (
        ChainSpec(
            key="arbitrum",
            name="Arbitrum One",
            chain_id=42161,
            rpc_url="https://arb1.arbitrum.io/rpc",
            tokens={
                "USDC": "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
                "WETH": "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1",
            },
        ),
        ChainSpec(
            key="arbitrum-sepolia",
            name="Arbitrum Sepolia",
            chain_id=421614,
            testnet=True,
            rpc_url="https://sepolia-rollup.arbitrum.io/rpc",
            tokens={
                "USDC": "0x75faf114eafb1BDbe2F0316DF893fd58CE46AA4d",
                "WETH": "0x980B62Da83eFf3D4576C647993b0c1D7faf17c73",
            },
        ),
        ChainSpec(
            key="base",
            name="Base",
            chain_id=8453,
            rpc_url="https://mainnet.base.org",
            tokens={
                "USDC": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
                "WETH": WETH_OP_STACK,
            },
        ),
        ChainSpec(
            key="base-sepolia",
            name="Base Sepolia",
            chain_id=84532,
            testnet=True,
            rpc_url="https://sepolia.base.org",
            tokens={
                "USDC": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
                "WETH": WETH_OP_STACK,
            },
        ),
        ChainSpec(
            key="optimism",
            name="OP Mainnet",
            chain_id=10,
            rpc_url="https://mainnet.optimism.io",
            tokens={
                "USDC": "0x0b2C639c533813f4Aa9D7837CAf62653d097Ff85",
                "WETH": WETH_OP_STACK,
            },
        ),
        ChainSpec(
            key="optimism-sepolia",
            name="OP Sepolia",
            chain_id=11155420,
            testnet=True,
            rpc_url="https://sepolia.optimism.io",
            tokens={
                "USDC": "0x5fd84259d66Cd46123540766Be93DFE6D43130D7",
                "WETH": WETH_OP_STACK,
            },
        ),
        ChainSpec(
            key="plasma",
            name="Plasma",
            chain_id=9745,
            native_symbol="XPL",
            rpc_url="https://rpc.plasma.to",
            tokens={"USDT0": "0xB8CE59FC3717ada4C02eaDF9682A9e934F625ebb"},
        ),
        # USDT0 address on the Plasma testnet must come from token overrides
        ChainSpec(
            key="plasma-testnet",
            name="Plasma Testnet",
            chain_id=9746,
            testnet=True,
            native_symbol="XPL",
            rpc_url="https://testnet-rpc.plasma.to",
        ),
    )
}


def get_chain(key: str) -> ChainSpec:
    """Return the chain registered under a key.

    Raises:
        UnknownChainError: If no chain is registered under the key

    """
    try:
        return CHAINS[key]
    except KeyError:
        raise UnknownChainError(
            f"Unknown chain '{key}'. Available chains: {sorted(CHAINS)}"
        ) from None
