"""Configuration for the Rhinestone environment."""

from collections.abc import Mapping

from pydantic import BaseModel, Field, SecretStr, field_validator

from bridge_e2e.chains import ChainSpec

NATIVE_TOKEN_ADDRESS = "0x0000000000000000000000000000000000000000"


class RhinestoneConfig(BaseModel):
    """Configuration for the Rhinestone environment.

    Secrets:
    - api_key: Rhinestone API key, sent as x-api-key to both services
    - funding_private_key: Treasury key that funds source chains
    """

    api_key: SecretStr
    funding_private_key: SecretStr
    deposit_processor_url: str
    account_service_url: str = "http://localhost:3000/"
    session_signer_address: str = Field(
        ..., description="Deposit service session signer enabled on the account"
    )
    rpc_urls: Mapping[str, str] = Field(
        default_factory=dict, description="RPC URL overrides by chain key"
    )
    token_addresses: Mapping[str, Mapping[str, str]] = Field(
        default_factory=dict,
        description="Token address overrides by chain key, then token symbol",
    )
    receipt_timeout: float = Field(
        default=120.0, description="Seconds to wait for funding receipts"
    )

    @field_validator("deposit_processor_url", "account_service_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        # Relative request paths are joined onto the base URL
        return value if value.endswith("/") else f"{value}/"

    def rpc_url(self, chain: ChainSpec) -> str:
        """RPC endpoint for a chain, preferring the configured override."""
        return self.rpc_urls.get(chain.key, chain.rpc_url)

    def token_address(self, chain: ChainSpec, symbol: str) -> str:
        """Token address on a chain; the zero address for the native asset."""
        if chain.is_native(symbol):
            return NATIVE_TOKEN_ADDRESS
        overrides = self.token_addresses.get(chain.key, {})
        if symbol in overrides:
            return overrides[symbol]
        return chain.token_address(symbol)
