"""Smart account operations through the account service.

The account service is a thin HTTP wrapper around the Rhinestone account SDK.
It is stateless: every call carries the owner key of the throwaway test
account, and the service derives the account from it.
"""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import (
    AccountFactory,
    InitData,
    SessionAuthorization,
    SessionDigest,
    TestAccount,
)
from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.environments.rhinestone.models import (
    AccountResponse,
    IntentResponse,
    SessionDetailsResponse,
)

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class AccountServiceClient(AccountFactory):
    """Client of the account service HTTP API."""

    config: RhinestoneConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: RhinestoneConfig
    ) -> AsyncGenerator["AccountServiceClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.account_service_url,
            headers={"x-api-key": config.api_key.get_secret_value()},
        ) as session:
            yield cls(config=config, session=session)

    async def create_test_account(self, owner_key: str) -> "RemoteTestAccount":
        """Create the session-enabled smart account owned by `owner_key`."""
        data = await self.post(
            "accounts", {"ownerPrivateKey": owner_key}, action="create account"
        )
        account = AccountResponse.model_validate(data)
        log.info("Created test account %s", account.address)
        return RemoteTestAccount(
            client=self,
            owner_key=owner_key,
            account_address=account.address,
            account_init_data=InitData(
                factory=account.factory, factory_data=account.factory_data
            ),
        )

    async def post(
        self, url: str, payload: dict[str, Any], *, action: str
    ) -> dict[str, Any]:
        """POST a JSON payload and return the JSON response."""
        async with self.session.post(url, json=payload) as response:
            if not response.ok:
                text = await response.text()
                raise RuntimeError(f"Failed to {action}: {response.status} {text}")
            data: dict[str, Any] = await response.json()
        return data


@dataclass(frozen=True, kw_only=True)
class RemoteTestAccount(TestAccount):
    """Test account operated through the account service."""

    client: AccountServiceClient
    owner_key: str = field(repr=False)
    account_address: str
    account_init_data: InitData

    @property
    def address(self) -> str:
        return self.account_address

    @property
    def init_data(self) -> InitData:
        return self.account_init_data

    async def authorize_session(
        self, chains: Sequence[ChainSpec]
    ) -> SessionAuthorization:
        """Enable the deposit service's session signer on the given chains."""
        data = await self.client.post(
            f"accounts/{self.account_address}/sessions",
            {
                "ownerPrivateKey": self.owner_key,
                "sessionSigner": self.client.config.session_signer_address,
                "chainIds": [chain.chain_id for chain in chains],
            },
            action="sign session",
        )
        details = SessionDetailsResponse.model_validate(data)
        log.info(
            "Session details prepared for %d chain(s)",
            len(details.hashes_and_chain_ids),
        )
        return SessionAuthorization(
            digests=[
                SessionDigest(chain_id=entry.chain_id, digest=entry.session_digest)
                for entry in details.hashes_and_chain_ids
            ],
            signature=details.signature,
        )

    async def sweep_out(
        self, chain: ChainSpec, asset: str, amount: int, recipient: str
    ) -> str:
        """Submit an intent moving `amount` of `asset` to `recipient`."""
        data = await self.client.post(
            f"accounts/{self.account_address}/transfers",
            {
                "ownerPrivateKey": self.owner_key,
                "chainId": chain.chain_id,
                "token": self.client.config.token_address(chain, asset),
                "amount": str(amount),
                "recipient": recipient,
            },
            action="submit transfer",
        )
        return str(IntentResponse.model_validate(data).id)
