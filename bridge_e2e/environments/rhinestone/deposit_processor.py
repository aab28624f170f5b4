"""Deposit processor client for route registration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from bridge_e2e.chains import ChainSpec
from bridge_e2e.environments.base import (
    InitData,
    RouteRegistrar,
    SessionAuthorization,
)
from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.errors import RegistrationError

log = logging.getLogger(__name__)


def session_details_payload(session: SessionAuthorization) -> dict[str, Any]:
    """Serialize session details; chain IDs are sent as decimal strings."""
    return {
        "hashesAndChainIds": [
            {"chainId": str(digest.chain_id), "sessionDigest": digest.digest}
            for digest in session.digests
        ],
        "signature": session.signature,
    }


@dataclass(frozen=True, kw_only=True)
class DepositProcessorClient(RouteRegistrar):
    """Client of the deposit processor HTTP API."""

    config: RhinestoneConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: RhinestoneConfig
    ) -> AsyncGenerator["DepositProcessorClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.deposit_processor_url,
            headers={"x-api-key": config.api_key.get_secret_value()},
        ) as session:
            yield cls(config=config, session=session)

    async def register_route(
        self,
        address: str,
        init_data: InitData,
        session: SessionAuthorization,
        target_chain: ChainSpec,
        target_asset: str,
    ) -> None:
        """Register the account with its target chain and token."""
        payload = {
            "account": {
                "address": address,
                "accountParams": {
                    "factory": init_data.factory,
                    "factoryData": init_data.factory_data,
                    "sessionDetails": session_details_payload(session),
                },
                "target": {
                    "chain": target_chain.caip2,
                    "token": self.config.token_address(target_chain, target_asset),
                },
            }
        }

        log.info(
            "Registering %s for target %s (%s)",
            address,
            target_chain.caip2,
            target_asset,
        )

        async with self.session.post("register", json=payload) as response:
            if not response.ok:
                text = await response.text()
                raise RegistrationError(
                    f"Registration failed ({response.status}): {text}"
                )
            await response.read()
