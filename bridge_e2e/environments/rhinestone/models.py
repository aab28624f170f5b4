"""Pydantic models for Rhinestone service responses."""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ServiceModel(BaseModel):
    """Response model reading camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccountResponse(ServiceModel):
    """Smart account created by the account service."""

    address: str
    factory: str
    factory_data: str


class HashAndChainId(ServiceModel):
    """Session digest for one chain; chain IDs may arrive as strings."""

    chain_id: int
    session_digest: str


class SessionDetailsResponse(ServiceModel):
    """Signed session enablement for a set of chains."""

    hashes_and_chain_ids: Sequence[HashAndChainId]
    signature: str


class IntentResponse(ServiceModel):
    """Submitted transaction intent."""

    id: int | str
