"""Abstract collaborators the orchestrator drives.

An environment supplies concrete implementations for reading balances, moving
treasury funds, registering deposit routes and operating the smart account
under test. The orchestrator only depends on these contracts.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from bridge_e2e.chains import ChainSpec


@dataclass(frozen=True, kw_only=True)
class InitData:
    """Counterfactual deployment data of a smart account."""

    factory: str
    factory_data: str


@dataclass(frozen=True, kw_only=True)
class SessionDigest:
    """Session digest enabled on one chain."""

    chain_id: int
    digest: str


@dataclass(frozen=True, kw_only=True)
class SessionAuthorization:
    """Owner-signed enablement of the deposit service's session on a chain set."""

    digests: Sequence[SessionDigest]
    signature: str


class BalanceReader(ABC):
    """Reads native or token balances."""

    @abstractmethod
    async def get_balance(self, chain: ChainSpec, asset: str, address: str) -> int:
        """Read a balance in the asset's smallest unit.

        Raises:
            BalanceReadError: If the chain cannot be queried

        """


class Funder(ABC):
    """Moves assets from the treasury to test accounts."""

    @abstractmethod
    async def transfer(
        self, chain: ChainSpec, asset: str, to_address: str, amount: int
    ) -> None:
        """Send `amount` of `asset` to `to_address` and wait for confirmation.

        Raises:
            FundingError: If the transfer (or wrap) fails or does not confirm

        """


class RouteRegistrar(ABC):
    """Binds an account to a target route on the deposit processor."""

    @abstractmethod
    async def register_route(
        self,
        address: str,
        init_data: InitData,
        session: SessionAuthorization,
        target_chain: ChainSpec,
        target_asset: str,
    ) -> None:
        """Register the account so deposits are bridged to the target route.

        Raises:
            RegistrationError: If the deposit processor rejects the binding

        """


class TestAccount(ABC):
    """Smart account that receives test deposits."""

    __test__ = False

    @property
    @abstractmethod
    def address(self) -> str:
        """Account address."""

    @property
    @abstractmethod
    def init_data(self) -> InitData:
        """Factory and factory data used to deploy the account."""

    @abstractmethod
    async def authorize_session(
        self, chains: Sequence[ChainSpec]
    ) -> SessionAuthorization:
        """Derive and sign the session enablement for exactly these chains."""

    @abstractmethod
    async def sweep_out(
        self, chain: ChainSpec, asset: str, amount: int, recipient: str
    ) -> str:
        """Submit a transfer-out intent and return its identifier."""


class AccountFactory(ABC):
    """Creates test accounts."""

    @abstractmethod
    async def create_test_account(self, owner_key: str) -> TestAccount:
        """Create (or load) the smart account owned by `owner_key`."""


@dataclass(frozen=True, kw_only=True)
class BridgeEnvironment:
    """Bundle of collaborators for one harness run."""

    balances: BalanceReader
    funder: Funder
    registrar: RouteRegistrar
    accounts: AccountFactory
