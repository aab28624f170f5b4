"""Environment manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass

from pydantic import BaseModel

from bridge_e2e.environments.base import BridgeEnvironment


@dataclass(frozen=True, kw_only=True)
class EnvironmentManifest[ConfigT: BaseModel]:
    """Manifest describing an environment plugin.

    Holds the configuration class used to validate the CLI's JSON config and
    the factory that opens the environment's network resources.
    """

    config_cls: type[ConfigT]
    environment_factory: Callable[
        [ConfigT], AbstractAsyncContextManager[BridgeEnvironment]
    ]
