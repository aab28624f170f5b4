"""Discovery of environment plugins registered as entry points."""

from collections.abc import Sequence
from importlib.metadata import entry_points
from typing import Any

from bridge_e2e.environments.manifest import EnvironmentManifest

ENTRY_POINT_GROUP = "bridge_e2e.environments"


class EnvironmentNotFoundError(LookupError):
    """Raised when no environment is registered under a key."""


def available_environments() -> Sequence[str]:
    """Keys of all installed environments, sorted."""
    return sorted({entry.name for entry in entry_points(group=ENTRY_POINT_GROUP)})


def load_environment_manifest(key: str) -> EnvironmentManifest[Any]:
    """Load an environment manifest by key.

    Args:
        key: Entry point name under the bridge_e2e.environments group
             (e.g., "rhinestone")

    Raises:
        EnvironmentNotFoundError: If no environment with the given key is found

    """
    matches = entry_points(group=ENTRY_POINT_GROUP, name=key)
    for entry in matches:
        manifest: EnvironmentManifest[Any] = entry.load()
        return manifest

    raise EnvironmentNotFoundError(
        f"Environment '{key}' not found. "
        f"Available environments: {list(available_environments())}"
    )
