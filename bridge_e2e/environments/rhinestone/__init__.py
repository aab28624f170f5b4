"""Rhinestone deposit processor environment."""

from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.environments.rhinestone.environment import (
    open_rhinestone_environment,
)
from bridge_e2e.environments.rhinestone.manifest import rhinestone_manifest

__all__ = ["RhinestoneConfig", "open_rhinestone_environment", "rhinestone_manifest"]
