"""Rhinestone environment manifest."""

from bridge_e2e.environments.manifest import EnvironmentManifest
from bridge_e2e.environments.rhinestone.config import RhinestoneConfig
from bridge_e2e.environments.rhinestone.environment import (
    open_rhinestone_environment,
)

rhinestone_manifest = EnvironmentManifest(
    config_cls=RhinestoneConfig,
    environment_factory=open_rhinestone_environment,
)
