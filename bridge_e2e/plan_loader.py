"""Loading of test plans from YAML files."""

import asyncio
from pathlib import Path

import yaml

from bridge_e2e.models.plan import TestPlan


class PlanLoadError(Exception):
    """Raised when a plan file is not a YAML mapping."""


async def load_test_plan(path: Path) -> TestPlan:
    """Read and validate a test plan.

    Raises:
        FileNotFoundError: If the plan file does not exist
        PlanLoadError: If the document is not a mapping
        pydantic.ValidationError: If the plan does not match the schema

    """
    text = await asyncio.to_thread(path.read_text)
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise PlanLoadError(f"Test plan {path} must be a YAML mapping")
    return TestPlan.model_validate(data)
