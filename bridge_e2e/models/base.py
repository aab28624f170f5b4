"""Base model shared by test plans and chain descriptions."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen model that rejects unknown keys, so plan typos fail at load time."""

    model_config = ConfigDict(frozen=True, extra="forbid")
