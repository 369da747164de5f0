from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def default_presentation() -> Dict[str, Any]:
    return {"top": 25, "left": 25, "background-color": "#8f8"}


class Person(BaseModel):
    """
    One roster entry.

    `client_id` is the roster key. It only differs from `server_id` while a
    login is waiting for the server to confirm it; reconciliation rewrites it
    in place to the server id.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    client_id: str
    server_id: Optional[str] = None
    name: str
    presentation: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("client_id", "name")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @property
    def is_synced(self) -> bool:
        return self.server_id is not None and self.server_id == self.client_id

    def snapshot(self) -> Dict[str, Any]:
        return self.model_dump()
