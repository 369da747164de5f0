from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from rollcall.core.events.bus import EventBusConfig
from rollcall.core.identity.models import default_presentation


class RosterConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    anon_id: str = "a0"
    anon_name: str = "anonymous"
    cid_prefix: str = "c"
    default_presentation: Dict[str, Any] = Field(default_factory=default_presentation)
    # 0 disables expiry of unconfirmed logins
    login_timeout_seconds: float = Field(default=30.0, ge=0.0)
    events: EventBusConfig = Field(default_factory=EventBusConfig)

    @field_validator("anon_id", "anon_name", "cid_prefix")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("must be non-empty")
        return v

    @model_validator(mode="after")
    def _anon_id_reserved(self) -> "RosterConfig":
        # provisional ids must never collide with the reserved anonymous id
        if self.anon_id.startswith(self.cid_prefix) and self.anon_id[len(self.cid_prefix):].isdigit():
            raise ValueError("anon_id must not look like a provisional client id")
        return self
