from __future__ import annotations

import time
import uuid
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rollcall.core.identity.models import Person


LOGIN_COMPLETED = "people.login_completed"
LOGOUT_COMPLETED = "people.logout_completed"
LOGIN_FAILED = "people.login_failed"


class PeopleEvent(BaseModel):
    """
    `person` is the live roster record, `payload` a plain-dict snapshot of it
    taken at publish time. Presentation values are passed through as-is, so
    the snapshot is not guaranteed to be JSON-serializable.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    event_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    event_type: str
    timestamp: float = Field(default_factory=lambda: time.time())
    person: Optional[Person] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("event_type")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = str(v or "").strip()
        if not v:
            raise ValueError("event_type required")
        return v

    @classmethod
    def for_person(cls, event_type: str, person: Person, **extra: Any) -> "PeopleEvent":
        payload = {"person": person.snapshot()}
        payload.update(extra)
        return cls(event_type=event_type, person=person, payload=payload)
