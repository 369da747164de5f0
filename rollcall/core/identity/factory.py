from __future__ import annotations

import itertools
from typing import Any, Dict, Iterator, Optional

from pydantic import ValidationError as PydanticValidationError

from rollcall.core.errors import ValidationError
from rollcall.core.identity.models import Person


class CidFactory:
    """
    Allocates provisional client ids: `<prefix><n>` with a monotonic counter.

    Ids are unique among everything this factory has handed out. One factory
    belongs to one session controller.
    """

    def __init__(self, prefix: str = "c", start: int = 0):
        self.prefix = str(prefix)
        self._serial: Iterator[int] = itertools.count(int(start))
        self._allocated = 0

    def allocate(self) -> str:
        self._allocated += 1
        return f"{self.prefix}{next(self._serial)}"

    @property
    def allocated(self) -> int:
        return self._allocated


def make_person(
    *,
    client_id: Optional[str],
    name: Optional[str],
    presentation: Optional[Dict[str, Any]] = None,
    server_id: Optional[str] = None,
) -> Person:
    if client_id is None or str(client_id) == "":
        raise ValidationError("client id and name required", field="client_id")
    if not name:
        raise ValidationError("client id and name required", field="name", client_id=str(client_id))
    try:
        return Person(
            client_id=str(client_id),
            server_id=(str(server_id) if server_id else None),
            name=str(name),
            presentation=dict(presentation or {}),
        )
    except PydanticValidationError as e:
        raise ValidationError("client id and name required", client_id=str(client_id), errors=e.errors(include_url=False)) from e
