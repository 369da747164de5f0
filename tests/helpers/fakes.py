from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from rollcall.core.events.models import PeopleEvent


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self._t = float(start)

    def time(self) -> float:
        return self._t

    def advance(self, seconds: float) -> None:
        self._t += float(seconds)


@dataclass
class EventRecorder:
    events: List[PeopleEvent] = field(default_factory=list)

    def __call__(self, ev: PeopleEvent) -> None:
        self.events.append(ev)

    def of_type(self, event_type: str) -> List[PeopleEvent]:
        return [e for e in self.events if e.event_type == event_type]
