from __future__ import annotations

import collections
import logging
from dataclasses import dataclass
from typing import Any, Callable, Counter, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rollcall.core.events.models import PeopleEvent
from rollcall.core.logger import get_logger


EventHandler = Callable[[PeopleEvent], None]


class EventBusConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    keep_recent: int = Field(default=100, ge=0, le=10_000)
    isolate_handler_errors: bool = True


@dataclass
class _Sub:
    event_type: str
    handler: EventHandler
    priority: int


class EventBus:
    """
    In-process, synchronous event bus.

    - publish runs every matching handler before returning
    - handlers run in priority order (lower first), ties in subscription order
    - a failing handler is logged and counted; the remaining handlers still run
    - no replay: late subscribers never see earlier events
    """

    def __init__(self, *, cfg: Optional[EventBusConfig] = None, logger: Optional[logging.Logger] = None):
        self.cfg = cfg or EventBusConfig()
        self.logger = logger or get_logger("events")
        self._subs: List[_Sub] = []
        self._published: Counter[str] = collections.Counter()
        self._delivered: Counter[str] = collections.Counter()
        self._handler_errors = 0
        self._recent_events: Deque[Dict[str, Any]] = collections.deque(maxlen=int(self.cfg.keep_recent))

    def enabled(self) -> bool:
        return bool(self.cfg.enabled)

    def set_enabled(self, enabled: bool) -> None:
        self.cfg.enabled = bool(enabled)

    def subscribe(self, event_type: str, handler: EventHandler, priority: int = 50) -> None:
        """
        event_type supports:
        - exact match ("people.login_completed")
        - prefix match ("people.*")
        - wildcard all ("*")
        """
        if not callable(handler):
            raise ValueError("handler must be callable")
        self._subs.append(_Sub(event_type=str(event_type), handler=handler, priority=int(priority)))
        # sort is stable, so equal priorities keep subscription order
        self._subs.sort(key=lambda s: s.priority)

    def unsubscribe(self, handler: EventHandler) -> int:
        keep = [s for s in self._subs if s.handler is not handler]
        removed = len(self._subs) - len(keep)
        self._subs = keep
        return removed

    def publish(self, ev: PeopleEvent) -> int:
        if not self.enabled():
            return 0
        self._published[ev.event_type] += 1
        if self._recent_events.maxlen:
            self._recent_events.appendleft({"event_id": ev.event_id, "event_type": ev.event_type, "timestamp": ev.timestamp, "payload": ev.payload})
        # snapshot so handlers may (un)subscribe while we deliver
        subs = list(self._subs)
        delivered = 0
        for s in subs:
            if _match(s.event_type, ev.event_type):
                self._safe_handle(s.handler, ev)
                delivered += 1
        if delivered:
            self._delivered[ev.event_type] += delivered
        return delivered

    def get_stats(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled(),
            "published_total": sum(self._published.values()),
            "delivered_total": sum(self._delivered.values()),
            "handler_errors_total": self._handler_errors,
            "subscribers": len(self._subs),
            "per_type_published": dict(self._published),
            "per_type_delivered": dict(self._delivered),
        }

    def list_subscribers(self) -> List[Dict[str, Any]]:
        return [{"event_type": s.event_type, "priority": s.priority, "handler": getattr(s.handler, "__name__", "handler")} for s in self._subs]

    def dump_recent(self, n: int = 50) -> List[Dict[str, Any]]:
        return list(self._recent_events)[: max(1, int(n))]

    # ---- internals ----
    def _safe_handle(self, handler: EventHandler, ev: PeopleEvent) -> None:
        if not self.cfg.isolate_handler_errors:
            handler(ev)
            return
        try:
            handler(ev)
        except Exception:  # noqa: BLE001
            self._handler_errors += 1
            self.logger.exception("event handler %s failed for %s", getattr(handler, "__name__", "handler"), ev.event_type)


def _match(subscribed: str, event_type: str) -> bool:
    subscribed = str(subscribed)
    if subscribed == "*":
        return True
    if subscribed.endswith(".*"):
        return str(event_type).startswith(subscribed[:-1])
    return subscribed == event_type
