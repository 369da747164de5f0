from __future__ import annotations

import collections
from typing import Any, Deque, Dict, List, Optional, Tuple

from rollcall.core.transport.interface import MessageHandler, Transport


class LoopbackTransport(Transport):
    """
    In-process transport.

    Outbound messages are recorded in `emitted`. Inbound messages are either
    delivered immediately with `deliver()` or queued with `enqueue()` and
    dispatched later, in order, by `flush()`.
    """

    def __init__(self) -> None:
        self.emitted: List[Tuple[str, Dict[str, Any]]] = []
        self._handlers: Dict[str, List[MessageHandler]] = collections.defaultdict(list)
        self._inbox: Deque[Tuple[str, Any]] = collections.deque()

    def emit(self, message: str, payload: Dict[str, Any]) -> None:
        self.emitted.append((str(message), dict(payload)))

    def on(self, message: str, handler: MessageHandler) -> None:
        self._handlers[str(message)].append(handler)

    def off(self, message: str, handler: MessageHandler) -> None:
        hs = self._handlers.get(str(message), [])
        self._handlers[str(message)] = [h for h in hs if h is not handler]

    def handler_count(self, message: str) -> int:
        return len(self._handlers.get(str(message), []))

    def deliver(self, message: str, payload: Any) -> int:
        handlers = list(self._handlers.get(str(message), []))
        for h in handlers:
            h(payload)
        return len(handlers)

    def enqueue(self, message: str, payload: Any) -> None:
        self._inbox.append((str(message), payload))

    def flush(self) -> int:
        n = 0
        while self._inbox:
            message, payload = self._inbox.popleft()
            self.deliver(message, payload)
            n += 1
        return n

    def last_emitted(self, message: Optional[str] = None) -> Optional[Dict[str, Any]]:
        for name, payload in reversed(self.emitted):
            if message is None or name == message:
                return payload
        return None
