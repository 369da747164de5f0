"""
SessionController: current user, login/logout, provisional id reconciliation.

All calls, including transport callbacks, are expected on one thread. A login
waiting for its `user-registered` confirmation is tracked by a PendingLogin
token; logout and expiry drop the token and bump the epoch, so a confirmation
that arrives afterwards finds nothing to apply to and is ignored.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from rollcall.core.config.models import RosterConfig
from rollcall.core.errors import InvalidStateError, ValidationError
from rollcall.core.events.bus import EventBus, EventHandler
from rollcall.core.events.models import LOGIN_COMPLETED, LOGIN_FAILED, LOGOUT_COMPLETED, PeopleEvent
from rollcall.core.identity.factory import CidFactory, make_person
from rollcall.core.identity.models import Person
from rollcall.core.logger import get_logger
from rollcall.core.roster.store import RosterStore
from rollcall.core.transport.interface import (
    REGISTER_USER,
    USER_REGISTERED,
    RegisterUser,
    RosterEntry,
    Transport,
    UserRegistered,
)


class SessionState(str, Enum):
    ANONYMOUS = "ANONYMOUS"
    PENDING_LOGIN = "PENDING_LOGIN"
    AUTHENTICATED = "AUTHENTICATED"


_TRANSITIONS = {
    SessionState.ANONYMOUS: {SessionState.ANONYMOUS, SessionState.PENDING_LOGIN},
    SessionState.PENDING_LOGIN: {SessionState.AUTHENTICATED, SessionState.ANONYMOUS},
    SessionState.AUTHENTICATED: {SessionState.ANONYMOUS},
}


@dataclass(frozen=True)
class PendingLogin:
    epoch: int
    client_id: str
    started_at: float
    deadline: Optional[float] = None


class SessionController:
    def __init__(
        self,
        *,
        transport: Transport,
        cfg: Optional[RosterConfig] = None,
        event_bus: Optional[EventBus] = None,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.cfg = cfg or RosterConfig()
        self.transport = transport
        self.logger = logger or get_logger("session")
        self.events = event_bus or EventBus(cfg=self.cfg.events, logger=self.logger)
        self._clock = clock or time.time

        self._cids = CidFactory(prefix=self.cfg.cid_prefix)
        self._store = RosterStore()
        self._anon = make_person(client_id=self.cfg.anon_id, server_id=self.cfg.anon_id, name=self.cfg.anon_name)
        self._store.insert(self._anon)
        self._user: Person = self._anon
        self._state = SessionState.ANONYMOUS
        self._epoch = 0
        self._pending: Optional[PendingLogin] = None
        self._closed = False

        # keep one bound method so `off` can find it again
        self._on_registered = self.handle_user_registered
        self.transport.on(USER_REGISTERED, self._on_registered)

    # ---- consumer API ----
    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def pending_login(self) -> Optional[PendingLogin]:
        return self._pending

    @property
    def anonymous(self) -> Person:
        return self._anon

    def get_current_user(self) -> Person:
        return self._user

    def get_roster(self) -> List[Person]:
        return self._store.all()

    def find_by_client_id(self, cid: str) -> Optional[Person]:
        return self._store.find_by_client_id(cid)

    def is_current_user(self, person: Person) -> bool:
        return person.client_id == self._user.client_id

    def is_anonymous(self, person: Person) -> bool:
        return person.client_id == self._anon.client_id

    def subscribe(self, event_type: str, handler: EventHandler, priority: int = 50) -> None:
        self.events.subscribe(event_type, handler, priority=priority)

    def unsubscribe(self, handler: EventHandler) -> int:
        return self.events.unsubscribe(handler)

    def status(self) -> Dict[str, Any]:
        return {
            "state": self._state.value,
            "user": self._user.snapshot(),
            "roster_size": len(self._store),
            "epoch": self._epoch,
            "pending_client_id": self._pending.client_id if self._pending else None,
            "closed": self._closed,
            "events_delivered": self.events.get_stats()["per_type_delivered"],
        }

    # ---- transitions ----
    def login(self, name: str) -> Person:
        """
        Start a login as `name` and send `register-user` to the transport.

        The returned record is the provisional current user; it is rewritten
        in place once the server confirms it.
        """
        if self._closed:
            raise InvalidStateError("Session is closed.", state=self._state.value)
        if self._state != SessionState.ANONYMOUS:
            raise InvalidStateError("Already signed in; log out first.", state=self._state.value)
        person = make_person(client_id=self._cids.allocate(), name=name, presentation=self.cfg.default_presentation)

        self._store.insert(person)
        self._user = person
        self._epoch += 1
        now = float(self._clock())
        timeout = float(self.cfg.login_timeout_seconds)
        self._pending = PendingLogin(
            epoch=self._epoch,
            client_id=person.client_id,
            started_at=now,
            deadline=(now + timeout) if timeout > 0 else None,
        )
        self._set_state(SessionState.PENDING_LOGIN)
        self.logger.info("login started name=%s client_id=%s", person.name, person.client_id)

        msg = RegisterUser(client_id=person.client_id, presentation=dict(person.presentation), name=person.name)
        try:
            self.transport.emit(REGISTER_USER, msg.model_dump())
        except Exception:
            # nothing was sent; undo the provisional login before surfacing the error
            if self._pending is not None and self._pending.epoch == self._epoch:
                self._abandon_pending()
            raise
        return person

    def handle_user_registered(self, payload: Any) -> bool:
        """
        Apply a `user-registered` confirmation. Returns False when the payload
        is malformed or does not belong to the login currently pending.
        """
        try:
            msg = _coerce_confirmation(payload)
        except (PydanticValidationError, TypeError, IndexError) as e:
            self.logger.warning("ignoring malformed user-registered payload: %s", e)
            return False

        pending = self._pending
        if pending is None or self._state != SessionState.PENDING_LOGIN or pending.epoch != self._epoch:
            self.logger.warning("ignoring stale confirmation client_id=%s server_id=%s", msg.client_id, msg.server_id)
            return False
        if msg.client_id != pending.client_id:
            self.logger.warning("ignoring confirmation for client_id=%s; pending is %s", msg.client_id, pending.client_id)
            return False
        if msg.server_id == self._anon.client_id:
            self.logger.warning("ignoring confirmation for client_id=%s: server id %s is reserved", msg.client_id, msg.server_id)
            return False

        user = self._user
        old_cid = user.client_id
        user.client_id = msg.server_id
        user.server_id = msg.server_id
        user.presentation = dict(msg.presentation)
        self._store.reindex(old_cid, user)

        self._pending = None
        self._set_state(SessionState.AUTHENTICATED)
        self.logger.info("login completed client_id=%s (was %s)", user.client_id, old_cid)
        self.events.publish(PeopleEvent.for_person(LOGIN_COMPLETED, user, provisional_client_id=old_cid))
        return True

    def logout(self) -> bool:
        """
        Drop the current user and fall back to the anonymous record.

        Returns whether a record was removed from the roster; the anonymous
        record never is.
        """
        former = self._user
        removed = self._remove(former)
        self._user = self._anon
        self._drop_pending()
        self._set_state(SessionState.ANONYMOUS)
        self.logger.info("logout client_id=%s removed=%s", former.client_id, removed)
        self.events.publish(PeopleEvent.for_person(LOGOUT_COMPLETED, former, removed=removed))
        return removed

    def expire_pending(self, now: Optional[float] = None) -> bool:
        """
        Give up on a login whose confirmation is overdue.

        The provisional record is removed, the session falls back to anonymous
        and `login_failed` is published. No-op when nothing is pending, the
        deadline has not passed, or expiry is disabled.
        """
        pending = self._pending
        if pending is None or pending.deadline is None or self._state != SessionState.PENDING_LOGIN:
            return False
        now = float(self._clock()) if now is None else float(now)
        if now < pending.deadline:
            return False
        abandoned = self._abandon_pending()
        self.logger.warning("login expired client_id=%s after %.1fs", abandoned.client_id, now - pending.started_at)
        self.events.publish(PeopleEvent.for_person(LOGIN_FAILED, abandoned, reason="timeout"))
        return True

    def apply_roster(self, people: Iterable[Any]) -> int:
        """
        Replace everyone except the current user and the anonymous record with
        the server's list. Returns the number of people inserted.

        An entry claiming the anonymous id is rejected with ValidationError
        before the roster is touched.
        """
        incoming: List[Person] = []
        for raw in people:
            p = _person_from_entry(raw)
            if p.client_id == self._anon.client_id:
                raise ValidationError("Roster entry uses the reserved anonymous id.", client_id=p.client_id)
            incoming.append(p)

        user = self._user
        self._store.reset(user)
        self._store.insert(self._anon)
        n = 0
        for p in incoming:
            if p.client_id == user.client_id:
                continue
            self._store.insert(p)
            n += 1
        self.logger.info("roster rebuilt around client_id=%s with %d people", user.client_id, n)
        return n

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._drop_pending()
        self.transport.off(USER_REGISTERED, self._on_registered)

    # ---- internals ----
    def _remove(self, person: Person) -> bool:
        if person is self._anon or self.is_anonymous(person) or person.server_id == self.cfg.anon_id:
            return False
        return self._store.remove(person)

    def _drop_pending(self) -> None:
        self._pending = None
        self._epoch += 1

    def _abandon_pending(self) -> Person:
        abandoned = self._user
        self._remove(abandoned)
        self._user = self._anon
        self._drop_pending()
        self._set_state(SessionState.ANONYMOUS)
        return abandoned

    def _set_state(self, new: SessionState) -> None:
        old = self._state
        if new not in _TRANSITIONS[old]:
            raise InvalidStateError("Illegal session transition.", from_state=old.value, to_state=new.value)
        self._state = new
        if old != new:
            self.logger.debug("session.transition %s -> %s", old.value, new.value)


def _coerce_confirmation(payload: Any) -> UserRegistered:
    if isinstance(payload, (list, tuple)):
        payload = payload[0]
    if isinstance(payload, UserRegistered):
        return payload
    if not isinstance(payload, dict):
        raise TypeError(f"unsupported confirmation payload: {type(payload).__name__}")
    return UserRegistered.model_validate(payload)


def _person_from_entry(raw: Any) -> Person:
    if isinstance(raw, Person):
        return raw
    try:
        entry = raw if isinstance(raw, RosterEntry) else RosterEntry.model_validate(raw)
    except PydanticValidationError as e:
        raise ValidationError("Roster entry needs an id and a name.", errors=[str(x.get("msg")) for x in e.errors()]) from e
    return make_person(client_id=entry.server_id, server_id=entry.server_id, name=entry.name, presentation=entry.presentation)
