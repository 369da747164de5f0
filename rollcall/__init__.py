"""
In-memory people roster with an anonymous/authenticated current user.
"""

from rollcall.core.config import RosterConfig, load_config
from rollcall.core.errors import ConfigError, InvalidStateError, NotFoundError, RollcallError, ValidationError
from rollcall.core.events import LOGIN_COMPLETED, LOGIN_FAILED, LOGOUT_COMPLETED, EventBus, PeopleEvent
from rollcall.core.identity import Person
from rollcall.core.session import SessionController, SessionState
from rollcall.core.transport import LoopbackTransport, Transport

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "EventBus",
    "InvalidStateError",
    "LOGIN_COMPLETED",
    "LOGIN_FAILED",
    "LOGOUT_COMPLETED",
    "LoopbackTransport",
    "NotFoundError",
    "PeopleEvent",
    "Person",
    "RollcallError",
    "RosterConfig",
    "SessionController",
    "SessionState",
    "Transport",
    "ValidationError",
    "__version__",
    "load_config",
]
