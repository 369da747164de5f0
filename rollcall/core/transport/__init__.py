from rollcall.core.transport.interface import (
    REGISTER_USER,
    USER_REGISTERED,
    MessageHandler,
    RegisterUser,
    RosterEntry,
    Transport,
    UserRegistered,
)
from rollcall.core.transport.loopback import LoopbackTransport

__all__ = [
    "LoopbackTransport",
    "MessageHandler",
    "REGISTER_USER",
    "RegisterUser",
    "RosterEntry",
    "Transport",
    "USER_REGISTERED",
    "UserRegistered",
]
