"""
Login/logout notifications for views and other observers.
"""

from rollcall.core.events.bus import EventBus, EventBusConfig, EventHandler
from rollcall.core.events.models import (
    LOGIN_COMPLETED,
    LOGIN_FAILED,
    LOGOUT_COMPLETED,
    PeopleEvent,
)

__all__ = [
    "EventBus",
    "EventBusConfig",
    "EventHandler",
    "LOGIN_COMPLETED",
    "LOGIN_FAILED",
    "LOGOUT_COMPLETED",
    "PeopleEvent",
]
