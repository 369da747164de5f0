from __future__ import annotations

import pytest

from rollcall.core.config.models import RosterConfig
from rollcall.core.session.manager import SessionController
from rollcall.core.transport.loopback import LoopbackTransport

from .helpers.fakes import EventRecorder, FakeClock


@pytest.fixture
def transport():
    return LoopbackTransport()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def recorder():
    return EventRecorder()


@pytest.fixture
def controller(transport, clock, recorder):
    """
    A fresh controller with every people.* event captured in `recorder`.
    """
    sc = SessionController(transport=transport, cfg=RosterConfig(login_timeout_seconds=10), clock=clock.time)
    sc.subscribe("people.*", recorder)
    yield sc
    sc.close()
