from __future__ import annotations

import json
import logging

import pytest

from rollcall.core.config.io import load_config, read_json_file
from rollcall.core.config.models import RosterConfig
from rollcall.core.errors import ConfigError, InvalidStateError, NotFoundError, Severity, ValidationError
from rollcall.core.logger import get_logger, setup_logging
from rollcall.core.session.manager import SessionController
from rollcall.core.transport.interface import REGISTER_USER, USER_REGISTERED, UserRegistered
from rollcall.core.transport.loopback import LoopbackTransport


def test_defaults():
    cfg = RosterConfig()
    assert cfg.anon_id == "a0"
    assert cfg.anon_name == "anonymous"
    assert cfg.default_presentation == {"top": 25, "left": 25, "background-color": "#8f8"}
    assert cfg.login_timeout_seconds == 30.0
    assert cfg.events.enabled is True


def test_missing_file_means_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "nope.json"))
    assert cfg == RosterConfig()


def test_file_values_and_overrides(tmp_path):
    p = tmp_path / "roster.json"
    p.write_text(json.dumps({"anon_id": "guest", "login_timeout_seconds": 5, "events": {"keep_recent": 3}}), encoding="utf-8")
    cfg = load_config(str(p), anon_name="Guest")
    assert cfg.anon_id == "guest"
    assert cfg.anon_name == "Guest"
    assert cfg.login_timeout_seconds == 5.0
    assert cfg.events.keep_recent == 3


def test_custom_anonymous_identity_is_used(tmp_path):
    sc = SessionController(transport=LoopbackTransport(), cfg=RosterConfig(anon_id="guest", anon_name="Guest"))
    assert sc.get_current_user().client_id == "guest"
    assert sc.logout() is False
    assert sc.find_by_client_id("guest") is sc.anonymous


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2]",
        json.dumps({"unknown_key": 1}),
        json.dumps({"login_timeout_seconds": -1}),
        json.dumps({"anon_id": "c7"}),
    ],
)
def test_bad_config_raises_config_error(tmp_path, content):
    p = tmp_path / "roster.json"
    p.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as ei:
        load_config(str(p))
    assert ei.value.recoverable is False


def test_read_json_file_reports_reason(tmp_path):
    assert read_json_file(str(tmp_path / "x.json")).error == "missing"
    p = tmp_path / "x.json"
    p.write_text("[]", encoding="utf-8")
    assert read_json_file(str(p)).error == "not_object"


def test_error_taxonomy_to_dict():
    e = InvalidStateError(state="PENDING_LOGIN")
    d = e.to_dict()
    assert d["code"] == "invalid_state"
    assert d["severity"] == Severity.WARN.value
    assert d["recoverable"] is True
    assert d["context"] == {"state": "PENDING_LOGIN"}
    assert "invalid_state" in str(e)
    assert ValidationError().code == "validation_error"
    assert NotFoundError(client_id="x").context == {"client_id": "x"}


def test_confirmation_model_accepts_wire_aliases():
    m = UserRegistered.model_validate({"cid": "c0", "_id": 42, "css_map": {"top": 1}, "extra": True})
    assert (m.client_id, m.server_id, m.presentation) == ("c0", "42", {"top": 1})
    m2 = UserRegistered(client_id="c0", server_id="42")
    assert m2.presentation == {}


def test_loopback_records_and_queues():
    t = LoopbackTransport()
    got = []
    handler = got.append
    t.on(USER_REGISTERED, handler)
    t.emit(REGISTER_USER, {"client_id": "c0"})
    t.emit("other", {"x": 1})
    assert t.last_emitted(REGISTER_USER) == {"client_id": "c0"}
    assert t.last_emitted() == {"x": 1}
    t.enqueue(USER_REGISTERED, 1)
    t.enqueue(USER_REGISTERED, 2)
    assert got == []
    assert t.flush() == 2
    assert got == [1, 2]
    t.off(USER_REGISTERED, handler)
    assert t.handler_count(USER_REGISTERED) == 0
    assert t.deliver(USER_REGISTERED, 3) == 0


def test_setup_logging_is_idempotent(tmp_path):
    logger = setup_logging(str(tmp_path / "logs"))
    try:
        n = len(logger.handlers)
        assert setup_logging(str(tmp_path / "logs")) is logger
        assert len(logger.handlers) == n
        assert (tmp_path / "logs" / "rollcall.log").exists()
        assert get_logger("session").name == "rollcall.session"
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


def test_session_module_documents_itself():
    import rollcall.core.session.manager as manager

    assert manager.__doc__ and "SessionController" in manager.__doc__
