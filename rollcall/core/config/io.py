from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from rollcall.core.config.models import RosterConfig
from rollcall.core.errors import ConfigError


@dataclass(frozen=True)
class ReadResult:
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


def read_json_file(path: str) -> ReadResult:
    if not os.path.exists(path):
        return ReadResult(ok=False, data={}, error="missing")
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
        if not isinstance(obj, dict):
            return ReadResult(ok=False, data={}, error="not_object")
        return ReadResult(ok=True, data=obj)
    except json.JSONDecodeError as e:
        return ReadResult(ok=False, data={}, error=f"corrupt_json:{e}")
    except OSError as e:
        return ReadResult(ok=False, data={}, error=str(e))


def load_config(path: Optional[str] = None, **overrides: Any) -> RosterConfig:
    """
    Build a RosterConfig from an optional JSON file plus keyword overrides.

    A missing file means defaults. A file that exists but is unreadable, not a
    JSON object, or fails validation raises ConfigError.
    """
    raw: Dict[str, Any] = {}
    if path:
        rr = read_json_file(path)
        if rr.ok:
            raw = rr.data
        elif rr.error != "missing":
            raise ConfigError("Roster config could not be read.", path=path, reason=rr.error)
    raw.update(overrides)
    try:
        return RosterConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigError("Roster config is invalid.", path=path, errors=[str(x.get("msg")) for x in e.errors()]) from e
