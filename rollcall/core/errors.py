from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class RollcallError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return f"{self.code}: {self.user_message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": dict(self.context or {}),
        }


class ValidationError(RollcallError):
    def __init__(self, user_message: str = "Invalid person record.", **ctx: Any):
        super().__init__("validation_error", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class InvalidStateError(RollcallError):
    def __init__(self, user_message: str = "Operation not allowed in the current session state.", **ctx: Any):
        super().__init__("invalid_state", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class NotFoundError(RollcallError):
    def __init__(self, user_message: str = "Person not found.", **ctx: Any):
        super().__init__("not_found", user_message, severity=Severity.INFO, recoverable=True, context=ctx)


class ConfigError(RollcallError):
    def __init__(self, user_message: str = "Configuration error.", **ctx: Any):
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)
