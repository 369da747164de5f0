from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


REGISTER_USER = "register-user"
USER_REGISTERED = "user-registered"

MessageHandler = Callable[[Any], None]


class RegisterUser(BaseModel):
    model_config = ConfigDict(extra="forbid")

    client_id: str
    presentation: Dict[str, Any] = Field(default_factory=dict)
    name: str


class UserRegistered(BaseModel):
    """
    Server confirmation of a `register-user` request.

    `client_id` echoes the provisional id; `server_id` may arrive as `_id`.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    client_id: str = Field(min_length=1, validation_alias=AliasChoices("client_id", "cid"))
    server_id: str = Field(min_length=1, validation_alias=AliasChoices("server_id", "_id", "id"))
    presentation: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("presentation", "css_map"))
    name: Optional[str] = None


class RosterEntry(BaseModel):
    """
    One person as listed by the server in a bulk roster update.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True, coerce_numbers_to_str=True)

    server_id: str = Field(min_length=1, validation_alias=AliasChoices("server_id", "_id", "id"))
    name: str = Field(min_length=1)
    presentation: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("presentation", "css_map"))


class Transport(ABC):
    """
    Bidirectional named-message channel. Handlers are invoked on the same
    thread that drives the session controller.
    """

    @abstractmethod
    def emit(self, message: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def on(self, message: str, handler: MessageHandler) -> None:
        raise NotImplementedError

    @abstractmethod
    def off(self, message: str, handler: MessageHandler) -> None:
        raise NotImplementedError
