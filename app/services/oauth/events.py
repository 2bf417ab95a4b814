"""Request events emitted by grants for audit and security signalling."""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from app.core.audit import log_audit_event, log_failure

if TYPE_CHECKING:
    from app.services.oauth.entities import UserIdentity
    from app.services.oauth.request import TokenRequest

logger = logging.getLogger(__name__)

Listener = Callable[["RequestEvent"], Any]


@dataclass
class RequestEvent:
    CLIENT_AUTHENTICATION_FAILED = "client.authentication.failed"
    USER_AUTHENTICATION_FAILED = "user.authentication.failed"

    name: str
    request: TokenRequest | None = None
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoginEvent(RequestEvent):
    NAME = "user.login"

    channel: str = "api"
    user: UserIdentity | None = None

    @classmethod
    def for_user(cls, channel: str, user: UserIdentity) -> LoginEvent:
        return cls(name=cls.NAME, channel=channel, user=user)


class EventEmitter:
    """Synchronous in-process emitter; one failing listener never blocks the rest."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, name: str, listener: Listener) -> None:
        self._listeners[name].append(listener)

    def emit(self, event: RequestEvent) -> None:
        for listener in list(self._listeners.get(event.name, ())):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                logger.exception("Event listener failed for %s", event.name)


def audit_authentication_failure(event: RequestEvent) -> None:
    client_id = None
    if event.request is not None:
        basic_auth_user, _ = event.request.get_basic_auth_credentials()
        client_id = event.request.get_parameter("client_id", basic_auth_user)
    log_failure(event.name, client_id=client_id, **event.context)


def audit_login(event: RequestEvent) -> None:
    user_id = getattr(getattr(event, "user", None), "identifier", None)
    log_audit_event(event.name, user_id=user_id, channel=getattr(event, "channel", None))


def create_event_emitter() -> EventEmitter:
    """Emitter wired with the default audit listeners."""
    emitter = EventEmitter()
    emitter.subscribe(RequestEvent.CLIENT_AUTHENTICATION_FAILED, audit_authentication_failure)
    emitter.subscribe(RequestEvent.USER_AUTHENTICATION_FAILED, audit_authentication_failure)
    emitter.subscribe(LoginEvent.NAME, audit_login)
    return emitter
