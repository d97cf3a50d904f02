from contextvars import ContextVar, Token
from typing import Optional

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
username_context: ContextVar[Optional[str]] = ContextVar("username", default=None)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return request_id_context.get()


def set_request_id(request_id: str) -> Token:
    """Set the request ID in context; the token restores the previous value."""
    return request_id_context.set(request_id)


def reset_request_id(token: Token) -> None:
    request_id_context.reset(token)


def get_username() -> Optional[str]:
    """Username of the authenticated caller, if any."""
    return username_context.get()


def set_username(username: Optional[str]) -> None:
    username_context.set(username)
