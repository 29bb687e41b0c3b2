"""
Tenant context using contextvars for automatic propagation.

The tenant is the WhatsApp phone_number_id a client acts for and the user
is the recipient of the current operation. Both are picked up by every
ContextLogger call made inside the same task.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_tenant_context: ContextVar[str | None] = ContextVar("tenant_id", default=None)
_user_context: ContextVar[str | None] = ContextVar("user_id", default=None)


def set_request_context(
    tenant_id: str | None = None,
    user_id: str | None = None,
) -> None:
    """Set tenant and/or user for the rest of the current context; None leaves a value as is."""
    if tenant_id is not None:
        _tenant_context.set(tenant_id)
    if user_id is not None:
        _user_context.set(user_id)


@contextmanager
def request_context(
    tenant_id: str | None = None,
    user_id: str | None = None,
) -> Iterator[None]:
    """Scope tenant and user to a block, restoring the previous values on exit."""
    tenant_token = _tenant_context.set(tenant_id or _tenant_context.get())
    user_token = _user_context.set(user_id or _user_context.get())
    try:
        yield
    finally:
        _user_context.reset(user_token)
        _tenant_context.reset(tenant_token)


def get_current_tenant_context() -> str | None:
    return _tenant_context.get()


def get_current_user_context() -> str | None:
    return _user_context.get()


def clear_request_context() -> None:
    """Reset both values; tasks already get isolated copies, so this is mostly for tests."""
    _tenant_context.set(None)
    _user_context.set(None)
