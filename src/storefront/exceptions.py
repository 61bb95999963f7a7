"""Storefront error taxonomy.

Input problems are reported with ``protean.exceptions.ValidationError``. The
errors below cover storage, identity and remote store faults. All of them
carry structured messages keyed by field (``{"field": ["message"]}``) so
callers can surface them per input without parsing strings.
"""

from pydantic import ValidationError as PydanticValidationError


def pydantic_messages(exc: PydanticValidationError) -> dict[str, list[str]]:
    """Fold pydantic errors into ``{"field": ["message"]}`` form."""
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or exc.title
        messages.setdefault(field, []).append(error["msg"])
    return messages


def flatten_messages(messages: dict[str, list[str]]) -> str:
    return "; ".join(msg for msgs in messages.values() for msg in msgs)


class StorefrontError(Exception):
    """Base class for the non-validation errors of the storefront context."""

    def __init__(self, messages: dict[str, list[str]]) -> None:
        self.messages = messages
        super().__init__(messages)


class StorageReadError(StorefrontError):
    """The persisted cart is absent in an unexpected shape or unreadable."""


class SessionRequired(StorefrontError):
    """A cart was requested without anything identifying the client session."""


class AuthenticationRequired(StorefrontError):
    """An operation needs a signed-in identity and none is present."""


class StoreWriteError(StorefrontError):
    """A remote persistence call reported a fault."""


class OrderCreateError(StorefrontError):
    """The order insert failed; no line items were attempted."""


class LineItemCreateError(StorefrontError):
    """The order exists but its line items could not be written."""

    def __init__(self, messages: dict[str, list[str]], order_id: str | None = None) -> None:
        super().__init__(messages)
        self.order_id = order_id
