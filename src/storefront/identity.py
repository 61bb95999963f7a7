"""Authenticated identity port.

Sign-in and sessions are handled elsewhere; the storefront only asks who is
acting right now and gets back an id and an email, or nothing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    id: str
    email: str


class IdentityProvider(ABC):
    @abstractmethod
    def current(self) -> Identity | None:
        """Return the signed-in identity, or None for an anonymous session."""
        ...


class StaticIdentityProvider(IdentityProvider):
    """Identity held in memory; used by tests and single-user tooling."""

    def __init__(self, identity: Identity | None = None) -> None:
        self.identity = identity

    def sign_in(self, identity: Identity) -> None:
        self.identity = identity

    def sign_out(self) -> None:
        self.identity = None

    def current(self) -> Identity | None:
        return self.identity
