"""
Store Directory Protocol — Interface for store lookup.

Consulted only when VALIDATE_REFERENCES is on: a source store must be
able to source shipments, a destination (or transmission target) must be
able to receive them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

ROLE_SOURCE = "source"
ROLE_RECEIVE = "receive"


@dataclass(frozen=True)
class StoreInfo:
    """Basic store information."""

    code: str
    name: str
    roles: frozenset[str] = field(default_factory=lambda: frozenset({ROLE_SOURCE, ROLE_RECEIVE}))
    is_active: bool = True

    @property
    def can_source(self) -> bool:
        return self.is_active and ROLE_SOURCE in self.roles

    @property
    def can_receive(self) -> bool:
        return self.is_active and ROLE_RECEIVE in self.roles


@runtime_checkable
class StoreDirectory(Protocol):
    """Protocol for store lookup."""

    def get_store(self, code: str) -> StoreInfo | None:
        """
        Get store information.

        Returns:
            StoreInfo or None if not found
        """
        ...
