"""Credential backend protocol.

Both backends answer the same three questions about the single shared
admin password:

  1. exists()   has a password been set?
  2. create()   store the password (first-time setup)
  3. verify()   does this password match?
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CredentialBackend(Protocol):
    """Structural type shared by the remote and local backends."""

    is_cloud: bool

    async def exists(self) -> bool:
        """Return True if a password is currently stored."""
        ...

    async def create(self, password: str) -> bool:
        """Store ``password``, replacing any previous value. True on success."""
        ...

    async def verify(self, password: str) -> bool:
        """Return True if ``password`` matches the stored value."""
        ...
