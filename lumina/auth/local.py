"""Local-mode password backend: the password lives on this device only."""

from __future__ import annotations

from lumina.logging import get_logger
from lumina.storage import KeyValueStore

log = get_logger("lumina.auth.local")

ADMIN_PASSWORD_KEY = "lumina_admin_pwd"


class LocalCredentialStore:
    """Stores the admin password verbatim in a :class:`KeyValueStore`.

    No hashing and a plain ``==`` comparison, matching what the remote
    worker does server-side.
    """

    is_cloud = False

    def __init__(self, store: KeyValueStore, key: str = ADMIN_PASSWORD_KEY) -> None:
        self.store = store
        self.key = key

    async def exists(self) -> bool:
        return self.key in self.store

    async def create(self, password: str) -> bool:
        self.store.set(self.key, password)
        log.info("local_password_set", path=str(self.store.path))
        return True

    async def verify(self, password: str) -> bool:
        return self.store.get(self.key) == password
