"""Backend factory: pick the password backend once, from configuration."""

from __future__ import annotations

from lumina.auth.base import CredentialBackend
from lumina.auth.cloud import CredentialAuthority
from lumina.auth.local import LocalCredentialStore
from lumina.config import LuminaConfig
from lumina.logging import get_logger
from lumina.storage import KeyValueStore

log = get_logger("lumina.auth.factory")


def create_backend(config: LuminaConfig) -> CredentialBackend:
    """Return the backend selected by ``config.cloud.api_url``.

    A non-empty URL selects the remote :class:`CredentialAuthority`;
    otherwise the password is kept in local storage.  The choice is made
    here and nowhere else, so a password set in one mode is invisible in
    the other.
    """
    if config.is_cloud:
        log.info("backend_selected", backend="cloud", api_url=config.cloud.api_url)
        return CredentialAuthority.from_config(config.cloud)

    log.info("backend_selected", backend="local", path=config.storage.path)
    return LocalCredentialStore(KeyValueStore(config.storage.path))
