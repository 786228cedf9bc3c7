"""Lumina admin password subsystem."""

from lumina.auth.base import CredentialBackend
from lumina.auth.cloud import CredentialAuthority
from lumina.auth.factory import create_backend
from lumina.auth.gate import AuthGate, AuthMode, GateState
from lumina.auth.local import LocalCredentialStore

__all__ = [
    "AuthGate",
    "AuthMode",
    "CredentialAuthority",
    "CredentialBackend",
    "GateState",
    "LocalCredentialStore",
    "create_backend",
]
