"""
Admin gate: the first-time setup / login flow.

Lifecycle::

    IDLE --open()--> CHECKING --+--> SETUP_REQUIRED --submit()--+
                                |                               |
                                +--> LOGIN_REQUIRED --submit()--+--> SUBMITTING
                                                                        |
            back to SETUP_REQUIRED / LOGIN_REQUIRED with ``error`` <----+
                                      AUTHENTICATED, callback, close <--+

The gate asks exactly one backend, fixed at construction.  Nothing a
backend does can leave the gate stuck: a failing existence check falls
back to setup mode, and every submission failure is turned into a short
``error`` message plus a brief ``shake`` flag for the presentation layer.

In-flight calls cannot be cancelled.  Each open()/close() starts a new
session, and a result that comes back for an older session is dropped.
"""

from __future__ import annotations

import asyncio
import enum
from collections.abc import Callable
from typing import TYPE_CHECKING

from lumina.auth.base import CredentialBackend
from lumina.errors import AuthError, LuminaError, SetupError, ValidationError
from lumina.logging import get_logger

if TYPE_CHECKING:
    from lumina.config import LuminaConfig

log = get_logger("lumina.auth.gate")

MSG_TOO_SHORT = "password too short"
MSG_MISMATCH = "passwords do not match"
MSG_INCORRECT = "incorrect password"
MSG_SETUP_CLOUD = "could not save the password to the cloud, check the network"
MSG_SETUP_LOCAL = "could not save the password on this device"

LABEL_CLOUD = "Cloud sync enabled (password kept on the server)"
LABEL_LOCAL = "Local mode (this device only)"


class AuthMode(enum.Enum):
    """What the gate asks the user for."""

    SETUP_REQUIRED = "setup_required"
    LOGIN_REQUIRED = "login_required"


class GateState(enum.Enum):
    IDLE = "idle"
    CHECKING = "checking"
    SETUP_REQUIRED = "setup_required"
    LOGIN_REQUIRED = "login_required"
    SUBMITTING = "submitting"
    AUTHENTICATED = "authenticated"


_WAITING_STATE = {
    AuthMode.SETUP_REQUIRED: GateState.SETUP_REQUIRED,
    AuthMode.LOGIN_REQUIRED: GateState.LOGIN_REQUIRED,
}


class AuthGate:
    """Setup/login state machine in front of a :class:`CredentialBackend`.

    Args:
        backend: Where the password lives. Chosen once by the caller.
        on_success: Called once per successful setup or login, just
            before the gate closes itself.
        min_password_length: Shortest password accepted during setup.
        shake_duration: Seconds the ``shake`` flag stays raised after a
            failed submission.
    """

    def __init__(
        self,
        backend: CredentialBackend,
        on_success: Callable[[], None],
        *,
        min_password_length: int = 4,
        shake_duration: float = 0.3,
    ) -> None:
        self.backend = backend
        self.on_success = on_success
        self.min_password_length = min_password_length
        self.shake_duration = shake_duration

        self.state = GateState.IDLE
        self.mode: AuthMode | None = None
        self.password = ""
        self.confirm_password = ""
        self.error = ""
        self.last_error: LuminaError | None = None
        self.shake = False

        self._open = False
        self._session = 0
        self._shake_handle: asyncio.TimerHandle | None = None

    @classmethod
    def from_config(
        cls,
        config: LuminaConfig,
        on_success: Callable[[], None],
        backend: CredentialBackend | None = None,
    ) -> AuthGate:
        """Build a gate using the backend selected by ``config``."""
        if backend is None:
            from lumina.auth.factory import create_backend

            backend = create_backend(config)
        return cls(
            backend,
            on_success,
            min_password_length=config.gate.min_password_length,
            shake_duration=config.gate.shake_duration,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def busy(self) -> bool:
        """True while the backend is being queried."""
        return self.state in (GateState.CHECKING, GateState.SUBMITTING)

    @property
    def is_cloud(self) -> bool:
        return self.backend.is_cloud

    @property
    def mode_label(self) -> str:
        return LABEL_CLOUD if self.is_cloud else LABEL_LOCAL

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> AuthMode | None:
        """Open the gate and work out whether to ask for setup or login.

        Returns the resolved mode, or None if the gate was closed or
        reopened before the backend answered.
        """
        self._session += 1
        session = self._session
        self._open = True
        self.password = ""
        self.confirm_password = ""
        self._clear_error()
        self.mode = None
        self.state = GateState.CHECKING

        try:
            exists = await self.backend.exists()
        except Exception as exc:
            # unknown reads as "no password yet"
            log.warning("gate_check_failed", cloud=self.is_cloud, error=str(exc))
            exists = False

        if session != self._session or self.state is not GateState.CHECKING:
            log.debug("gate_stale_check_dropped", session=session)
            return None

        self.mode = AuthMode.LOGIN_REQUIRED if exists else AuthMode.SETUP_REQUIRED
        self.state = _WAITING_STATE[self.mode]
        log.info("gate_opened", mode=self.mode.value, cloud=self.is_cloud)
        return self.mode

    def close(self) -> None:
        """Close the gate. Results of calls still in flight are discarded."""
        self._session += 1
        self._open = False
        self.password = ""
        self.confirm_password = ""
        if self.state is not GateState.AUTHENTICATED:
            self.state = GateState.IDLE
        self._cancel_shake()

    async def submit(self, password: str | None = None, confirm_password: str | None = None) -> bool:
        """Run setup or login with the entered password.

        Arguments, when given, replace the entered values.  Returns True
        on success.  Failures never raise: they set ``error`` and
        ``last_error`` and leave the gate waiting for another attempt.
        A submission made while the gate is closed, busy or already
        authenticated is ignored and returns False.
        """
        if password is not None:
            self.password = password
        if confirm_password is not None:
            self.confirm_password = confirm_password

        if not self._open or self.mode is None or self.state is not _WAITING_STATE[self.mode]:
            log.debug("gate_submit_ignored", state=self.state.value, open=self._open)
            return False

        mode = self.mode
        session = self._session
        self._clear_error()

        try:
            if mode is AuthMode.SETUP_REQUIRED:
                self._validate_setup(self.password, self.confirm_password)
                self.state = GateState.SUBMITTING
                await self._setup(self.password)
            else:
                self.state = GateState.SUBMITTING
                await self._login(self.password)
        except LuminaError as exc:
            if session != self._session:
                log.debug("gate_stale_submit_dropped", session=session)
                return False
            self.state = _WAITING_STATE[mode]
            self._fail(exc)
            return False

        if session != self._session or self.state is not GateState.SUBMITTING:
            log.debug("gate_stale_submit_dropped", session=session)
            return False

        self.state = GateState.AUTHENTICATED
        log.info("gate_authenticated", mode=mode.value, cloud=self.is_cloud)
        try:
            self.on_success()
        finally:
            self.close()
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate_setup(self, password: str, confirm_password: str) -> None:
        if len(password) < self.min_password_length:
            raise ValidationError(MSG_TOO_SHORT)
        if password != confirm_password:
            raise ValidationError(MSG_MISMATCH)

    async def _setup(self, password: str) -> None:
        message = MSG_SETUP_CLOUD if self.is_cloud else MSG_SETUP_LOCAL
        try:
            ok = await self.backend.create(password)
        except Exception as exc:
            raise SetupError(message) from exc
        if not ok:
            raise SetupError(message)

    async def _login(self, password: str) -> None:
        try:
            ok = await self.backend.verify(password)
        except Exception as exc:
            log.warning("gate_verify_failed", cloud=self.is_cloud, error=str(exc))
            ok = False
        if not ok:
            raise AuthError(MSG_INCORRECT)

    def _fail(self, exc: LuminaError) -> None:
        self.error = str(exc)
        self.last_error = exc
        log.info("gate_submit_failed", reason=type(exc).__name__, mode=self.state.value)
        self._trigger_shake()

    def _clear_error(self) -> None:
        self.error = ""
        self.last_error = None
        self._cancel_shake()

    def _trigger_shake(self) -> None:
        self._cancel_shake()
        self.shake = True
        self._shake_handle = asyncio.get_running_loop().call_later(self.shake_duration, self._end_shake)

    def _end_shake(self) -> None:
        self.shake = False
        self._shake_handle = None

    def _cancel_shake(self) -> None:
        if self._shake_handle is not None:
            self._shake_handle.cancel()
            self._shake_handle = None
        self.shake = False
