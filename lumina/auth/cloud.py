"""
Remote password authority and image store.

Talks to the Lumina edge worker (a Cloudflare Worker fronting R2 in the
reference deployment).  Every request goes to the single configured
endpoint; password operations are told apart by an ``action`` query
parameter:

    GET  ?action=auth-check          -> {"isSetup": bool}
    POST ?action=auth-setup  {password} -> {"success": bool}
    POST ?action=auth-verify {password} -> {"success": bool}
    PUT  <raw image bytes>           -> {"url": str}

Password calls never raise.  A dropped connection, a non-2xx status or an
unparseable body all read as ``False``, so the gate can always offer the
user another attempt.  Uploads, on the other hand, raise
:class:`~lumina.errors.UploadError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import orjson

from lumina.assets import decode_data_url, detect_mime
from lumina.errors import ConfigError, UploadError
from lumina.logging import get_logger
from lumina.metrics import LatencyTimer, RemoteCallMetrics
from lumina.tracing import traced

if TYPE_CHECKING:
    from lumina.config import CloudConfig

log = get_logger("lumina.auth.cloud")

ACTION_CHECK = "auth-check"
ACTION_SETUP = "auth-setup"
ACTION_VERIFY = "auth-verify"
ACTION_UPLOAD = "upload"

SECRET_HEADER = "X-Secret-Key"


class CredentialAuthority:
    """HTTP client for the edge worker's auth and upload endpoints."""

    is_cloud = True

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
        metrics: RemoteCallMetrics | None = None,
    ) -> None:
        if not api_url:
            raise ConfigError("CredentialAuthority needs a non-empty api_url")
        self.api_url = api_url
        self.api_key = api_key
        self.metrics = metrics or RemoteCallMetrics()
        self._owns_client = client is None
        self._http = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, config: CloudConfig, **kwargs: Any) -> CredentialAuthority:
        return cls(config.api_url, config.api_key, timeout=config.timeout, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    async def __aenter__(self) -> CredentialAuthority:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Password operations
    # ------------------------------------------------------------------

    @traced("lumina.cloud.auth_check", attributes={"lumina.action": ACTION_CHECK})
    async def exists(self) -> bool:
        """Ask the worker whether an admin password has been set."""
        with LatencyTimer(self.metrics, ACTION_CHECK) as timer:
            try:
                response = await self._http.get(self.api_url, params={"action": ACTION_CHECK})
                if not response.is_success:
                    log.warning("cloud_auth_check_http_error", status=response.status_code)
                    timer.mark_failed()
                    return False
                data = response.json()
            except Exception as exc:
                log.error("cloud_auth_check_failed", error=str(exc))
                timer.mark_failed()
                return False

        return isinstance(data, dict) and data.get("isSetup") is True

    @traced("lumina.cloud.auth_setup", attributes={"lumina.action": ACTION_SETUP})
    async def create(self, password: str) -> bool:
        """Store the admin password on the worker (first-time setup)."""
        return await self._post_password(ACTION_SETUP, password)

    @traced("lumina.cloud.auth_verify", attributes={"lumina.action": ACTION_VERIFY})
    async def verify(self, password: str) -> bool:
        """Check a login attempt against the worker."""
        return await self._post_password(ACTION_VERIFY, password)

    async def _post_password(self, action: str, password: str) -> bool:
        with LatencyTimer(self.metrics, action) as timer:
            try:
                response = await self._http.post(
                    self.api_url,
                    params={"action": action},
                    headers={"Content-Type": "application/json"},
                    content=orjson.dumps({"password": password}),
                )
                if not response.is_success:
                    log.warning("cloud_auth_http_error", action=action, status=response.status_code)
                    timer.mark_failed()
                    return False
                data = response.json()
            except Exception as exc:
                log.error("cloud_auth_request_failed", action=action, error=str(exc))
                timer.mark_failed()
                return False

        return isinstance(data, dict) and data.get("success") is True

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    @traced("lumina.cloud.upload", attributes={"lumina.action": ACTION_UPLOAD})
    async def upload_asset(self, payload: str | bytes, content_type: str | None = None) -> str:
        """Upload an image and return the URL the worker assigned to it.

        Args:
            payload: A ``data:<mime>;base64,...`` URL or raw image bytes.
            content_type: Mime type for raw bytes; sniffed when omitted.

        Raises:
            UploadError: On a malformed payload, transport failure, non-2xx
                status or a response without a ``url``.
        """
        if isinstance(payload, str):
            body, mime = decode_data_url(payload)
        else:
            body, mime = payload, content_type or detect_mime(payload)

        with LatencyTimer(self.metrics, ACTION_UPLOAD):
            try:
                response = await self._http.put(
                    self.api_url,
                    headers={SECRET_HEADER: self.api_key, "Content-Type": mime},
                    content=body,
                )
            except httpx.HTTPError as exc:
                raise UploadError(f"Upload failed: {exc}") from exc

            if not response.is_success:
                raise UploadError(f"Upload failed with HTTP {response.status_code}")

            try:
                data = response.json()
            except ValueError as exc:
                raise UploadError("Upload response was not JSON") from exc

        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            raise UploadError("Upload response did not include a url")

        log.info("asset_uploaded", mime=mime, size=len(body), url=url)
        return url
