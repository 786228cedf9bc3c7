"""
Image payload helpers and the mode-agnostic upload entry point.

Callers hand over images either as ``data:`` URLs (what a browser file
reader produces) or as raw bytes.  In local mode nothing is uploaded and
the payload comes back unchanged, so callers can store whatever
:func:`upload_image` returns without caring which mode is active.
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import TYPE_CHECKING

from lumina.errors import UploadError

if TYPE_CHECKING:
    from lumina.auth.cloud import CredentialAuthority
    from lumina.config import LuminaConfig

_DATA_URL_HEADER = re.compile(r"^data:(?P<mime>[^;,]+);base64$")

# (magic prefix, mime)
_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]


def detect_mime(data: bytes) -> str:
    """Guess an image mime type from its leading bytes."""
    for magic, mime in _SIGNATURES:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def decode_data_url(text: str) -> tuple[bytes, str]:
    """Split a ``data:<mime>;base64,<data>`` URL into bytes and mime type."""
    header, sep, encoded = text.partition(",")
    match = _DATA_URL_HEADER.match(header.strip())
    if not sep or not match:
        raise UploadError("Image payload is not a base64 data URL")
    try:
        body = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise UploadError("Image payload is not valid base64") from exc
    return body, match.group("mime")


def encode_data_url(data: bytes, mime: str | None = None) -> str:
    """Build a ``data:`` URL for raw image bytes."""
    mime = mime or detect_mime(data)
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


async def upload_image(
    payload: str | bytes,
    config: LuminaConfig,
    authority: CredentialAuthority | None = None,
) -> str | bytes:
    """Upload ``payload`` in cloud mode, or return it untouched in local mode.

    A temporary :class:`CredentialAuthority` is built from ``config`` when
    none is passed in.
    """
    if not config.is_cloud:
        return payload

    if authority is not None:
        return await authority.upload_asset(payload)

    from lumina.auth.cloud import CredentialAuthority

    async with CredentialAuthority.from_config(config.cloud) as client:
        return await client.upload_asset(payload)
