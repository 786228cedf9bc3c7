"""
Command line front end for the Lumina admin gate.

Usage:
    lumina status              # Which backend is active, is a password set?
    lumina login               # First-time setup or login, interactively
    lumina upload PHOTO.jpg    # Upload an image (cloud mode) and print its URL
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

from dotenv import load_dotenv

from lumina.assets import encode_data_url, upload_image
from lumina.auth.base import CredentialBackend
from lumina.auth.factory import create_backend
from lumina.auth.gate import AuthGate, AuthMode
from lumina.config import LuminaConfig
from lumina.errors import UploadError
from lumina.logging import configure_from
from lumina.tracing import setup_tracing


async def _release(backend: CredentialBackend) -> None:
    aclose = getattr(backend, "aclose", None)
    if aclose is not None:
        await aclose()


async def cmd_status(config: LuminaConfig) -> int:
    """Show the active backend and whether a password exists there."""
    backend = create_backend(config)
    try:
        is_set = await backend.exists()
    finally:
        await _release(backend)

    where = config.cloud.api_url if config.is_cloud else config.storage.path
    print(f"  Mode:      {'cloud' if config.is_cloud else 'local'}")
    print(f"  Backend:   {where}")
    print(f"  Password:  {'set' if is_set else 'not set (run: lumina login)'}")
    return 0


async def cmd_login(config: LuminaConfig) -> int:
    """Open the gate and keep prompting until setup or login succeeds."""
    gate = AuthGate.from_config(config, on_success=lambda: print("\n  ✅ Signed in as admin."))
    try:
        mode = await gate.open()
        if mode is None:
            return 1

        title = "First-time setup" if mode is AuthMode.SETUP_REQUIRED else "Admin login"
        print(f"\n=== {title} ===")
        print(f"  {gate.mode_label}\n")

        while gate.is_open:
            if gate.mode is AuthMode.SETUP_REQUIRED:
                password = getpass.getpass("  New password: ")
                confirm = getpass.getpass("  Confirm new password: ")
            else:
                password = getpass.getpass("  Password: ")
                confirm = None
            if not await gate.submit(password, confirm):
                print(f"  ❌ {gate.error}")
    except (KeyboardInterrupt, EOFError):
        gate.close()
        print("\nLogin cancelled.")
        return 1
    finally:
        await _release(gate.backend)
    return 0


async def cmd_upload(config: LuminaConfig, path: Path) -> int:
    """Upload an image file and print where it ended up."""
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"Cannot read {path}: {e}")
        return 1

    try:
        result = await upload_image(encode_data_url(data), config)
    except UploadError as e:
        print(f"Upload failed: {e}")
        return 1

    if config.is_cloud:
        print(result)
    else:
        print(f"Local mode: image kept inline ({len(result)} characters), nothing uploaded.")
    return 0


def main(argv: list[str] | None = None) -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(prog="lumina", description="Lumina admin gate")
    parser.add_argument("--config", type=Path, default=None, help="Path to a config.toml")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("status", help="Show backend and password status")
    sub.add_parser("login", help="Set up or enter the admin password")
    upload = sub.add_parser("upload", help="Upload an image to the cloud store")
    upload.add_argument("file", type=Path)

    args = parser.parse_args(argv)

    config = LuminaConfig.load(args.config)
    configure_from(config.logging)
    if config.tracing.console:
        setup_tracing(console=True)

    if args.command == "status":
        code = asyncio.run(cmd_status(config))
    elif args.command == "login":
        code = asyncio.run(cmd_login(config))
    elif args.command == "upload":
        code = asyncio.run(cmd_upload(config, args.file))
    else:
        parser.print_help()
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
