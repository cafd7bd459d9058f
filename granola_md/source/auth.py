"""Bearer token resolution for the Granola API."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path

from granola_md.config.models import APIConfig
from granola_md.errors import GranolaAPIError

logger = logging.getLogger(__name__)


def default_credentials_path() -> Path:
    """Where the Granola desktop app stores its session."""
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "Granola" / "supabase.json"
    if sys.platform == "win32":
        return home / "AppData" / "Roaming" / "Granola" / "supabase.json"
    return home / ".config" / "Granola" / "supabase.json"


def resolve_token(config: APIConfig, token: str | None = None) -> str:
    """Return the bearer token: explicit > env var > desktop credentials file."""
    if token:
        return token

    from_env = os.environ.get(config.token_env)
    if from_env:
        return from_env

    path = Path(config.credentials_file).expanduser() if config.credentials_file else default_credentials_path()
    if path.is_file():
        return load_credentials(path)

    raise GranolaAPIError(
        f"Granola token required: set {config.token_env} env var, pass --token, "
        f"or sign in to the desktop app ({path})"
    )


def load_credentials(path: Path) -> str:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise GranolaAPIError(f"Failed to load Granola credentials from {path}: {e}") from e

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token:
        raise GranolaAPIError(f"Missing access_token in {path}")

    token_type = data.get("token_type")
    if token_type and str(token_type).lower() != "bearer":
        raise GranolaAPIError(f"Invalid token type in {path}: {token_type}")

    expires_at = data.get("expires_at")
    if isinstance(expires_at, (int, float)) and time.time() > expires_at:
        raise GranolaAPIError(f"Access token in {path} has expired; reopen the Granola app")

    logger.debug("Loaded Granola credentials from %s", path)
    return access_token
