from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from music_search.errors import ConfigError

CATALOG_CREDENTIAL_VARS = ("SPOTIPY_CLIENT_ID", "SPOTIPY_CLIENT_SECRET")


def load_local_env_file(env_path: str = ".env") -> None:
    """Load key=value pairs from a local .env file into process env.

    Existing environment variables are preserved and not overwritten.
    """

    path = Path(env_path)
    if not path.exists():
        return

    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue

        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")

        if key and key not in os.environ:
            os.environ[key] = value


def _env_int(name: str, fallback: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


def _env_str(name: str, fallback: str | None = None) -> str | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return fallback
    return raw.strip()


@dataclass(slots=True)
class Settings:
    client_id: str | None = None
    client_secret: str | None = None
    mongodb_uri: str | None = None
    mongodb_db: str = "project4"
    port: int = 5000
    session_ttl_seconds: int = 3600
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            client_id=_env_str("SPOTIPY_CLIENT_ID"),
            client_secret=_env_str("SPOTIPY_CLIENT_SECRET"),
            mongodb_uri=_env_str("MONGODB_URI"),
            mongodb_db=_env_str("MONGODB_DB", "project4"),
            port=_env_int("PORT", 5000),
            session_ttl_seconds=_env_int("SESSION_TTL_SECONDS", 3600),
            log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        )

    def require_catalog_credentials(self) -> tuple[str, str]:
        values = dict(zip(CATALOG_CREDENTIAL_VARS, (self.client_id, self.client_secret)))
        missing = [name for name, value in values.items() if not value]
        if missing:
            missing_list = ", ".join(missing)
            raise ConfigError(
                f"Missing Spotify credentials: {missing_list}. "
                "Set them in environment variables or local .env file."
            )
        return self.client_id, self.client_secret


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
