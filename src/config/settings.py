"""Client configuration for the Imgur API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from dotenv import dotenv_values, load_dotenv

from src.uploaders.errors import ConfigError

DEFAULT_UPLOAD_URL = "https://api.imgur.com/3/image"
DEFAULT_GEN_TOKEN_URL = "https://api.imgur.com/oauth2/token"
DEFAULT_AUTHORIZATION_URL = "https://api.imgur.com/oauth2/authorize"

DEFAULT_CONFIG_FILE = Path("config") / "imgur.env"


class ConfigSource(Protocol):
    """Anything that can look up a configuration value by key."""

    def load(self, key: str) -> str | None: ...


class DotenvConfigSource:
    """Key/value configuration read from a dotenv-format file."""

    def __init__(self, path: Path | None = None) -> None:
        """Read the configuration file.

        Args:
            path: Path to the file (defaults to config/imgur.env)

        Raises:
            ConfigError: If the file does not exist or cannot be read
        """
        self.path: Path = path or DEFAULT_CONFIG_FILE
        if not self.path.is_file():
            raise ConfigError(f"Configuration file not found: {self.path}")

        try:
            self._values: dict[str, str | None] = dotenv_values(self.path, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Failed to read configuration file {self.path}: {e}") from e

    def load(self, key: str) -> str | None:
        value = self._values.get(key)
        return value or None


@dataclass(frozen=True)
class ClientConfig:
    """Endpoints and credentials used by an uploader."""

    client_id: str = ""
    client_secret: str = ""
    upload_url: str = DEFAULT_UPLOAD_URL
    gen_token_url: str = DEFAULT_GEN_TOKEN_URL
    authorization_url: str = DEFAULT_AUTHORIZATION_URL

    def delete_url(self, delete_hash: str) -> str:
        """URL of the image addressed by a delete hash."""
        return f"{self.upload_url.rstrip('/')}/{delete_hash}"

    @classmethod
    def from_source(cls, source: ConfigSource) -> ClientConfig:
        """Build a configuration from a key/value source.

        Keys: ClientID (required), ClientSecret, UploadUrl, GenTokenUrl,
        AuthorizationUrl. Absent URLs keep their defaults.

        Raises:
            ConfigError: If ClientID is missing
        """
        client_id = source.load("ClientID")
        if not client_id:
            raise ConfigError("ClientID not found in configuration")

        return cls(
            client_id=client_id,
            client_secret=source.load("ClientSecret") or "",
            upload_url=source.load("UploadUrl") or DEFAULT_UPLOAD_URL,
            gen_token_url=source.load("GenTokenUrl") or DEFAULT_GEN_TOKEN_URL,
            authorization_url=source.load("AuthorizationUrl") or DEFAULT_AUTHORIZATION_URL,
        )

    @classmethod
    def from_file(cls, path: Path | None = None) -> ClientConfig:
        return cls.from_source(DotenvConfigSource(path))

    @classmethod
    def from_env(cls) -> ClientConfig:
        """Build a configuration from environment variables and a .env file.

        Raises:
            ConfigError: If IMGUR_CLIENT_ID is not set
        """
        _ = load_dotenv()
        client_id = os.getenv("IMGUR_CLIENT_ID")
        if not client_id:
            raise ConfigError(
                "IMGUR_CLIENT_ID not found in environment variables. "
                + "Please add it to your .env file."
            )

        return cls(
            client_id=client_id,
            client_secret=os.getenv("IMGUR_CLIENT_SECRET", ""),
            upload_url=os.getenv("IMGUR_UPLOAD_URL") or DEFAULT_UPLOAD_URL,
        )
