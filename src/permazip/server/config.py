"""Server configuration from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ServerConfig:
    """Server bind settings loaded from environment variables."""

    host: str
    port: int
    debug: bool

    @staticmethod
    def from_env() -> "ServerConfig":
        """Load configuration from environment variables."""
        return ServerConfig(
            host=os.environ.get("PERMAZIP_HOST", "127.0.0.1"),
            port=int(os.environ.get("PERMAZIP_PORT", "8000")),
            debug=os.environ.get("PERMAZIP_DEBUG", "false").lower() == "true",
        )
