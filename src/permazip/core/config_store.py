"""Configuration data structures and loading.

Provides immutable config data loaded from ~/.permazip/config.toml (or the
file named by PERMAZIP_CONFIG). Loaded once at the entry point and stored in
PermazipContext.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import tomlkit

CONFIG_ENV_VAR = "PERMAZIP_CONFIG"
DEFAULT_SITE_URL = "http://localhost:8000"


def default_state_dir() -> Path:
    return Path.home() / ".permazip"


@dataclass(frozen=True)
class PermazipConfig:
    """Immutable configuration data.

    All fields are read-only after construction.
    """

    content_dir: Path
    download_dir: Path
    state_dir: Path
    site_url: str
    webhook_url: str | None
    admin_token: str | None
    allow_untokenized_downloads: bool

    @property
    def plugins_dir(self) -> Path:
        return self.content_dir / "plugins"

    @property
    def themes_dir(self) -> Path:
        return self.content_dir / "themes"

    @property
    def options_path(self) -> Path:
        return self.state_dir / "options.json"

    @property
    def update_log_path(self) -> Path:
        return self.download_dir / "update-log.json"

    @staticmethod
    def for_content_dir(content_dir: Path, site_url: str = DEFAULT_SITE_URL) -> "PermazipConfig":
        """Build a config with defaults derived from content_dir."""
        return PermazipConfig(
            content_dir=content_dir,
            download_dir=content_dir / "permazip-downloads",
            state_dir=default_state_dir(),
            site_url=site_url,
            webhook_url=None,
            admin_token=None,
            allow_untokenized_downloads=True,
        )


class ConfigStore(ABC):
    """Abstract interface for config persistence.

    Enables in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if config exists."""
        ...

    @abstractmethod
    def load(self) -> PermazipConfig:
        """Load config.

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If config is missing required fields or malformed
        """
        ...

    @abstractmethod
    def save(self, config: PermazipConfig) -> None:
        """Save config."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for error messages)."""
        ...


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes a TOML file."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Create FilesystemConfigStore.

        Args:
            config_path: Explicit config file. If None, uses $PERMAZIP_CONFIG or
                ~/.permazip/config.toml
        """
        self._config_path = config_path

    def path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        from_env = os.environ.get(CONFIG_ENV_VAR)
        if from_env:
            return Path(from_env).expanduser()
        return default_state_dir() / "config.toml"

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> PermazipConfig:
        config_path = self.path()
        if not config_path.exists():
            raise FileNotFoundError(f"Config not found at {config_path}")

        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Malformed config {config_path}: {e}") from e

        content = data.get("content_dir")
        if not content:
            raise ValueError(f"Missing 'content_dir' in {config_path}")
        content_dir = Path(content).expanduser().resolve()

        download = data.get("download_dir")
        state = data.get("state_dir")
        allow_untokenized = data.get("allow_untokenized_downloads", True)
        if not isinstance(allow_untokenized, bool):
            raise ValueError(
                f"'allow_untokenized_downloads' must be true or false in {config_path}"
            )

        return PermazipConfig(
            content_dir=content_dir,
            download_dir=(
                Path(download).expanduser().resolve()
                if download
                else content_dir / "permazip-downloads"
            ),
            state_dir=Path(state).expanduser().resolve() if state else default_state_dir(),
            site_url=str(data.get("site_url") or DEFAULT_SITE_URL).rstrip("/"),
            webhook_url=_optional_str(data.get("webhook_url")),
            admin_token=_optional_str(data.get("admin_token")),
            allow_untokenized_downloads=allow_untokenized,
        )

    def save(self, config: PermazipConfig) -> None:
        config_path = self.path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        doc.add(tomlkit.comment("permazip configuration"))
        doc["content_dir"] = str(config.content_dir)
        doc["download_dir"] = str(config.download_dir)
        doc["state_dir"] = str(config.state_dir)
        doc["site_url"] = config.site_url
        if config.webhook_url:
            doc["webhook_url"] = config.webhook_url
        if config.admin_token:
            doc["admin_token"] = config.admin_token
        doc["allow_untokenized_downloads"] = config.allow_untokenized_downloads

        config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: PermazipConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> PermazipConfig:
        if self._config is None:
            raise FileNotFoundError(f"Config not found at {self.path()}")
        return self._config

    def save(self, config: PermazipConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/permazip/config.toml")
