"""Abstract interface for persisted key/value options."""

import secrets
from abc import ABC, abstractmethod

SECRET_KEY_OPTION = "secret_key"


class OptionStore(ABC):
    """Abstract interface for a flat string-to-string option store.

    Holds the site-wide secret and the last-seen version of every asset.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key.

        Returns:
            True if the key existed, False otherwise
        """
        ...

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Return all keys starting with prefix, sorted."""
        ...


def get_or_create_secret(store: OptionStore) -> str:
    """Return the site-wide secret, generating and persisting it on first use."""
    existing = store.get(SECRET_KEY_OPTION)
    if existing:
        return existing
    secret = secrets.token_hex(32)
    store.set(SECRET_KEY_OPTION, secret)
    return secret
