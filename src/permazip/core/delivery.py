"""Tokenized download URLs and download path resolution.

A token is an HMAC-SHA256 over `"{filename}|{site_identity}"`. Tokens do not
expire: the URL for a filename stays valid for as long as the secret and the
site identity are unchanged, even though the archive behind it is rebuilt.
"""

import hashlib
import hmac
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlencode

from permazip.core.naming import ARCHIVE_EXTENSION

DOWNLOAD_PATH = "/api/v1/download"


class DeliveryError(Exception):
    """Base class for rejected download requests."""


class ForbiddenError(DeliveryError):
    """Raised for bad tokens, path traversal, or non-archive filenames."""


class NotFoundError(DeliveryError):
    """Raised when the requested archive does not exist."""


@dataclass(frozen=True)
class TokenSigner:
    """Immutable signing context, built once from the persisted secret."""

    secret: str
    site_identity: str

    def issue_token(self, filename: str) -> str:
        message = f"{filename}|{self.site_identity}".encode()
        return hmac.new(self.secret.encode(), message, hashlib.sha256).hexdigest()

    def issue_url(self, filename: str) -> str:
        """Return the permanent tokenized download URL for filename."""
        query = urlencode({"filename": filename, "token": self.issue_token(filename)})
        return f"{self.site_identity.rstrip('/')}{DOWNLOAD_PATH}?{query}"

    def verify(self, filename: str, token: str) -> bool:
        """Check token against the expected one in constant time.

        Compares bytes so that tokens with non-ASCII characters are rejected
        rather than raising.
        """
        expected = self.issue_token(filename).encode()
        return hmac.compare_digest(expected, token.encode("utf-8", "surrogatepass"))


def resolve_archive_path(download_dir: Path, filename: str) -> Path:
    """Resolve filename inside download_dir.

    Raises:
        ForbiddenError: If filename is not an archive or escapes download_dir
    """
    if not filename.endswith(ARCHIVE_EXTENSION):
        raise ForbiddenError(f"Not an archive: {filename}")
    base = download_dir.resolve()
    candidate = (base / filename).resolve()
    if base not in candidate.parents:
        raise ForbiddenError(f"Path escapes download directory: {filename}")
    return candidate


def resolve_download(download_dir: Path, filename: str, token: str, signer: TokenSigner) -> Path:
    """Validate a tokenized download request and return the file to stream.

    Args:
        download_dir: Directory holding the archives
        filename: Requested archive filename
        token: Token presented by the client
        signer: Signing context used to recompute the expected token

    Returns:
        Canonical path of an existing archive

    Raises:
        ForbiddenError: Bad token, traversal attempt, or wrong extension
        NotFoundError: The archive does not exist
    """
    if not signer.verify(filename, token):
        raise ForbiddenError("Invalid download token")
    path = resolve_archive_path(download_dir, filename)
    if not path.is_file():
        raise NotFoundError(f"Archive not found: {filename}")
    return path
