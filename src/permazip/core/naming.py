"""Naming utilities for archive files and option keys.

All functions are pure (no I/O).
"""

import re

from permazip.core.types import AssetKind

ARCHIVE_EXTENSION = ".zip"


def sanitize_slug(slug: str) -> str:
    """Sanitize a slug for use as a filename component.

    - Replaces whitespace runs with `-`
    - Drops characters outside `[A-Za-z0-9._-]`
    - Strips leading/trailing `.`, `_` and `-`
    Returns `"asset"` if the result is empty.

    Distinct slugs can map to the same result, e.g. `"my plugin"` and
    `"my-plugin"` both become `"my-plugin"` and share one archive and one
    version option. Asset sources warn when that happens.

    Examples:
        >>> sanitize_slug("My Plugin")
        "My-Plugin"
        >>> sanitize_slug("../../etc")
        "etc"
    """
    dashed = re.sub(r"\s+", "-", slug.strip())
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "", dashed)
    trimmed = cleaned.strip("._-")
    return trimmed or "asset"


def archive_filename(kind: AssetKind, slug: str) -> str:
    """Return the deterministic archive filename for `(kind, slug)`."""
    return f"{kind.value}-{sanitize_slug(slug)}{ARCHIVE_EXTENSION}"


def version_option_key(kind: AssetKind, slug: str) -> str:
    """Return the option key that stores the last-seen version of `(kind, slug)`."""
    return f"{kind.value}_version_{sanitize_slug(slug)}"


def slug_from_plugin_file(plugin_file: str) -> str:
    """Derive a plugin slug from its main file path relative to the plugins dir.

    Examples:
        >>> slug_from_plugin_file("demo/demo.php")
        "demo"
        >>> slug_from_plugin_file("hello.php")
        "hello"
    """
    normalized = plugin_file.replace("\\", "/").strip("/")
    if "/" in normalized:
        return normalized.split("/", 1)[0]
    if normalized.endswith(".php"):
        return normalized[: -len(".php")]
    return normalized
