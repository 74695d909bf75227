# src/cache/keys.py - v1
"""Cache key construction from ``{name}`` templates.

Resolution happens in two steps. ``resolve_template`` runs once per run and
fills every placeholder except ``{path}``. ``derive_key`` then turns that
template into the key for one cache path. Both are pure functions.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable

from cachedirs.config.settings import ConfigurationError

HASH_PLACEHOLDER = "hash"
PATH_PLACEHOLDER = "path"
PREFIX_PLACEHOLDER = "prefix"

_PLACEHOLDER_RE = re.compile(r"\{(.*?)\}")
_UNSAFE_PATH_CHARS_RE = re.compile(r"[^A-Za-z0-9_]")


def find_placeholders(template: str) -> list[str]:
    """Return the distinct placeholder names in ``template``, in order of appearance."""
    return list(dict.fromkeys(_PLACEHOLDER_RE.findall(template)))


def platform_prefix(platform: str = sys.platform) -> str:
    """Default value for ``{prefix}``, e.g. ``linux-``."""
    return f"{platform}-"


def sanitize_path(path: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _UNSAFE_PATH_CHARS_RE.sub("_", path)


def resolve_template(
    template: str,
    lookup: Callable[[str], str | None],
    digest: str,
    platform: str = sys.platform,
) -> str:
    """Resolve every placeholder except ``{path}``.

    ``{hash}`` takes ``digest``. Any other ``{name}`` takes ``lookup(name)``;
    an unset ``{prefix}`` falls back to ``platform_prefix(platform)``.
    Substitution is a single pass, so replacement values are never rescanned
    for placeholders.

    Raises:
        ConfigurationError: If a placeholder has no value and no fallback.
    """
    values: dict[str, str] = {}
    missing: list[str] = []
    for name in find_placeholders(template):
        if name in (HASH_PLACEHOLDER, PATH_PLACEHOLDER):
            continue
        value = lookup(name) or (
            platform_prefix(platform) if name == PREFIX_PLACEHOLDER else ""
        )
        if not value:
            missing.append(name)
        elif "{" in value or "}" in value:
            raise ConfigurationError(
                f"Value of input key-{name} must not contain braces: {value!r}"
            )
        values[name] = value
    if missing:
        raise ConfigurationError(
            "No value for key placeholder(s): "
            + ", ".join(f"{{{name}}} (input key-{name})" for name in missing)
        )

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name == PATH_PLACEHOLDER:
            return match.group(0)
        if name == HASH_PLACEHOLDER:
            return digest
        return values[name]

    return _PLACEHOLDER_RE.sub(_substitute, template)


def derive_key(resolved_template: str, path: str, digest: str) -> str:
    """Build the final key for one cache path.

    ``{hash}`` is normally already resolved; it is replaced here as well so the
    function also accepts raw templates.
    """
    return (
        resolved_template
        .replace("{" + PATH_PLACEHOLDER + "}", sanitize_path(path))
        .replace("{" + HASH_PLACEHOLDER + "}", digest)
    )
