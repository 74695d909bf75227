# src/config/inputs.py - v1
"""Host-environment input adapter.

CI runners hand named inputs to the tool as ``INPUT_<NAME>`` environment
variables (GitHub Actions convention: upper-cased, spaces replaced by ``_``,
hyphens kept). This is the only module that reads them; everything downstream
receives an explicit CacheConfiguration.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

from cachedirs.cache.models import CacheConfiguration
from cachedirs.config.settings import ConfigurationError

logger = logging.getLogger(__name__)

KEY_INPUT_PREFIX = "key-"
KEY_TEMPLATE_INPUT = "key-template"
PATH_SEPARATOR = ";"


def input_env_name(name: str) -> str:
    """Return the environment variable carrying input ``name``."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


class ActionInputs:
    """Named inputs read from the environment, with optional overrides.

    Args:
        environ: Source mapping. Defaults to ``os.environ``.
        overrides: Input values that take precedence over the environment
            (used by CLI flags). Keys are input names, e.g. ``key-prefix``.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        overrides: Mapping[str, str] | None = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._overrides = dict(overrides or {})

    def get(self, name: str, required: bool = False) -> str:
        """Return the trimmed input value, or ``""`` if not supplied.

        Raises:
            ConfigurationError: If ``required`` and the input is missing or blank.
        """
        if name in self._overrides:
            value = self._overrides[name]
        else:
            value = self._environ.get(input_env_name(name), "")
        value = value.strip()
        if required and not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value

    def key_values(self) -> dict[str, str]:
        """Collect every non-empty ``key-<name>`` input keyed by ``<name>``."""
        env_prefix = input_env_name(KEY_INPUT_PREFIX)
        template_var = input_env_name(KEY_TEMPLATE_INPUT)
        values: dict[str, str] = {}
        # Input names are case-insensitive once upper-cased into the
        # environment, so names are stored lower-cased.
        for var, raw in self._environ.items():
            if var == template_var or not var.startswith(env_prefix):
                continue
            if raw.strip():
                values[var[len(env_prefix):].lower()] = raw.strip()
        for name, raw in self._overrides.items():
            if name == KEY_TEMPLATE_INPUT or not name.startswith(KEY_INPUT_PREFIX):
                continue
            if raw.strip():
                values[name[len(KEY_INPUT_PREFIX):].lower()] = raw.strip()
        return values


def parse_cache_paths(raw: str) -> list[str]:
    """Split a ``;``-delimited path list, dropping blanks and duplicates."""
    paths: list[str] = []
    for part in raw.split(PATH_SEPARATOR):
        path = part.strip()
        if not path:
            continue
        if path in paths:
            logger.debug("Ignoring duplicate cache path %s", path)
            continue
        paths.append(path)
    return paths


def load_cache_configuration(inputs: ActionInputs) -> CacheConfiguration:
    """Build the run configuration from host inputs.

    Raises:
        ConfigurationError: If a required input is missing or no usable
            cache path remains after parsing.
    """
    cache_paths = parse_cache_paths(inputs.get("cache-paths", required=True))
    if not cache_paths:
        raise ConfigurationError("Input cache-paths contains no paths")

    return CacheConfiguration(
        cache_paths=cache_paths,
        key_template=inputs.get(KEY_TEMPLATE_INPUT, required=True),
        invalidation_pattern=inputs.get("cache-invalidation-pattern", required=True),
        key_values=inputs.key_values(),
    )
