"""Configuration helper functions."""

import os
from collections.abc import Iterable, Mapping


def first_env_value(
    names: Iterable[str],
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Return the first non-blank value among the given environment variables.

    Args:
        names: Variable names in lookup order.
        environ: Mapping to read from; defaults to ``os.environ``.

    Returns:
        The stripped value, or None when every variable is unset or blank.

    """
    env = os.environ if environ is None else environ
    for name in names:
        value = env.get(name)
        if value and value.strip():
            return value.strip()
    return None


def normalize_api_key(raw_api_key: object) -> str:
    """Normalize a user-supplied credential into a stripped string."""
    if raw_api_key is None:
        return ""
    if isinstance(raw_api_key, str):
        return raw_api_key.strip()
    return str(raw_api_key).strip()
