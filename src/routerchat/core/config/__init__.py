"""Configuration loading and constants for routerchat.

This package exposes the split configuration modules as a single interface.
"""

from routerchat.core.config.constants import (
    API_KEY_ENV_VARS,
    DEFAULT_IMAGE_EXTENSION,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_TEXT_MODEL,
    EXPORT_TITLE,
    IMAGE_MODALITIES,
    IMAGE_MODEL_ENV_VARS,
    IMAGE_ONLY_PLACEHOLDER,
    NO_TEXT_PLACEHOLDER,
    OPENROUTER_CHAT_COMPLETIONS_URL,
    OPENROUTER_DEFAULT_APP_NAME,
    TEXT_MODEL_ENV_VARS,
)
from routerchat.core.config.http import (
    DEFAULT_USER_AGENT,
    HttpxClientOptions,
    get_or_create_httpx_client,
)
from routerchat.core.config.manager import (
    CONFIG_CACHE_TTL,
    DEFAULT_CONFIG_FILENAME,
    ConfigFileEmptyError,
    ConfigFileNotFoundError,
    clear_config_cache,
    get_config,
    get_config_or_default,
    get_float_setting,
)
from routerchat.core.config.utils import first_env_value, normalize_api_key

__all__ = [
    "API_KEY_ENV_VARS",
    "CONFIG_CACHE_TTL",
    "DEFAULT_CONFIG_FILENAME",
    "DEFAULT_IMAGE_EXTENSION",
    "DEFAULT_IMAGE_MODEL",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_TEXT_MODEL",
    "DEFAULT_USER_AGENT",
    "EXPORT_TITLE",
    "IMAGE_MODALITIES",
    "IMAGE_MODEL_ENV_VARS",
    "IMAGE_ONLY_PLACEHOLDER",
    "NO_TEXT_PLACEHOLDER",
    "OPENROUTER_CHAT_COMPLETIONS_URL",
    "OPENROUTER_DEFAULT_APP_NAME",
    "TEXT_MODEL_ENV_VARS",
    "ConfigFileEmptyError",
    "ConfigFileNotFoundError",
    "HttpxClientOptions",
    "clear_config_cache",
    "first_env_value",
    "get_config",
    "get_config_or_default",
    "get_float_setting",
    "get_or_create_httpx_client",
    "normalize_api_key",
]
