"""Constant definitions for routerchat."""

# OpenRouter endpoint
OPENROUTER_CHAT_COMPLETIONS_URL = "https://openrouter.ai/api/v1/chat/completions"
OPENROUTER_DEFAULT_APP_NAME = "routerchat"

# Credential and model environment variables, in lookup order
API_KEY_ENV_VARS = ("OPENROUTER_API_KEY", "OPENROUTER_KEY", "OPENROUTER_API_TOKEN")
TEXT_MODEL_ENV_VARS = ("OPENROUTER_TEXT_MODEL", "TEXT_MODEL")
IMAGE_MODEL_ENV_VARS = ("OPENROUTER_IMAGE_MODEL", "IMAGE_MODEL")

DEFAULT_TEXT_MODEL = "openai/gpt-5.2-chat"
DEFAULT_IMAGE_MODEL = "google/gemini-3-pro-image-preview"

# Requested output modalities for image-capable models
IMAGE_MODALITIES = ("image", "text")

# Transcript placeholders
NO_TEXT_PLACEHOLDER = "(no text)"
IMAGE_ONLY_PLACEHOLDER = "(image generated)"

# Export
EXPORT_TITLE = "Conversation Export"
DEFAULT_IMAGE_EXTENSION = "png"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 120.0
