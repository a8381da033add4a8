"""Custom exceptions and user-facing error messages for routerchat."""

EMPTY_RESPONSE_MESSAGE = "Response ended with no content"
TRANSPORT_UNAVAILABLE_MESSAGE = (
    "Chat transport is unavailable. Run the full application to send messages."
)
MALFORMED_RESPONSE_MESSAGE = "Response did not contain a message"


class MissingCredentialError(RuntimeError):
    """Raised when no OpenRouter API key can be found."""
