"""OpenRouter chat-completions transport."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import httpx

from routerchat.core.config import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    OPENROUTER_CHAT_COMPLETIONS_URL,
    OPENROUTER_DEFAULT_APP_NAME,
    HttpxClientOptions,
    get_or_create_httpx_client,
)
from routerchat.services.openrouter.errors import (
    OpenRouterAPIError,
    error_for_status,
    raise_for_openrouter_payload_error,
    try_parse_json,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

OPENROUTER_SITE_URL_ENV = "OR_SITE_URL"
OPENROUTER_APP_NAME_ENV = "OR_APP_NAME"


def build_openrouter_headers(
    api_key: str,
    *,
    app_name: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Build request headers with bearer auth and attribution."""
    env = os.environ if environ is None else environ
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "X-Title": env.get(OPENROUTER_APP_NAME_ENV)
        or app_name
        or OPENROUTER_DEFAULT_APP_NAME,
    }
    if site_url := env.get(OPENROUTER_SITE_URL_ENV):
        headers["HTTP-Referer"] = site_url
    return headers


class OpenRouterClient:
    """Send chat-completion requests to OpenRouter over httpx.

    The client owns its ``httpx.AsyncClient`` unless one is supplied.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        url: str = OPENROUTER_CHAT_COMPLETIONS_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        app_name: str | None = None,
    ) -> None:
        """Create a client for the chat-completions endpoint."""
        self.url = url
        self.app_name = app_name
        self._owns_client = http_client is None
        self._client_holder: list[httpx.AsyncClient | None] = (
            [http_client] if http_client is not None else []
        )
        self._options = HttpxClientOptions(timeout=timeout)

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Return the underlying httpx client, creating it on first use."""
        return get_or_create_httpx_client(self._client_holder, options=self._options)

    async def complete(self, api_key: str, body: dict[str, object]) -> object:
        """POST ``body`` and return the decoded JSON payload.

        Raises:
            OpenRouterAPIError: Non-2xx status, a non-JSON body, or an error
                payload inside a successful response.
            httpx.HTTPError: Transport-level failure.

        """
        logger.info("Sending chat completion request (model=%s)", body.get("model"))
        response = await self.http_client.post(
            self.url,
            headers=build_openrouter_headers(api_key, app_name=self.app_name),
            json=body,
        )
        text = response.text

        if not response.is_success:
            error = error_for_status(response.status_code, text)
            logger.warning("OpenRouter request failed: %s", error)
            raise error

        payload = try_parse_json(text)
        if payload is None:
            message = (
                f"OpenRouter HTTP {response.status_code}: response body is not JSON"
            )
            raise OpenRouterAPIError(message, status_code=response.status_code)

        raise_for_openrouter_payload_error(payload_obj=payload)
        return payload

    async def aclose(self) -> None:
        """Close the owned httpx client."""
        if not self._owns_client:
            return
        client = self._client_holder[0] if self._client_holder else None
        if client is not None and not client.is_closed:
            await client.aclose()
