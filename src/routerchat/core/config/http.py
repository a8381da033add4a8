"""HTTP client configuration and factory."""

from dataclasses import dataclass

import httpx

DEFAULT_USER_AGENT = "routerchat/0.1 (+https://openrouter.ai)"


@dataclass(frozen=True, slots=True)
class HttpxClientOptions:
    """Options for configuring an httpx.AsyncClient."""

    timeout: float = 120.0
    connect_timeout: float = 10.0
    max_connections: int = 4
    max_keepalive: int = 2
    headers: dict[str, str] | None = None
    follow_redirects: bool = True


def get_or_create_httpx_client(
    client_holder: list[httpx.AsyncClient | None],
    *,
    options: HttpxClientOptions | None = None,
) -> httpx.AsyncClient:
    """Get or create a shared httpx.AsyncClient with lazy initialization.

    Args:
        client_holder: A mutable list containing the client instance (or empty).
            Used as a container so the client can be shared by its owner.
        options: Optional configuration overrides for the httpx client.

    Returns:
        httpx.AsyncClient instance.

    """
    if (
        client_holder
        and client_holder[0] is not None
        and not client_holder[0].is_closed
    ):
        return client_holder[0]

    effective_options = options or HttpxClientOptions()
    final_headers = {
        "User-Agent": DEFAULT_USER_AGENT,
        **(effective_options.headers or {}),
    }

    client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            effective_options.timeout,
            connect=effective_options.connect_timeout,
        ),
        limits=httpx.Limits(
            max_connections=effective_options.max_connections,
            max_keepalive_connections=effective_options.max_keepalive,
        ),
        headers=final_headers,
        follow_redirects=effective_options.follow_redirects,
    )

    if len(client_holder) == 0:
        client_holder.append(client)
    else:
        client_holder[0] = client

    return client
