from __future__ import annotations

import logging
import typing as t

import httpx
import tenacity

from ollamagen.utils import AsyncContextMixin

logger = logging.getLogger("ollamagen.transport")


class ChatCompletionsTransport(AsyncContextMixin):
    """HTTP transport for an OpenAI-compatible chat-completion service.

    Thin wrapper over ``httpx.AsyncClient`` that posts JSON bodies and hands
    back raw ``httpx.Response`` objects. Status codes are not interpreted
    here, the caller decides what a non-success status means.

    Connection-level failures (``httpx.TransportError``: refused connection,
    dropped socket, ...) are retried only when ``max_retries`` is positive.
    HTTP error statuses are never retried.

    Attributes:
        url: The base URL of the service.
        http_client: The underlying httpx AsyncClient instance.

    Args:
        base_url: Base URL for all requests.
        timeout: Request timeout in seconds. None disables timeouts.
        http_client: Optional pre-configured httpx.AsyncClient. If not
            provided, a new client is created and owned by the transport.
        default_headers: Optional default headers for all requests.
        max_retries: Extra attempts after a connection-level failure.
            Defaults to 0 (a single attempt).
        retry_wait: Wait time in seconds between attempts.

    Example:
        ```python
        async with ChatCompletionsTransport("http://localhost:11434") as transport:
            response = await transport.post_json(
                "/v1/chat/completions",
                {"model": "devstral:24b", "messages": [], "stream": False},
            )
            print(response.status_code)
        ```
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        default_headers: t.Mapping[str, str] | None = None,
        max_retries: int = 0,
        retry_wait: float = 1.0,
    ):
        self.url = base_url
        self._owns_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=default_headers,
        )
        self.max_retries = max_retries
        self.retry_wait = retry_wait

    def _retrying(self) -> tenacity.AsyncRetrying:
        return tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.max_retries + 1),
            wait=tenacity.wait_fixed(self.retry_wait),
            retry=tenacity.retry_if_exception_type(httpx.TransportError),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    def _url(self, endpoint: str) -> str:
        # Absolute, so injected clients need no base_url of their own
        return f"{self.url.rstrip('/')}/{endpoint.lstrip('/')}"

    async def post_json(self, endpoint: str, payload: t.Mapping[str, t.Any]) -> httpx.Response:
        """POST a JSON body and read the whole response.

        Args:
            endpoint: Endpoint path, relative to the base URL.
            payload: JSON body.

        Returns:
            The fully read response, whatever its status.

        Raises:
            httpx.TransportError: If the request could not be completed after
                all attempts.
        """
        url = self._url(endpoint)
        async for attempt in self._retrying():
            with attempt:
                response = await self.http_client.post(url, json=payload)
        logger.debug("POST %s -> %s", url, response.status_code)
        return response

    async def open_stream(self, endpoint: str, payload: t.Mapping[str, t.Any]) -> httpx.Response:
        """POST a JSON body and return as soon as the response headers arrive.

        The body is left unread. The caller owns the response and must
        ``aclose()`` it once done with the body.

        Args:
            endpoint: Endpoint path, relative to the base URL.
            payload: JSON body.

        Returns:
            The streaming response, whatever its status.

        Raises:
            httpx.TransportError: If the request could not be sent after all
                attempts.
        """
        url = self._url(endpoint)
        async for attempt in self._retrying():
            with attempt:
                request = self.http_client.build_request("POST", url, json=payload)
                response = await self.http_client.send(request, stream=True)
        logger.debug("POST %s (stream) -> %s", url, response.status_code)
        return response

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()
