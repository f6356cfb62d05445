r"""Transport implementation based on ``httpx.AsyncClient``."""

from __future__ import annotations

__all__ = ["HttpxTransport", "HttpxTransportStream"]

import logging
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from retrystream.transport.base import BaseTransport, BaseTransportStream

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

logger: logging.Logger = logging.getLogger(__name__)


def _build_request_kwargs(options: str | Mapping[str, Any]) -> dict[str, Any]:
    """Turn request options into ``httpx.AsyncClient.build_request``
    arguments.

    Args:
        options: A URL, or a mapping with a ``url`` key and optionally a
            ``method`` key plus any other ``build_request`` argument.

    Returns:
        The keyword arguments. The method defaults to ``GET``.
    """
    if isinstance(options, str):
        return {"method": "GET", "url": options}
    kwargs = dict(options)
    kwargs.setdefault("method", "GET")
    return kwargs


class HttpxTransportStream(BaseTransportStream):
    """Streaming output of one attempt made with httpx.

    Args:
        response: The streamed ``httpx.Response``, body not yet read.
        client: A client owned by this attempt, closed together with the
            response. ``None`` if the client is shared.
        object_mode: If ``True``, the body is yielded line by line as
            ``str`` objects instead of raw ``bytes`` chunks.
    """

    def __init__(
        self,
        response: httpx.Response,
        client: httpx.AsyncClient | None = None,
        object_mode: bool = False,
    ) -> None:
        self.response = response
        self._client = client
        self._object_mode = object_mode

    def iter_chunks(self) -> AsyncIterator[Any]:
        if self._object_mode:
            return self.response.aiter_lines()
        return self.response.aiter_bytes()

    async def aclose(self) -> None:
        await self.response.aclose()
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class HttpxTransport(BaseTransport):
    """Transport sending requests with ``httpx.AsyncClient``.

    httpx exposes no abort operation on a streamed response, so discarded
    attempts are released by closing the response.

    Args:
        client: A shared client. If ``None``, each attempt uses its own
            client, closed when the attempt ends.

    Example:
        ```pycon
        >>> import httpx
        >>> from retrystream.transport import HttpxTransport
        >>> transport = HttpxTransport(
        ...     client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        ... )

        ```
    """

    transport_errors: ClassVar[tuple[type[BaseException], ...]] = (httpx.RequestError,)

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client

    async def request(self, options: str | Mapping[str, Any]) -> tuple[httpx.Response, bytes]:
        kwargs = _build_request_kwargs(options)
        if self._client is not None:
            response = await self._client.request(**kwargs)
            return response, response.content
        async with httpx.AsyncClient() as client:
            response = await client.request(**kwargs)
            return response, response.content

    async def stream(
        self, options: str | Mapping[str, Any], *, object_mode: bool = False
    ) -> HttpxTransportStream:
        kwargs = _build_request_kwargs(options)
        client = self._client
        owned = None
        if client is None:
            client = owned = httpx.AsyncClient()
        request = client.build_request(**kwargs)
        logger.debug(f"Opening {request.method} stream to {request.url}")
        try:
            response = await client.send(request, stream=True)
        except BaseException:
            if owned is not None:
                await owned.aclose()
            raise
        return HttpxTransportStream(response, client=owned, object_mode=object_mode)
