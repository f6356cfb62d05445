r"""Response inspection utilities.

This module provides the default retry predicate applied to attempts
that obtained a response.
"""

from __future__ import annotations

__all__ = ["RETRY_STATUS_CODES", "default_should_retry", "get_status_code"]

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from retrystream.outcome import Responded


# Status codes retried even though they are not outside [200, 400)
# 429: Too Many Requests - Rate limiting
RETRY_STATUS_CODES = (429,)


def get_status_code(response: Any) -> int:
    """Return the status code of a transport response.

    ``httpx.Response`` exposes ``status_code``; lighter transports may
    expose ``status`` instead.

    Args:
        response: The transport response.

    Returns:
        The integer status code.

    Raises:
        TypeError: If the response carries no status code.

    Example:
        ```pycon
        >>> import httpx
        >>> from retrystream.utils.response import get_status_code
        >>> get_status_code(httpx.Response(503))
        503

        ```
    """
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(response, "status", None)
    if status is None:
        msg = f"response {response!r} has no status_code or status attribute"
        raise TypeError(msg)
    return int(status)


def default_should_retry(outcome: Responded) -> bool:
    """Decide whether a response is worth another attempt.

    A response is retried when its status lies outside ``[200, 400)``
    (informational codes and errors), when it is 429, or when it lies in
    ``[500, 600)``. Successful responses, redirects and ordinary client
    errors (400-428, 430-499) are never retried.

    Args:
        outcome: The outcome of an attempt that obtained a response.

    Returns:
        ``True`` if the request should be retried.

    Example:
        ```pycon
        >>> import httpx
        >>> from retrystream.outcome import Responded
        >>> from retrystream.utils.response import default_should_retry
        >>> default_should_retry(Responded(httpx.Response(503)))
        True
        >>> default_should_retry(Responded(httpx.Response(200)))
        False
        >>> default_should_retry(Responded(httpx.Response(404)))
        False

        ```
    """
    status = get_status_code(outcome.response)
    if status in RETRY_STATUS_CODES or 500 <= status < 600:
        return True
    # 4xx other than 429 is a client error, another attempt will not help
    if 400 <= status < 500:
        return False
    return not 200 <= status < 400
