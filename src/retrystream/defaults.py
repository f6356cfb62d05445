r"""Process-wide default transport.

Requests whose configuration carries no transport use the transport held
here. It is created lazily on first use, can be replaced with
``set_default_transport`` (e.g. to share a configured
``httpx.AsyncClient``) and returns to its initial state with
``reset_default_transport``. The default lives for the whole process.

Example:
    ```pycon
    >>> import httpx
    >>> from retrystream.defaults import (
    ...     get_default_transport,
    ...     reset_default_transport,
    ...     set_default_transport,
    ... )
    >>> from retrystream.transport import HttpxTransport
    >>> set_default_transport(HttpxTransport(client=httpx.AsyncClient()))
    >>> isinstance(get_default_transport(), HttpxTransport)
    True
    >>> reset_default_transport()

    ```
"""

from __future__ import annotations

__all__ = ["get_default_transport", "reset_default_transport", "set_default_transport"]

import logging
from typing import TYPE_CHECKING

from retrystream.transport.httpx_transport import HttpxTransport

if TYPE_CHECKING:
    from retrystream.transport.base import BaseTransport

logger: logging.Logger = logging.getLogger(__name__)

_default_transport: BaseTransport | None = None


def get_default_transport() -> BaseTransport:
    """Return the process-wide default transport.

    Returns:
        The transport set with ``set_default_transport``, or an
        ``HttpxTransport`` created on first call.
    """
    global _default_transport  # noqa: PLW0603
    if _default_transport is None:
        logger.debug("Creating the default HttpxTransport")
        _default_transport = HttpxTransport()
    return _default_transport


def set_default_transport(transport: BaseTransport) -> None:
    """Replace the process-wide default transport.

    Args:
        transport: The transport used by requests configured without one.
    """
    global _default_transport  # noqa: PLW0603
    _default_transport = transport


def reset_default_transport() -> None:
    """Forget the current default so the next request creates a fresh
    ``HttpxTransport``."""
    global _default_transport  # noqa: PLW0603
    _default_transport = None
