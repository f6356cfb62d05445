r"""Utility functions for response inspection."""

from __future__ import annotations

__all__ = ["RETRY_STATUS_CODES", "default_should_retry", "get_status_code"]

from retrystream.utils.response import RETRY_STATUS_CODES, default_should_retry, get_status_code
