from __future__ import annotations

import asyncio
import logging
import sys

import httpx

import retrystream
from retrystream.transport import HttpxTransport

logger: logging.Logger = logging.getLogger(__name__)

# Use httpbin.org for real HTTP testing
HTTPBIN_URL = "https://httpbin.org"


async def check_request_async() -> None:
    logger.info("Checking request_async...")
    async with httpx.AsyncClient() as client:
        config = retrystream.RetryConfig(transport=HttpxTransport(client))
        response, body = await retrystream.request_async(f"{HTTPBIN_URL}/get", config)
    assert response.status_code == 200
    assert body


async def check_request_stream() -> None:
    logger.info("Checking request_stream...")
    async with httpx.AsyncClient() as client:
        config = retrystream.RetryConfig(transport=HttpxTransport(client))
        stream = retrystream.request_stream(f"{HTTPBIN_URL}/bytes/64", config)
        body = await stream.read()
        await stream.wait()
    assert stream.response.status_code == 200
    assert len(body) == 64


async def run_checks() -> None:
    await check_request_async()
    await check_request_stream()


def main() -> None:
    r"""Run all package checks to validate installation and
    functionality."""
    try:
        asyncio.run(run_checks())

        logger.info("✅ All package checks passed successfully!")
    except Exception:
        logger.exception("❌ Package check failed")
        sys.exit(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
