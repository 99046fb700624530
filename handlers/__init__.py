"""HTTP handling for Site Companion.

This package provides the asynchronous HTTP client used by the translation strategies and
the snapshot client. The aiohttp web application lives in `handlers.web_api`.
"""

from handlers.async_comm import (
    AsyncCommError,
    AsyncCommInvalidContentTypeError,
    AsyncCommTimeoutError,
    AsyncHttp,
)

__all__: list[str] = [
    "AsyncCommError",
    "AsyncCommInvalidContentTypeError",
    "AsyncCommTimeoutError",
    "AsyncHttp",
]
