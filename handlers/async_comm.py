"""Asynchronous HTTP client used by the translation engines and the server monitor.

The `AsyncHttp` class owns a single aiohttp session, decodes responses based on their
content type and converts aiohttp failures into the `AsyncCommError` family so callers
only have to handle one exception hierarchy.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession
from aiohttp.web_exceptions import HTTPError

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Mapping

    from aiohttp.client import ClientResponse


__all__: list[str] = ["AsyncCommError", "AsyncCommInvalidContentTypeError", "AsyncCommTimeoutError", "AsyncHttp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST"]

CONNECT_TIMEOUT: Final[float] = 1.0
DEFAULT_TOTAL_TIMEOUT: Final[float] = 10.0


def _decode_json(raw: bytes) -> Any:
    return json.loads(raw.decode("utf-8"))


class AsyncHttp:
    """Asynchronous HTTP client for GET/POST requests with content-type aware decoding.

    The session is created lazily on first use so an instance can be built outside a
    running event loop (for example while wiring services together) and reopened after
    `close()`.
    """

    def __init__(self, *, headers: Mapping[str, str] | None = None) -> None:
        """Initialize the client and register the default content handlers.

        Args:
            headers (Mapping[str, str] | None): Default headers sent with every request.
        """
        logger.info("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None
        self._headers: dict[str, str] = dict(headers or {})
        self.content_handlers: dict[str, Callable[[bytes], Any]] = {}

        self.add_handler("text/plain", lambda x: x.decode("utf-8"))
        self.add_handler("text/html", lambda x: x.decode("utf-8"))
        self.add_handler("application/json", _decode_json)
        # translate.googleapis.com answers with a javascript content type on some edges
        self.add_handler("text/javascript", _decode_json)

    async def __aenter__(self) -> Self:
        logger.debug("%s entering context", self.__class__.__name__)
        self.initialize_session(suppress_already_log=True)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        logger.debug("%s exiting context", self.__class__.__name__)
        await self.close()

    def initialize_session(self, *, suppress_already_log: bool = False) -> None:
        """Create the aiohttp session if it does not exist or has been closed.

        Args:
            suppress_already_log (bool): If True, do not log when the session is already open.
        """
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession(headers=self._headers, raise_for_status=True)
            logger.debug("%s session initialized", self.__class__.__name__)
        elif not suppress_already_log:
            logger.debug("%s session already initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        """Return the open session, creating it on demand."""
        self.initialize_session(suppress_already_log=True)
        if self.__session is None:
            msg = "Session could not be initialized"
            raise RuntimeError(msg)
        return self.__session

    @property
    def is_open(self) -> bool:
        return self.__session is not None and not self.__session.closed

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session and not self.__session.closed:
            await self.__session.close()
        self.__session = None
        logger.info("%s session closed", self.__class__.__name__)

    async def get(
        self,
        *,
        url: str,
        params: Mapping[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Perform an asynchronous HTTP GET request.

        Args:
            url (str): The URL to send the GET request to.
            params (Mapping[str, str] | None): Optional query parameters.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self._request("GET", url=url, total_timeout=total_timeout, params=params)

    async def post(
        self,
        *,
        url: str,
        data: Any | None = None,
        params: Mapping[str, str] | None = None,
        total_timeout: float = DEFAULT_TOTAL_TIMEOUT,
    ) -> Any:
        """Perform an asynchronous HTTP POST request with a JSON body.

        Args:
            url (str): The URL to send the POST request to.
            data (Any | None): JSON-serializable request body.
            params (Mapping[str, str] | None): Optional query parameters.
            total_timeout (float): Total timeout for the request in seconds.

        Returns:
            Any: The decoded response body.
        """
        return await self._request("POST", url=url, total_timeout=total_timeout, params=params, json=data)

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode a response body with the handler registered for its content type.

        Args:
            resp (ClientResponse): The response object from the aiohttp request.

        Returns:
            Any: The decoded body, or None for an empty body.

        Raises:
            AsyncCommInvalidContentTypeError: If no handler is registered for the content type
                or the body cannot be decoded by it.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip().lower()
        logger.debug("'Content-Type': '%s'", content_type)

        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.content_handlers.get(content_type)
        if handler is None:
            msg: str = f"Unknown Content-Type '{content_type}'"
            raise AsyncCommInvalidContentTypeError(msg)

        try:
            return handler(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            msg = f"Malformed '{content_type}' payload"
            raise AsyncCommInvalidContentTypeError(msg) from err

    def add_handler(self, content_type: str, handler: Callable[[bytes], Any]) -> None:
        """Register a decoder for a content type, replacing any previous one.

        Args:
            content_type (str): The content type to handle (e.g. "application/json").
            handler (Callable[[bytes], Any]): Function turning the raw body into a value.
        """
        if self.content_handlers.get(content_type):
            logger.warning("Handler for content type '%s' already exists, replacing it", content_type)
        self.content_handlers[content_type] = handler

    @staticmethod
    def build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        """Build the aiohttp timeout for a request.

        A non-positive total disables the timeout. Totals shorter than the connect timeout
        are applied as a total only.
        """
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        """Perform a request and decode the response.

        Raises:
            AsyncCommTimeoutError: When the request exceeds its timeout.
            AsyncCommError: On connection failures and non-2xx responses.
            AsyncCommInvalidContentTypeError: When the body cannot be decoded.
        """
        logger.debug("[%s] url=%s timeout=%s kwargs=%s", method, url, total_timeout, kwargs)
        try:
            async with self.session.request(
                method=method,
                url=url,
                timeout=self.build_timeout(total_timeout),
                **kwargs,
            ) as resp:
                resp.raise_for_status()
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except ConnectionResetError as err:
            logger.debug(err)
            msg = "The connection to the server has been disconnected."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = "The server is unreachable."
            raise AsyncCommError(msg) from err
        except (HTTPError, aiohttp.ClientResponseError) as err:
            logger.debug(err)
            msg = "Error response from the server."
            raise AsyncCommError(msg, response=err) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = "HTTP client error."
            raise AsyncCommError(msg) from err


class AsyncCommError(Exception):
    """Base class for asynchronous communication errors.

    When a `response` keyword is given, its HTTP status is appended to the message and
    kept on the `status` attribute.
    """

    def __init__(self, msg: str | BaseException, **kwargs: Any) -> None:
        self.msg: str = str(msg)
        self.status: int | None = None

        rsp: HTTPError | aiohttp.ClientResponseError | None = kwargs.pop("response", None)
        if isinstance(rsp, (HTTPError, aiohttp.ClientResponseError)):
            self.status = rsp.status
            self.msg = f"{self.msg}: status='{rsp.status}'"

        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """Error raised when a request does not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """Error raised when a response body cannot be decoded."""
