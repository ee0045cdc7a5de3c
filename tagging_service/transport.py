"""
TabTagger v1 - Generic HTTP Transport

Thin httpx wrapper shared by every provider adapter. Transport failures become
NetworkError, caller aborts and deadlines become Cancelled. HTTP status codes
are left to the adapters.
"""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlparse

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .errors import Cancelled, NetworkError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


def _host(url: str) -> str:
    return urlparse(url).netloc or url


def create_client(timeout: float) -> httpx.AsyncClient:
    """Create the client used when the caller does not supply one."""
    return httpx.AsyncClient(follow_redirects=True, timeout=timeout)


class HttpTransport:
    """
    Async HTTP transport used as `async with HttpTransport(...) as transport`.

    A caller-supplied client is borrowed and left open; otherwise one is
    created on enter and closed on exit.

    Args:
        client: Optional httpx.AsyncClient to borrow
        timeout: Per-request httpx timeout in seconds
        max_attempts: Attempts per request; only transport errors are retried
        cancel_event: When set, the in-flight request is abandoned
        deadline: Seconds allowed for a whole request, retries and backoff included
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        max_attempts: int = 1,
        cancel_event: Optional[asyncio.Event] = None,
        deadline: Optional[float] = None,
    ):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.cancel_event = cancel_event
        self.deadline = deadline

    async def __aenter__(self) -> "HttpTransport":
        if self._client is None:
            self._client = create_client(self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def post_json(
        self,
        url: str,
        body: Any,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """POST a JSON body and return the response, whatever its status."""
        merged = {"Content-Type": "application/json", **(headers or {})}
        return await self.request("POST", url, headers=merged, params=params, json=body)

    async def get(
        self,
        url: str,
        headers: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        """GET a URL and return the response, whatever its status."""
        return await self.request("GET", url, headers=headers, params=params)

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request with retries on transport errors.

        The deadline covers every attempt and the backoff between them.

        Raises:
            NetworkError: If the request could not be completed
            Cancelled: If the cancel event fired or the deadline passed
        """
        if self._client is None:
            raise RuntimeError("HttpTransport must be used as an async context manager")
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise Cancelled("Request cancelled before it was sent")

        try:
            response = await self._guard(self._send_with_retries(method, url, **kwargs))
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to {_host(url)} timed out after {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {_host(url)} failed: {e}") from e

        logger.debug(f"{method} {_host(url)} -> {response.status_code}")
        return response

    async def _send_with_retries(self, method: str, url: str, **kwargs) -> httpx.Response:
        response = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=0.5, max=8),
            retry=retry_if_exception_type(httpx.TransportError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        f"Retrying {method} {_host(url)} "
                        f"(attempt {attempt.retry_state.attempt_number}/{self.max_attempts})"
                    )
                response = await self._client.request(method, url, timeout=self.timeout, **kwargs)
        return response

    async def _guard(self, coro) -> httpx.Response:
        """Await `coro`, abandoning it when the cancel event fires or the deadline passes."""
        if self.cancel_event is None and self.deadline is None:
            return await coro

        request_task = asyncio.ensure_future(coro)
        waiters = {request_task}
        cancel_task = None
        if self.cancel_event is not None:
            cancel_task = asyncio.ensure_future(self.cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=self.deadline, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            request_task.cancel()
            raise
        finally:
            if cancel_task is not None:
                cancel_task.cancel()

        if request_task in done:
            return request_task.result()

        request_task.cancel()
        await asyncio.gather(request_task, return_exceptions=True)

        if cancel_task is not None and cancel_task in done:
            raise Cancelled("Request cancelled by caller")
        raise Cancelled(f"Request exceeded the {self.deadline:g}s deadline")
