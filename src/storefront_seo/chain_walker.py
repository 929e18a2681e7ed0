"""
Redirect chain walker.

This module provides an async HTTP client that follows a URL's redirect
chain one HEAD request at a time (never letting the HTTP library follow
redirects itself) and records every hop.

A chain ends when:
- a non-3xx response (or a 3xx without Location) arrives: COMPLETE
- a request fails: ERROR, carrying the underlying message
- a request exceeds the timeout: TIMEOUT, the request is aborted
- a further redirect is offered after max_redirects hops: ERROR
  ("Too many redirects")

Hops are never retried, so a walk is bounded by max_redirects x timeout.
"""

import asyncio
from typing import Awaitable, Callable, Optional
from urllib.parse import urljoin, urlparse

import httpx

from .audit_logger import AuditLogger
from .client_side import detect_client_side_redirect
from .config import WalkerConfig
from .enums import ChainOutcome
from .exceptions import NetworkError
from .models import RedirectChain, RedirectStep


TOO_MANY_REDIRECTS = "Too many redirects"
REQUEST_TIMEOUT = "Request timeout"


def is_redirect_status(status_code: int) -> bool:
    """Check whether a status code is in the 3xx range."""
    return 300 <= status_code < 400


class ChainWalker:
    """
    Async redirect chain follower.

    Owns one httpx.AsyncClient for its lifetime; use it as an async
    context manager or call close() when done.
    """

    COMPONENT = "ChainWalker"

    def __init__(
        self,
        config: Optional[WalkerConfig] = None,
        logger: Optional[AuditLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the chain walker.

        Args:
            config: Walker configuration (defaults apply when omitted)
            logger: Optional audit logger
            transport: Optional httpx transport (used to stub the network)
            sleep: Coroutine used for the delay between hops
        """
        self._config = config or WalkerConfig()
        self._logger = logger
        self._transport = transport
        self._sleep = sleep
        self._client: Optional[httpx.AsyncClient] = None
        # Responses seen by the response hook, keyed by their request
        self._responses: dict[httpx.Request, httpx.Response] = {}

    async def __aenter__(self) -> "ChainWalker":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def config(self) -> WalkerConfig:
        return self._config

    @property
    def request_headers(self) -> dict[str, str]:
        """Fixed headers sent with every request."""
        return {
            "User-Agent": self._config.user_agent,
            "Accept": self._config.accept,
        }

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                follow_redirects=False,
                transport=self._transport,
                event_hooks={"response": [self._capture_response]},
            )
        return self._client

    def _validate_url(self, url: str) -> None:
        """
        Reject anything that is not an absolute http(s) URL.

        Raises:
            NetworkError: If the URL cannot be requested
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
            raise NetworkError(
                code="invalid_url",
                message=f"Not an absolute http(s) URL: {url}",
                details={"url": url, "scheme": parsed.scheme},
            )

    async def walk(self, url: str) -> RedirectChain:
        """
        Follow the redirect chain starting at url.

        Args:
            url: Absolute http(s) URL to start from

        Returns:
            RedirectChain with every recorded step; on error or timeout the
            partial chain built so far is kept
        """
        chain = RedirectChain(url=url, final_url=url)
        current = url
        depth = 0

        while True:
            try:
                self._validate_url(current)
                response = await self._send("HEAD", current)
            except (asyncio.TimeoutError, httpx.TimeoutException):
                chain.outcome = ChainOutcome.TIMEOUT
                chain.error = REQUEST_TIMEOUT
                chain.final_url = current
                self._log_hop_failure(current, chain.error)
                return chain
            except (httpx.HTTPError, httpx.InvalidURL, NetworkError, OSError) as e:
                chain.outcome = ChainOutcome.ERROR
                chain.error = self._error_message(e)
                chain.final_url = current
                self._log_hop_failure(current, chain.error)
                return chain

            step = self._build_step(current, response)
            chain.steps.append(step)
            chain.final_url = current

            self._log_debug(
                f"HEAD {current} -> {step.status_code}",
                {"url": current, "status": step.status_code, "location": step.location},
            )

            if step.location is None:
                break

            if depth >= self._config.max_redirects:
                chain.outcome = ChainOutcome.ERROR
                chain.error = TOO_MANY_REDIRECTS
                self._log_hop_failure(current, chain.error)
                return chain

            try:
                current = urljoin(current, step.location)
            except ValueError as e:
                chain.outcome = ChainOutcome.ERROR
                chain.error = f"Invalid Location header: {e}"
                self._log_hop_failure(current, chain.error)
                return chain
            depth += 1

            if self._config.hop_delay_seconds > 0:
                await self._sleep(self._config.hop_delay_seconds)

        chain.outcome = ChainOutcome.COMPLETE

        if self._config.inspect_content and chain.last_step.status_code == 200:
            chain.client_side_target = await self._inspect_content(chain.final_url)

        return chain

    async def _send(self, method: str, url: str) -> httpx.Response:
        client = self._ensure_client()
        request = client.build_request(method, url, headers=self.request_headers)
        try:
            # wait_for cancels (and so aborts) the in-flight request on expiry
            return await asyncio.wait_for(
                client.send(request),
                timeout=self._config.timeout_seconds,
            )
        except (httpx.HTTPError, httpx.InvalidURL):
            # httpx prepares the next request even when not following
            # redirects, and fails on a Location it cannot parse after the
            # response itself has arrived
            response = self._responses.get(request)
            if response is None:
                raise
            return response
        finally:
            self._responses.pop(request, None)

    async def _capture_response(self, response: httpx.Response) -> None:
        self._responses[response.request] = response

    async def _inspect_content(self, url: str) -> Optional[str]:
        """
        GET a final 200 page and look for a client-side redirect in it.

        Returns:
            The client-side redirect target, or None
        """
        try:
            response = await self._send("GET", url)
        except (asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL, OSError) as e:
            if self._logger:
                self._logger.warn(
                    self.COMPONENT,
                    f"Content inspection failed for {url}",
                    {"url": url, "error": self._error_message(e)},
                )
            return None

        content_type = response.headers.get("content-type", "").lower()
        if response.status_code != 200 or "html" not in content_type:
            return None

        target = detect_client_side_redirect(response.text)
        if target and self._logger:
            self._logger.info(
                self.COMPONENT,
                f"Client-side redirect detected on {url}",
                {"url": url, "target": target},
            )
        return target

    def _build_step(self, url: str, response: httpx.Response) -> RedirectStep:
        headers = {key.lower(): value for key, value in response.headers.items()}
        location = None
        if is_redirect_status(response.status_code):
            location = headers.get("location") or None

        return RedirectStep(
            url=url,
            status_code=response.status_code,
            headers=headers,
            location=location,
        )

    def _error_message(self, error: BaseException) -> str:
        if isinstance(error, NetworkError):
            return error.message
        message = str(error)
        return message if message else type(error).__name__

    def _log_debug(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.debug(self.COMPONENT, message, data)

    def _log_hop_failure(self, url: str, message: str) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, f"Chain ended early: {message}", {"url": url})

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
