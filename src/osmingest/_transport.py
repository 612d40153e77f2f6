"""HTTP transport for interpreter queries."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import aiohttp

from osmingest._redact import preview_for_log
from osmingest.config import OverpassConfig
from osmingest.exceptions import MalformedPayload, OverpassTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the pipeline.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    Implementations raise :class:`OverpassTransportError` on failure and
    :class:`MalformedPayload` for a body that is not text.
    """

    async def post(self, endpoint: str, body: str) -> str:
        ...


class HttpTransport:
    """aiohttp transport that POSTs query text and returns the response body."""

    def __init__(
        self,
        config: OverpassConfig,
        http_session: aiohttp.ClientSession,
    ) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def post(self, endpoint: str, body: str) -> str:
        """Send *body* as the ``data`` form field and return the response text.

        Raises
        ------
        OverpassTransportError
            On connection errors, timeouts and any non-200 status.
        MalformedPayload
            If the body does not decode with its declared charset.
        """
        headers: dict[str, str] = {
            "accept-encoding": "gzip, deflate",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("POST %s query=%s", endpoint, preview_for_log(body))

        try:
            async with self._http.post(
                endpoint,
                data={"data": body},
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                if resp.status != 200:
                    detail = await resp.text(errors="replace")
                    raise OverpassTransportError(
                        f"HTTP {resp.status} from {endpoint}: {preview_for_log(detail)}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                try:
                    text = await resp.text()
                except UnicodeDecodeError as exc:
                    raise MalformedPayload(f"Response from {endpoint} is not valid text: {exc.reason}") from exc
        except OverpassTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise OverpassTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise OverpassTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        _logger.debug("Response from %s: %d chars", endpoint, len(text))
        return text
