"""JSON-over-HTTPS transport for the Qapac backend."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyqapac._constants import AUTH_FAILURE_STATUSES, USER_AGENT
from pyqapac._redact import redact_for_log
from pyqapac.config import QapacConfig
from pyqapac.exceptions import QapacAuthError, QapacNetworkError, QapacServerError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Mapping[str, Any] | None = None,
        bearer_token: str | None = None,
    ) -> Any:
        ...


def _raise_for_status(status: int, endpoint: str, text: str) -> None:
    if 200 <= status < 300:
        return
    message = f"HTTP {status} from {endpoint}: {text[:200]}"
    if status in AUTH_FAILURE_STATUSES:
        raise QapacAuthError(message, status_code=status, endpoint=endpoint)
    raise QapacServerError(message, status_code=status, endpoint=endpoint)


class HttpTransport:
    """aiohttp transport that maps HTTP failures onto the pyqapac error taxonomy.

    * no response at all -> :class:`QapacNetworkError`
    * 401/403 -> :class:`QapacAuthError`
    * any other non-2xx, or an unreadable JSON body -> :class:`QapacServerError`

    An empty 2xx body is returned as ``None``.
    """

    def __init__(self, config: QapacConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def request_json(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Mapping[str, Any] | None = None,
        bearer_token: str | None = None,
    ) -> Any:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        if bearer_token:
            headers["authorization"] = f"Bearer {bearer_token}"

        url = f"{self._config.base_url}{endpoint}"
        query = {k: str(v) for k, v in params.items()} if params else None

        _logger.debug("%s %s params=%s", method, url, query)
        if self._config.api_trace_enabled and json_body is not None:
            _logger.debug("%s %s body=%s", method, endpoint, redact_for_log(dict(json_body)))

        try:
            async with self._http.request(
                method,
                url,
                params=query,
                json=dict(json_body) if json_body is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                raw = await resp.read()
                encoding = resp.get_encoding()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise QapacNetworkError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        try:
            text = raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            _raise_for_status(status, endpoint, raw.decode("utf-8", errors="replace"))
            raise QapacServerError(
                f"Undecodable {encoding} body from {endpoint}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        _raise_for_status(status, endpoint, text)

        if not text.strip():
            return None

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise QapacServerError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=status,
                endpoint=endpoint,
            ) from exc

        if self._config.api_trace_enabled:
            _logger.debug("%s %s -> %s", method, endpoint, redact_for_log(body))
        return body
