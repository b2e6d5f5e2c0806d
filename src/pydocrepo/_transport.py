"""JSON-over-HTTP transport."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pydocrepo._constants import USER_AGENT
from pydocrepo.exceptions import DocRepoApiError, DocRepoTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by :class:`pydocrepo.rest.RestDocumentSource`.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`AiohttpTransport`) concrete.
    """

    async def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...


class AiohttpTransport:
    """POST JSON bodies and decode JSON replies over an aiohttp session."""

    def __init__(self, http_session: aiohttp.ClientSession, *, timeout: float = 30.0) -> None:
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    async def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """POST *payload* to *url* and return the decoded JSON body.

        Non-2xx replies carrying the service's JSON error object raise
        :class:`DocRepoApiError`; every other failure raises
        :class:`DocRepoTransportError`.
        """
        request_headers: dict[str, str] = {
            "content-type": "application/json; charset=UTF-8",
            "user-agent": USER_AGENT,
        }
        if headers:
            request_headers.update(headers)

        _logger.debug("POST %s", url)

        try:
            async with self._http.post(
                url,
                data=json.dumps(payload, separators=(",", ":")),
                headers=request_headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                status = resp.status
        except TimeoutError as exc:
            raise DocRepoTransportError(f"Request to {url} timed out", url=url) from exc
        except aiohttp.ClientError as exc:
            raise DocRepoTransportError(f"Request to {url} failed: {exc}", url=url) from exc

        try:
            body = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocRepoTransportError(
                f"Invalid JSON from {url} (HTTP {status}): {text[:200]}",
                status_code=status,
                url=url,
            ) from exc

        if not 200 <= status < 300:
            # runQuery wraps errors in a one-element list.
            envelope = body[0] if isinstance(body, list) and body else body
            error = envelope.get("error") if isinstance(envelope, dict) else None
            if isinstance(error, dict):
                raise DocRepoApiError(
                    f"HTTP {status} from {url}: {error.get('message', '')}",
                    status=str(error.get("status", "")),
                    url=url,
                )
            raise DocRepoTransportError(
                f"HTTP {status} from {url}: {text[:200]}",
                status_code=status,
                url=url,
            )
        return body
