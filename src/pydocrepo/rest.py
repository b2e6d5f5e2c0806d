"""Document source speaking the Firestore REST ``runQuery`` API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pydocrepo._redact import redact_for_log
from pydocrepo._transport import AiohttpTransport, Transport
from pydocrepo._values import decode_document, parse_timestamp
from pydocrepo.config import SourceConfig
from pydocrepo.exceptions import DocRepoApiError, DocRepoError
from pydocrepo.models.document import Document, QueryResult
from pydocrepo.query import DocumentQuery

_logger = logging.getLogger(__name__)


class RestDocumentSource:
    """Execute repository queries against the REST API.

    Every successful result is kept in a local result cache keyed by the
    query. With ``prefer_cache=True`` a cached result is served without a
    request; when a request fails the cached result (if any) is served
    instead. Failures never raise: :meth:`run_query` returns ``None``.

    Usage::

        async with RestDocumentSource(SourceConfig.from_env()) as source:
            users = UserRepository(source)
            user = await users.get_by_id("alice")
    """

    def __init__(
        self,
        config: SourceConfig,
        transport: Transport | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._http_session = session
        self._owns_session = False
        self._results: dict[str, QueryResult] = {}

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RestDocumentSource:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
                self._owns_session = True
            self._transport = AiohttpTransport(self._http_session, timeout=self._config.request_timeout)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._owns_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
            self._transport = None
            self._owns_session = False

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise DocRepoError("Source not initialized. Use 'async with RestDocumentSource(...) as source:'")
        return self._transport

    # ------------------------------------------------------------------
    # Result cache
    # ------------------------------------------------------------------

    @property
    def cached_result_count(self) -> int:
        return len(self._results)

    def clear_cache(self) -> None:
        self._results.clear()

    def _cached(self, key: str) -> QueryResult | None:
        cached = self._results.get(key)
        if cached is None:
            return None
        return cached.model_copy(update={"from_cache": True})

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def run_query(self, query: DocumentQuery, prefer_cache: bool) -> QueryResult | None:
        transport = self._require_transport()
        key = query.cache_key()
        if prefer_cache:
            cached = self._cached(key)
            if cached is not None:
                _logger.debug("runQuery on %s served from cache", query.collection)
                return cached

        try:
            result = await self._execute(transport, query)
        except (DocRepoError, ValueError) as exc:
            cached = self._cached(key)
            _logger.warning(
                "runQuery on %s failed (%s)%s",
                query.collection,
                exc,
                ", serving cached result" if cached is not None else "",
            )
            return cached

        self._results[key] = result
        return result

    async def _execute(self, transport: Transport, query: DocumentQuery) -> QueryResult:
        payload = {"structuredQuery": query.to_structured_query(self._config.documents_root)}
        headers: dict[str, str] = {}
        if self._config.access_token:
            headers["authorization"] = f"Bearer {self._config.access_token}"

        url = self._config.run_query_url
        if self._config.api_trace_enabled:
            _logger.debug("runQuery request %s", redact_for_log({"url": url, "headers": headers, "body": payload}))

        body = await transport.post_json(url, payload, headers)

        if self._config.api_trace_enabled:
            _logger.debug("runQuery response %s", redact_for_log(body))

        if not isinstance(body, list):
            raise DocRepoApiError(f"Unexpected runQuery reply from {url}: {type(body).__name__}", url=url)

        documents: list[Document] = []
        read_time = None
        for item in body:
            if not isinstance(item, dict):
                continue
            error = item.get("error")
            if isinstance(error, dict):
                raise DocRepoApiError(
                    f"runQuery failed: {error.get('message', '')}",
                    status=str(error.get("status", "")),
                    url=url,
                )
            read_time = parse_timestamp(item.get("readTime")) or read_time
            resource = item.get("document")
            if isinstance(resource, dict):
                documents.append(decode_document(resource))

        _logger.debug("runQuery on %s returned %d documents", query.collection, len(documents))
        return QueryResult(documents=documents, read_time=read_time)
