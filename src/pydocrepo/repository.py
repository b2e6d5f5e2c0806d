"""Cached, batched access to one collection of a document database."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Hashable, Iterator, Sequence
from typing import Any, ClassVar, Generic, TypeVar

from pydocrepo._constants import ARRAY_QUERIES_ITEM_LIMIT
from pydocrepo.exceptions import ChunkSizeError
from pydocrepo.models._base import HasId, RepoModel
from pydocrepo.models.document import Document
from pydocrepo.models.update import RepoUpdate, RepoUpdateType
from pydocrepo.query import DocumentQuery
from pydocrepo.source import DocumentSource
from pydocrepo.state.broadcaster import Listener, Subscription, UpdateBroadcaster
from pydocrepo.state.inflight import InflightFetches
from pydocrepo.state.store import ModelStore

_logger = logging.getLogger(__name__)

IdT = TypeVar("IdT", bound=Hashable)
ModelT = TypeVar("ModelT", bound=HasId)


def _abandoned(shared: asyncio.Future[Any]) -> bool:
    """True if *shared* was cancelled by its owner while the current task was not."""
    task = asyncio.current_task()
    return shared.cancelled() and (task is None or task.cancelling() == 0)


class DocumentRepository(Generic[IdT, ModelT]):
    """Keep the models of one collection cached and in sync across consumers.

    All models fetched through the repository are stored in :attr:`store`,
    so later reads are served without calling the database, and every
    consumer of the repository sees the same instances. Consumers that
    need to react to changes register a listener with :meth:`add_listener`.

    Subclasses set :attr:`collection_id` and either :attr:`model_type` or
    override :meth:`from_document`::

        class UserRepository(DocumentRepository[str, User]):
            collection_id = "users"
            model_type = User

    Writes performed elsewhere (create/update/delete against the database)
    must be mirrored with :meth:`record_inserted` / :meth:`record_deleted`.
    The store never notifies on its own; call :meth:`notify` or
    :meth:`notify_mixed` when listeners should be told.
    """

    collection_id: ClassVar[str | None] = None
    model_type: ClassVar[type[RepoModel] | None] = None

    def __init__(
        self,
        source: DocumentSource,
        *,
        collection_id: str | None = None,
        array_query_limit: int = ARRAY_QUERIES_ITEM_LIMIT,
    ) -> None:
        collection = collection_id or type(self).collection_id
        if not collection:
            raise ValueError(f"{type(self).__name__} needs a collection_id")
        if array_query_limit <= 0:
            raise ValueError(f"array_query_limit must be positive, got {array_query_limit}")
        self._source = source
        self._collection = collection
        self._array_query_limit = array_query_limit
        self.store: ModelStore[IdT, ModelT] = ModelStore()
        self.broadcaster: UpdateBroadcaster[IdT] = UpdateBroadcaster()
        self._inflight: InflightFetches[IdT, ModelT] = InflightFetches()

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def array_query_limit(self) -> int:
        return self._array_query_limit

    # ------------------------------------------------------------------
    # Materialization
    # ------------------------------------------------------------------

    def from_document(self, document: Document) -> ModelT:
        """Build a model from a raw document.

        The default validates :attr:`model_type`. Errors are not caught.
        """
        model_type = type(self).model_type
        if model_type is None:
            raise NotImplementedError(f"{type(self).__name__} must set model_type or override from_document()")
        model: Any = model_type.from_document(document)
        return model

    def from_documents(self, documents: Sequence[Document]) -> list[ModelT]:
        return [self.from_document(document) for document in documents]

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> Subscription:
        """Register *listener* for update batches published by this repository.

        *listener* receives a list of :class:`RepoUpdate`. It may be a plain
        function or a coroutine function; coroutines are scheduled, not
        awaited. Keep the returned handle to :meth:`remove_listener` later.
        """
        return self.broadcaster.subscribe(listener)

    def remove_listener(self, subscription: Subscription) -> None:
        self.broadcaster.unsubscribe(subscription)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(
        self,
        model_id: IdT,
        *,
        cache: bool = False,
        refresh: bool = False,
        notify: bool = False,
    ) -> ModelT | None:
        """Get the model with *model_id*.

        Returns the cached model if there is one. Otherwise the model is
        fetched from the database and stored.

        * Set *cache* to let the source answer from its own cache.
        * Set *refresh* to always fetch from the database and overwrite the
          cached model.
        * Set *notify* to publish a ``FETCHED`` update for *model_id* once the
          fetched model is stored. Cache hits never notify.

        Returns ``None`` when the document does not exist or the source is
        unavailable.
        """
        while True:
            if not refresh:
                cached = self.store.get(model_id)
                if cached is not None:
                    _logger.debug("%s: cache hit for %s", self._collection, model_id)
                    return cached

            owned, waiting = self._inflight.claim([model_id])
            if owned:
                break
            _logger.debug("%s: joining in-flight fetch for %s", self._collection, model_id)
            shared = waiting[model_id]
            try:
                return await asyncio.shield(shared)
            except asyncio.CancelledError:
                if not _abandoned(shared):
                    raise
            _logger.debug("%s: in-flight fetch for %s was abandoned, fetching again", self._collection, model_id)

        try:
            model = await self._fetch_one(model_id, cache=cache)
            if model is not None:
                self.store.put([model])
            self._inflight.resolve(model_id, model)
        except Exception as exc:
            self._inflight.fail(owned, exc)
            raise
        finally:
            self._inflight.cancel(owned)

        if model is not None and notify:
            self.notify(RepoUpdateType.FETCHED, ids=[model_id])
        return model

    async def get_by_ids(
        self,
        model_ids: Sequence[IdT],
        *,
        cache: bool = False,
        refresh: bool = False,
        notify: bool = False,
    ) -> list[ModelT]:
        """Get the models for *model_ids*.

        Cached models are used as they are; the remaining ids are fetched in
        chunks of at most :attr:`array_query_limit` ids, one query per chunk,
        one chunk after the other.

        * Set *cache* to let the source answer from its own cache.
        * Set *refresh* to fetch every id and overwrite the cached models.
        * Set *notify* to publish one batch with a ``FETCHED`` update per id
          that had to be fetched, found or not.

        The result lists cached models first, then fetched ones; it is not in
        the order of *model_ids*. Ids that do not exist, and ids whose chunk
        query failed, are missing from the result.
        """
        result: list[ModelT] = []
        to_fetch: list[IdT] = []
        if refresh:
            to_fetch = list(model_ids)
        else:
            for model_id in model_ids:
                cached = self.store.get(model_id)
                if cached is not None:
                    result.append(cached)
                else:
                    to_fetch.append(model_id)
        to_fetch = list(dict.fromkeys(to_fetch))
        if not to_fetch:
            return result

        result.extend(await self._load(to_fetch, cache=cache))
        if notify:
            self.notify(RepoUpdateType.FETCHED, ids=to_fetch)
        return result

    async def _load(self, model_ids: list[IdT], *, cache: bool) -> list[ModelT]:
        """Fetch *model_ids* in chunks, sharing ids another read already has in flight.

        Ids whose shared fetch was abandoned by its owner are fetched again.
        """
        loaded: list[ModelT] = []
        pending = model_ids
        while pending:
            owned, waiting = self._inflight.claim(pending)
            fetched: list[ModelT] = []
            try:
                for chunk in self._chunks(owned):
                    fetched.extend(await self._fetch_chunk(chunk, cache=cache))
                self.store.put(fetched)
                by_id = {model.id: model for model in fetched}
                for model_id in owned:
                    self._inflight.resolve(model_id, by_id.get(model_id))
            except Exception as exc:
                self._inflight.fail(owned, exc)
                raise
            finally:
                self._inflight.cancel(owned)
            loaded.extend(fetched)

            if waiting:
                _logger.debug("%s: joining %d in-flight fetches", self._collection, len(waiting))
            abandoned: list[IdT] = []
            for model_id, future in waiting.items():
                try:
                    shared = await asyncio.shield(future)
                except asyncio.CancelledError:
                    if not _abandoned(future):
                        raise
                    abandoned.append(model_id)
                    continue
                if shared is not None:
                    loaded.append(shared)
            if abandoned:
                _logger.debug("%s: %d in-flight fetches abandoned, fetching again", self._collection, len(abandoned))
            pending = abandoned
        return loaded

    def _chunks(self, model_ids: Sequence[IdT]) -> Iterator[list[IdT]]:
        limit = self._array_query_limit
        for start in range(0, len(model_ids), limit):
            yield list(model_ids[start : start + limit])

    async def _fetch_one(self, model_id: IdT, *, cache: bool) -> ModelT | None:
        query = DocumentQuery.id_equals(self._collection, model_id)
        _logger.debug("%s: fetching %s", self._collection, model_id)
        query_result = await self._source.run_query(query, cache)
        if query_result is None or query_result.is_empty:
            return None
        return self.from_documents(query_result.documents)[0]

    async def _fetch_chunk(self, chunk: Sequence[IdT], *, cache: bool) -> list[ModelT]:
        """Fetch one chunk of ids with a single query.

        A failed query yields no models for the chunk.
        """
        if len(chunk) > self._array_query_limit:
            raise ChunkSizeError(len(chunk), self._array_query_limit)
        if not chunk:
            return []
        query = DocumentQuery.id_in(self._collection, chunk, limit=self._array_query_limit)
        _logger.debug("%s: fetching chunk of %d ids", self._collection, len(chunk))
        query_result = await self._source.run_query(query, cache)
        if query_result is None:
            _logger.debug("%s: chunk query unavailable, %d ids skipped", self._collection, len(chunk))
            return []
        return self.from_documents(query_result.documents)

    # ------------------------------------------------------------------
    # Mutation hooks
    # ------------------------------------------------------------------

    def record_inserted(self, models: Sequence[ModelT]) -> None:
        """Store *models* written to the database by the caller.

        Does not notify; follow with :meth:`notify` if listeners should know.
        """
        self.store.put(models)

    def record_deleted(self, model_ids: Sequence[IdT]) -> None:
        """Drop *model_ids* deleted from the database by the caller.

        Does not notify; follow with :meth:`notify` if listeners should know.
        """
        self.store.remove(model_ids)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def notify(
        self,
        update_type: RepoUpdateType,
        *,
        ids: Sequence[IdT] | None = None,
        models: Sequence[ModelT] | None = None,
    ) -> None:
        """Publish one update of *update_type* per id (or per model).

        *ids* wins when both are given. Nothing is published when neither is.
        """
        targets = self._update_targets(ids, models)
        if targets is None:
            return
        self.broadcaster.publish([RepoUpdate(model_id=model_id, type=update_type) for model_id in targets])

    def notify_mixed(
        self,
        update_types: Sequence[RepoUpdateType],
        *,
        ids: Sequence[IdT] | None = None,
        models: Sequence[ModelT] | None = None,
    ) -> None:
        """Publish updates pairing each id (or model) with the type at the same position.

        Raises :class:`ValueError` if *update_types* and the ids/models differ
        in length; nothing is published in that case.
        """
        targets = self._update_targets(ids, models)
        if targets is None:
            return
        if len(update_types) != len(targets):
            raise ValueError(f"got {len(update_types)} update types for {len(targets)} models")
        self.broadcaster.publish(
            [
                RepoUpdate(model_id=model_id, type=update_type)
                for model_id, update_type in zip(targets, update_types, strict=True)
            ]
        )

    @staticmethod
    def _update_targets(ids: Sequence[IdT] | None, models: Sequence[ModelT] | None) -> list[IdT] | None:
        if ids is not None:
            return list(ids)
        if models is not None:
            return [model.id for model in models]
        return None
