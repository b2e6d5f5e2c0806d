#!/usr/bin/env python3
"""Fetch documents by id through a repository and print them.

Exercises the whole read path against a real database or an emulator:
cache lookup, chunked ``runQuery`` requests, result caching and update
notifications.

Usage
-----
Set environment variables and run::

    export DOCREPO_PROJECT_ID="my-project"
    export DOCREPO_ACCESS_TOKEN="$(gcloud auth print-access-token)"
    python scripts/dump_collection.py users alice bob carol

Options::

    --limit N           Fan-out limit per query (default: 10)
    --cache             Let the source answer from its result cache
    --twice             Read the ids a second time to show cache hits
    --json              Output as machine-readable JSON
    --debug             Enable DEBUG logging (with --trace, also request bodies)
    --trace             Log redacted request/response bodies
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pydocrepo import (  # noqa: E402
    ARRAY_QUERIES_ITEM_LIMIT,
    Document,
    DocumentRepository,
    RepoUpdate,
    RestDocumentSource,
    SourceConfig,
)


class RawDocumentRepository(DocumentRepository[str, Document]):
    """Caches the raw documents themselves; no model class needed."""

    def from_document(self, document: Document) -> Document:
        return document


def _print_updates(updates: list[RepoUpdate[Any]]) -> None:
    summary = ", ".join(f"{update.model_id}:{update.type}" for update in updates)
    print(f"[updates] {summary}", file=sys.stderr)


def _as_json(document: Document) -> dict[str, Any]:
    return document.model_dump(mode="json")


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fetch documents by id through a cached repository.",
    )
    parser.add_argument("collection", help="Collection id")
    parser.add_argument("ids", nargs="+", help="Document ids")
    parser.add_argument("--limit", type=int, default=ARRAY_QUERIES_ITEM_LIMIT, help="Fan-out limit per query")
    parser.add_argument("--cache", action="store_true", help="Prefer the source's result cache")
    parser.add_argument("--twice", action="store_true", help="Read the ids twice")
    parser.add_argument("--json", action="store_true", help="Output JSON")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--trace", action="store_true", help="Log redacted request/response bodies")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SourceConfig.from_env(api_trace_enabled=True) if args.trace else SourceConfig.from_env()

    async with RestDocumentSource(config) as source:
        repo = RawDocumentRepository(source, collection_id=args.collection, array_query_limit=args.limit)
        repo.add_listener(_print_updates)

        documents = await repo.get_by_ids(args.ids, cache=args.cache, notify=True)
        if args.twice:
            documents = await repo.get_by_ids(args.ids, cache=args.cache, notify=True)

    missing = [doc_id for doc_id in args.ids if doc_id not in repo.store]

    if args.json:
        print(json.dumps({"documents": [_as_json(doc) for doc in documents], "missing": missing}, indent=2))
        return

    for document in documents:
        print(f"== {args.collection}/{document.id}")
        for key, value in sorted(document.data.items()):
            print(f"  {key}: {value!r}")
    if missing:
        print(f"missing: {', '.join(missing)}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(130)
