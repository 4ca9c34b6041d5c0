"""Inspect a Weaviate collection and report whether it supports vector search.

Usage::

    python -m reform_hub.cli.check_schema
    python -m reform_hub.cli.check_schema --collection Docs

Reads ``WEAVIATE_URL`` / ``WEAVIATE_API_KEY`` (and optionally
``OPENAI_API_KEY``) from the environment or ``.env``.  Exits with status 1
when credentials are missing or the schema cannot be fetched.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx

from reform_hub.config.settings import Settings
from reform_hub.providers.store.weaviate_provider import WeaviateStoreProvider
from reform_hub.utils.errors import ReformHubError

DEFAULT_COLLECTION = "DocsWithImages"
RECOMMENDED_VECTORIZER = "text2vec-openai"


def find_class(schema: dict[str, Any], name: str) -> dict[str, Any] | None:
    for cls in schema.get("classes") or []:
        if cls.get("class") == name:
            return cls
    return None


def has_vectorizer(cls: dict[str, Any]) -> bool:
    vectorizer = cls.get("vectorizer")
    return bool(vectorizer) and vectorizer != "none"


def recommended_schema(cls: dict[str, Any]) -> dict[str, Any]:
    """A copy of *cls* reconfigured with an OpenAI text vectorizer."""
    return {
        "class": cls.get("class"),
        "vectorizer": RECOMMENDED_VECTORIZER,
        "moduleConfig": {
            RECOMMENDED_VECTORIZER: {
                "model": "text-embedding-3-small",
                "type": "text",
            }
        },
        "properties": cls.get("properties") or [],
    }


def render_report(schema: dict[str, Any], collection: str) -> tuple[list[str], bool]:
    """Build the printable report for *collection*.

    Returns ``(lines, found)``; ``found`` is ``False`` when the collection
    does not exist in *schema*.
    """
    cls = find_class(schema, collection)
    if cls is None:
        available = ", ".join(c.get("class", "?") for c in schema.get("classes") or [])
        return [
            f"Collection {collection} not found.",
            f"Available collections: {available or '(none)'}",
        ], False

    lines = [
        f"Found collection {collection}",
        "",
        "Current configuration",
        "=" * 40,
        f"  Vectorizer:        {cls.get('vectorizer') or 'none'}",
        f"  Vector index type: {cls.get('vectorIndexType') or 'hnsw'}",
        "",
        "  Module config:",
        json.dumps(cls.get("moduleConfig") or {}, indent=2),
        "",
        "  Properties:",
    ]
    for prop in cls.get("properties") or []:
        data_type = ", ".join(prop.get("dataType") or [])
        lines.append(f"    - {prop.get('name')} ({data_type})")

    if has_vectorizer(cls):
        lines += ["", "Collection is configured for semantic search."]
    else:
        lines += [
            "",
            "PROBLEM: the collection has no vectorizer, so nearText queries fail.",
            "Either recreate it with a vectorizer, query with client-side vectors,",
            "or stick to hybrid/BM25 search.",
            "",
            "Recommended schema:",
            json.dumps(recommended_schema(cls), indent=2),
        ]
    return lines, True


async def _fetch_schema(app_settings: Settings) -> dict[str, Any]:
    async with httpx.AsyncClient() as client:
        store = WeaviateStoreProvider(settings=app_settings, http_client=client)
        return await store.get_schema()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m reform_hub.cli.check_schema",
        description="Check a Weaviate collection's vectorizer configuration.",
    )
    parser.add_argument(
        "--collection",
        default=DEFAULT_COLLECTION,
        help=f"Collection (class) to inspect (default: {DEFAULT_COLLECTION})",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit code."""
    args = _build_parser().parse_args(argv)
    app_settings = Settings()

    if not app_settings.has_store_credentials():
        print("Error: WEAVIATE_URL and WEAVIATE_API_KEY must be set", file=sys.stderr)
        return 1

    print("Fetching Weaviate schema...\n")
    try:
        schema = asyncio.run(_fetch_schema(app_settings))
    except ReformHubError as exc:
        print(f"Error checking schema: {exc.message}", file=sys.stderr)
        return 1

    lines, _found = render_report(schema, args.collection)
    print("\n".join(lines))
    return 0


if __name__ == "__main__":
    sys.exit(main())
