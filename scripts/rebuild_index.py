#!/usr/bin/env python3
"""
Index Rebuild Utility
Clears the durable embedding store and re-embeds every catalog book.
Use after catalog content changes or after switching EMBED_PROVIDER.

This rebuilds the store on disk; a running server keeps its in-memory index
until it is refreshed (see scripts/ops_util.py refresh).
"""

import asyncio
import sys
from pathlib import Path

import dotenv
dotenv.load_dotenv()

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from librarian.core.catalog import SQLiteCatalog
from librarian.core.config import get_embedding_provider, validate_config
from librarian.core.errors import LibrarianError
from librarian.core.retrieval import RetrievalService
from librarian.vector.store import EmbeddingStore


async def rebuild() -> dict:
    service = RetrievalService(
        catalog=SQLiteCatalog(),
        store=EmbeddingStore(),
        embedding_provider=get_embedding_provider()
    )
    await service.refresh()

    # Quick smoke test - search for something
    if service.status()["book_count"]:
        results = await service.search("a good story", top_k=3)
        print(f"✓ Verification search returned {len(results)} results")

    return service.status()


def main():
    for issue in validate_config():
        print(f"WARNING: {issue}")

    print("Starting vector index rebuild...")
    try:
        status = asyncio.run(rebuild())
    except LibrarianError as e:
        print(f"ERROR: Index rebuild failed: {e}")
        sys.exit(1)

    print(f"✓ Rebuilt index with {status['embedding_count']} vectors "
          f"({status['embedding_provider']} embeddings)")
    print(f"  Store: {status['store']['storage_path']}")
    print("Index rebuild complete!")


if __name__ == "__main__":
    main()
