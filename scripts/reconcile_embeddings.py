#!/usr/bin/env python3
"""
Embedding reconcile utility.

Re-embeds every saved item whose embedding is missing, was computed from
different text, or was produced by a model other than the configured one.
"""

import argparse
import json
import sys

import dotenv
dotenv.load_dotenv()

from keepsake.core.config import DB_PATH, get_embedding_provider, validate_config
from keepsake.core.dao import ContentStore
from keepsake.core.reconcile import reconcile_all
from keepsake.vector.embeddings import EmbeddingClient


def main():
    parser = argparse.ArgumentParser(
        description="Bring stored embeddings up to date with their content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment variables:
- DB_PATH=./data/keepsake.db (database location)
- EMBED_PROVIDER=sentence-transformers (hash|sentence-transformers|ollama)
- EMBED_MODEL_NAME=all-mpnet-base-v2 (model tag written with each vector)
        """
    )
    parser.add_argument("--db-path", default=DB_PATH, help="SQLite database file")
    parser.add_argument("--json", "-j", action="store_true", help="Output the report as JSON")
    args = parser.parse_args()

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"ERROR: {issue}", file=sys.stderr)
        return 1

    store = ContentStore(args.db_path)
    client = EmbeddingClient(get_embedding_provider())

    if not args.json:
        print(f"Reconciling {store.count()} items with model '{client.model_name}'...")

    report = reconcile_all(store, client)

    if args.json:
        print(json.dumps({
            "scanned": report.scanned,
            "embedded": report.embedded,
            "unchanged": report.unchanged,
            "failed": report.failed,
            "errors": report.errors
        }, indent=2))
    else:
        print(f"✓ Scanned: {report.scanned}")
        print(f"✓ Re-embedded: {report.embedded}")
        print(f"  Unchanged: {report.unchanged}")
        if report.failed:
            print(f"✗ Failed: {report.failed}")
            for error in report.errors:
                print(f"  - {error}")

    return 1 if report.failed else 0


if __name__ == "__main__":
    sys.exit(main())
