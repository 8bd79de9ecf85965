"""
FinNova - Knowledge Base Setup & Ingestion Script
===================================================
CLI entry point that orchestrates:
    1. Validate configuration (fail-fast on a missing ``GOOGLE_API_KEY``).
    2. Initialise ``FinNovaVectorStore`` (optionally drop the existing table).
    3. Run the ``IngestionPipeline`` over the financial knowledge base.
    4. Print an execution summary with timing breakdown.

Flags:
    --drop       Drop the LanceDB table before ingesting.  The emptied table
                 makes the pipeline ignore cached hashes, so every file is
                 re-ingested.
    --purge      Drop table AND clear the hash cache (full re-ingestion).
    --drop-only  Drop the table and exit immediately (no ingestion).

Usage:
    python -m finnova.scripts.setup_db              # Normal ingestion
    python -m finnova.scripts.setup_db --purge      # Drop table + cache, full re-ingest
    python -m finnova.scripts.setup_db --drop-only  # Drop table and exit
"""

from __future__ import annotations

import argparse
import sys
import time


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="setup_db", description="FinNova — Initialise the vector database and ingest the financial knowledge base.")
    parser.add_argument("--drop", action="store_true", default=False, help="Drop the LanceDB table before ingesting (every file is re-ingested).")
    parser.add_argument("--purge", action="store_true", default=False, help="Drop the LanceDB table AND clear the hash cache (full clean re-ingestion).")
    parser.add_argument("--drop-only", action="store_true", default=False, help="Drop the LanceDB table and exit (no ingestion).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    t_start = time.perf_counter()

    # ── 0. Load settings + .env (timed) ────────────────────────────────
    t_settings = time.perf_counter()
    try:
        from finnova.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)
    settings_ms = (time.perf_counter() - t_settings) * 1000

    from finnova.src.utils.logger import get_logger
    logger = get_logger(__name__)

    _print_header(settings)

    # ── 1. Initialise embedder + vector store (timed) ──────────────────
    t_init = time.perf_counter()
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    from finnova.src.core.ingestor import IngestionPipeline
    from finnova.src.database.vector_store import FinNovaVectorStore

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    store = FinNovaVectorStore(embedder=embedder)
    pipeline = IngestionPipeline(vector_store=store)
    init_ms = (time.perf_counter() - t_init) * 1000
    logger.info("Startup: settings %.1fms, embedder + LanceDB %.1fms", settings_ms, init_ms)

    if args.drop or args.purge or args.drop_only:
        logger.warning("Dropping table '%s' as requested.", settings.LANCEDB_TABLE_NAME)
        store.drop_table()

        if args.purge and not pipeline.clear_hash_cache():
            logger.info("No hash cache to clear.")

        if args.drop_only:
            logger.info("--drop-only: Table dropped. Exiting.")
            _print_footer({"total_files": 0, "files_skipped": 0, "total_chunks": 0}, time.perf_counter() - t_start, settings_ms + init_ms)
            return

    logger.info("VectorStore ready — table '%s' (%d existing rows).", settings.LANCEDB_TABLE_NAME, store.count())

    # ── 2. Run IngestionPipeline ───────────────────────────────────────
    summary = pipeline.run()

    # ── 3. Print execution summary ─────────────────────────────────────
    _print_footer(summary, time.perf_counter() - t_start, settings_ms + init_ms)


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object) -> None:
    api_key_val = settings.GOOGLE_API_KEY.get_secret_value()  # type: ignore[attr-defined]
    masked = f"****{api_key_val[-4:]}" if len(api_key_val) > 4 else "****"

    print()
    print("=" * 60)
    print("  FINNOVA — Knowledge Base Setup & Ingestion")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                   # type: ignore[attr-defined]
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")       # type: ignore[attr-defined]
    print(f"  LanceDB path : {settings.LANCEDB_PATH}")          # type: ignore[attr-defined]
    print(f"  Source dir   : {settings.DATA_RAW_DIR}")          # type: ignore[attr-defined]
    print(f"  Chunking     : {settings.CHUNK_SIZE} chars, overlap {settings.CHUNK_OVERLAP}")  # type: ignore[attr-defined]
    print(f"  API Key      : {masked}")
    print("=" * 60)
    print()


def _print_footer(summary: dict, elapsed: float, startup_ms: float) -> None:
    total_files = summary["total_files"]
    skipped = summary["files_skipped"]

    print()
    print("=" * 60)
    print("  EXECUTION SUMMARY")
    print("-" * 60)
    print(f"  Total files scanned  : {total_files}")
    print(f"  Files ingested       : {total_files - skipped}")
    print(f"  Files skipped (cache): {skipped}")
    print(f"  Total chunks stored  : {summary['total_chunks']}")
    print("-" * 60)
    print(f"  Startup time         : {startup_ms:>8.1f}ms")
    print(f"  Processing time      : {elapsed - startup_ms / 1000:>8.2f}s")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


if __name__ == "__main__":
    main()
