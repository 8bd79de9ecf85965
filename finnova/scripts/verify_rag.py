"""
FinNova - Retrieval Verification
==================================
Searches the knowledge base for a query and prints the passages the
dialogue router would put into its prompt, with source metadata.

Usage:
    python -m finnova.scripts.verify_rag "ลดหย่อนภาษีได้กี่ทาง"
    python -m finnova.scripts.verify_rag "เงินสำรองฉุกเฉิน" -k 5
"""

from __future__ import annotations

import argparse


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="verify_rag", description="FinNova — Show the top knowledge-base passages for a query.")
    parser.add_argument("query", help="Question to search for.")
    parser.add_argument("-k", "--limit", type=int, default=None, help="Number of passages (default: SEARCH_RESULTS_LIMIT).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)

    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    from finnova.config.settings import settings
    from finnova.src.database.vector_store import FinNovaVectorStore

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    store = FinNovaVectorStore(embedder=embedder)

    if store.count() == 0:
        print("Knowledge base is empty. Run 'python -m finnova.scripts.setup_db' first.")
        return

    limit = args.limit or settings.SEARCH_RESULTS_LIMIT
    print(f"Table '{settings.LANCEDB_TABLE_NAME}' has {store.count()} rows.\n")
    print(f"Query: {args.query}")
    print("=" * 60)

    for i, result in enumerate(store.search(args.query, limit=limit), 1):
        print(f"\n--- Result {i} ---")
        print(f"  Source:    {result.get('source_file', 'N/A')}")
        print(f"  Distance:  {float(result.get('_distance', 0.0)):.4f}")
        print(f"  Chunk #:   {result.get('chunk_index', 'N/A')}")
        print("  Text:")
        print(f"    {result.get('text', '')}")


if __name__ == "__main__":
    main()
