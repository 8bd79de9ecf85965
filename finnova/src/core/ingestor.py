"""
FinNova - IngestionPipeline
=============================
Reads the financial knowledge base, cleans and chunks it, and
persists the chunks into the ``FinNovaVectorStore``.

Key design decisions:
    • **Dependency Injection** – receives the ``FinNovaVectorStore``.
    • **Recursive chunking** – ``RecursiveCharacterTextSplitter`` with
      ``CHUNK_SIZE`` / ``CHUNK_OVERLAP`` from settings; the separator
      list ends with the empty string, so Thai text without spaces is
      still cut to size.
    • **Caching** – MD5-based file hashing skips unchanged files.

Usage:
    from finnova.src.core.ingestor import IngestionPipeline
    pipeline = IngestionPipeline(vector_store)
    result   = pipeline.run()
"""

from __future__ import annotations

import hashlib
import json
import time
from pathlib import Path
from typing import Any

from langchain_text_splitters import RecursiveCharacterTextSplitter

from finnova.config.settings import settings
from finnova.src.database.vector_store import FinNovaVectorStore
from finnova.src.utils.logger import get_logger
from finnova.src.utils.text_utils import clean_text

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = {".txt", ".md"}


class IngestionPipeline:
    """
    End-to-end knowledge-base ingestion: read → clean → chunk → embed → store.

    Parameters
    ----------
    vector_store
        An initialised ``FinNovaVectorStore`` instance (injected).
    source_dir
        Override the source directory. Defaults to ``settings.DATA_RAW_DIR``.
    cache_path
        Override the hash cache file (ignored while the vector table is
        empty). Defaults to
        ``settings.DATA_PROCESSED_DIR / "ingestion_hashes.json"``.
    """

    def __init__(self, vector_store: FinNovaVectorStore, source_dir: Path | None = None, cache_path: Path | None = None) -> None:
        self._store = vector_store
        self._source_dir = Path(source_dir or settings.DATA_RAW_DIR)
        self._splitter = RecursiveCharacterTextSplitter(chunk_size=settings.CHUNK_SIZE, chunk_overlap=settings.CHUNK_OVERLAP)

        self._hash_cache_path: Path = cache_path or settings.DATA_PROCESSED_DIR / "ingestion_hashes.json"
        self._hash_cache: dict[str, str] = self._load_hash_cache()

    # ══════════════════════════════════════════════════════════════════
    #  PUBLIC ENTRY POINT
    # ══════════════════════════════════════════════════════════════════

    def run(self) -> dict[str, Any]:
        """
        Ingest every supported file in the source directory.

        Returns
        -------
        dict
            Execution summary with keys:
            ``total_files``, ``files_processed``, ``files_skipped``,
            ``total_chunks``, ``elapsed_seconds``.
        """
        t_start = time.perf_counter()

        if not self._source_dir.exists():
            logger.warning("Source directory does not exist: %s", self._source_dir)
            return self._summary(0, 0, 0, 0, time.perf_counter() - t_start)

        files = sorted(f for f in self._source_dir.iterdir() if f.suffix.lower() in _SUPPORTED_EXTENSIONS)
        if not files:
            logger.warning("No supported files found in %s", self._source_dir)
            return self._summary(0, 0, 0, 0, time.perf_counter() - t_start)

        # Cached hashes describe rows that are gone once the table is dropped
        if self._hash_cache and self._store.count() == 0:
            logger.warning("Vector table is empty — ignoring %d cached file hash(es).", len(self._hash_cache))
            self._hash_cache = {}

        logger.info("Starting ingestion — %d file(s) found in %s", len(files), self._source_dir)

        total_chunks = 0
        files_processed = 0
        files_skipped = 0

        for filepath in files:
            result = self._ingest_file(filepath)
            if result == -1:
                files_skipped += 1
            else:
                total_chunks += result
                files_processed += 1

        self._save_hash_cache()

        elapsed = time.perf_counter() - t_start
        logger.info("Ingestion complete — %d file(s) processed, %d skipped, %d chunk(s) stored in %.2fs.", files_processed, files_skipped, total_chunks, elapsed)
        return self._summary(len(files), files_processed, files_skipped, total_chunks, elapsed)


    def split(self, text: str) -> list[str]:
        """Clean *text* and split it into knowledge-base chunks."""
        cleaned = clean_text(text)
        if not cleaned:
            return []
        return [c.strip() for c in self._splitter.split_text(cleaned) if c.strip()]

    # ══════════════════════════════════════════════════════════════════
    #  PER-FILE PROCESSING
    # ══════════════════════════════════════════════════════════════════

    def _ingest_file(self, filepath: Path) -> int:
        """
        Read, clean, chunk, and store a single file.

        Returns
        -------
        int
            Number of chunks added, or ``-1`` if the file was skipped
            (cache hit).
        """
        file_hash = self._compute_file_hash(filepath)
        if self._hash_cache.get(filepath.name) == file_hash:
            logger.info("CACHE_HIT — Skipping unchanged file: %s", filepath.name)
            return -1

        logger.info("Processing file: %s", filepath.name)
        chunks = self.split(filepath.read_text(encoding="utf-8"))
        if not chunks:
            logger.warning("Skipping empty file: %s", filepath.name)
            return 0

        for idx, chunk in enumerate(chunks):
            logger.debug("  Chunk %d (%d chars): %.60s…", idx, len(chunk), chunk.replace("\n", " "))

        metadatas = [{"source_file": filepath.name, "chunk_index": idx} for idx in range(len(chunks))]

        t_embed = time.perf_counter()
        added = self._store.add_documents(chunks, metadatas)
        logger.info("File '%s' → %d chunk(s), embed+store %.1fms.", filepath.name, added, (time.perf_counter() - t_embed) * 1000)

        self._hash_cache[filepath.name] = file_hash
        return added

    # ══════════════════════════════════════════════════════════════════
    #  MD5 CACHING
    # ══════════════════════════════════════════════════════════════════

    @staticmethod
    def _compute_file_hash(filepath: Path) -> str:
        """Return the MD5 hex digest of a file's contents."""
        hasher = hashlib.md5()
        with open(filepath, "rb") as f:
            for block in iter(lambda: f.read(8192), b""):
                hasher.update(block)
        return hasher.hexdigest()


    def _load_hash_cache(self) -> dict[str, str]:
        """Load the hash cache from disk (or return empty dict)."""
        if self._hash_cache_path.exists():
            try:
                return json.loads(self._hash_cache_path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError):
                logger.warning("Corrupt hash cache — starting fresh.")
        return {}


    def _save_hash_cache(self) -> None:
        """Persist the hash cache to disk."""
        self._hash_cache_path.parent.mkdir(parents=True, exist_ok=True)
        self._hash_cache_path.write_text(json.dumps(self._hash_cache, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug("Hash cache saved to %s", self._hash_cache_path)


    def clear_hash_cache(self) -> bool:
        """Delete the on-disk hash cache.  Returns True if a file was removed."""
        self._hash_cache = {}
        if self._hash_cache_path.exists():
            self._hash_cache_path.unlink()
            logger.warning("Hash cache deleted: %s", self._hash_cache_path)
            return True
        return False

    # ── Summary helper ─────────────────────────────────────────────────

    @staticmethod
    def _summary(total: int, processed: int, skipped: int, chunks: int, elapsed: float) -> dict[str, Any]:
        return {
            "total_files": total,
            "files_processed": processed,
            "files_skipped": skipped,
            "total_chunks": chunks,
            "elapsed_seconds": round(elapsed, 2),
        }
