"""
Tests for knowledge-base ingestion, vector storage and retrieval
"""
import pytest

from finnova.config.settings import settings
from finnova.src.core.generator import GeminiGenerator
from finnova.src.core.ingestor import IngestionPipeline
from finnova.src.core.retriever import KnowledgeRetriever
from finnova.src.database.vector_store import FinNovaVectorStore
from finnova.src.utils.text_utils import clean_text, format_amount

_VOCAB = ["ภาษี", "ออม", "หนี้", "ลงทุน", "ประกัน", "เกษียณ"]


class KeywordEmbedder:
    """Deterministic bag-of-keywords embedder."""

    def embed_documents(self, texts):
        return [self.embed_query(t) for t in texts]

    def embed_query(self, text):
        return [float(text.count(word)) + 0.01 for word in _VOCAB]


@pytest.fixture
def store(tmp_path):
    return FinNovaVectorStore(embedder=KeywordEmbedder(), db_path=str(tmp_path / "lancedb"), table_name="test_docs")


# ── text utilities ─────────────────────────────────────────────────────

def test_clean_text_normalises_whitespace():
    raw = "\ufeffบรรทัดแรก\t\t  มีช่องว่าง\n\n\n\n  บรรทัดสอง  "

    assert clean_text(raw) == "บรรทัดแรก มีช่องว่าง\n\nบรรทัดสอง"


@pytest.mark.parametrize(
    "value, rendered",
    [(0, "0"), (120000, "120,000"), (21500.0, "21,500"), (7500.5, "7,500.5"), (0.05, "0.05"), (1234567.891, "1,234,567.89")],
)
def test_format_amount(value, rendered):
    assert format_amount(value) == rendered


# ── vector store ───────────────────────────────────────────────────────

def test_empty_store_searches_to_nothing(store):
    assert store.count() == 0
    assert store.search("ภาษี") == []


def test_add_and_search(store):
    added = store.add_documents(["เรื่องภาษี ภาษี", "เรื่องหนี้", "เรื่องลงทุน"], [{"source_file": "a.txt", "chunk_index": i} for i in range(3)])

    assert added == 3
    assert store.count() == 3

    results = store.search("ภาษี", limit=1)
    assert len(results) == 1
    assert results[0]["text"] == "เรื่องภาษี ภาษี"
    assert results[0]["source_file"] == "a.txt"


def test_add_rejects_mismatched_lengths(store):
    with pytest.raises(ValueError):
        store.add_documents(["one", "two"], [{"source_file": "a.txt", "chunk_index": 0}])


def test_drop_table(store):
    store.add_documents(["เรื่องออม"], [{"source_file": "a.txt", "chunk_index": 0}])
    store.drop_table()

    assert store.count() == 0


# ── ingestion ──────────────────────────────────────────────────────────

def test_ingest_bundled_knowledge_base(store, tmp_path):
    pipeline = IngestionPipeline(vector_store=store, source_dir=settings.DATA_RAW_DIR, cache_path=tmp_path / "hashes.json")

    summary = pipeline.run()

    assert summary["total_files"] >= 1
    assert summary["total_chunks"] > 0
    assert store.count() == summary["total_chunks"]


def test_ingest_skips_unchanged_files(store, tmp_path):
    source = tmp_path / "raw"
    source.mkdir()
    (source / "docs.txt").write_text("การออมเงินคือการเก็บเงินไว้ใช้ในอนาคต", encoding="utf-8")
    cache = tmp_path / "hashes.json"

    first = IngestionPipeline(vector_store=store, source_dir=source, cache_path=cache).run()
    second = IngestionPipeline(vector_store=store, source_dir=source, cache_path=cache).run()

    assert first["files_processed"] == 1
    assert second["files_skipped"] == 1
    assert store.count() == first["total_chunks"]


def test_split_respects_chunk_size(store, tmp_path):
    pipeline = IngestionPipeline(vector_store=store, source_dir=tmp_path, cache_path=tmp_path / "hashes.json")
    text = "\n".join(f"ย่อหน้าที่ {i} " + "ออมเงิน " * 30 for i in range(10))

    chunks = pipeline.split(text)

    assert len(chunks) > 1
    assert all(len(c) <= settings.CHUNK_SIZE for c in chunks)


def test_missing_source_dir(store, tmp_path):
    summary = IngestionPipeline(vector_store=store, source_dir=tmp_path / "missing", cache_path=tmp_path / "hashes.json").run()

    assert summary["total_files"] == 0


# ── retriever + generator adapters ─────────────────────────────────────

def test_retriever_returns_passage_text(store):
    store.add_documents(["เรื่องภาษี", "เรื่องหนี้", "เรื่องประกัน", "เรื่องเกษียณ"], [{"source_file": "a.txt", "chunk_index": i} for i in range(4)])

    passages = KnowledgeRetriever(store).search("หนี้", 3)

    assert len(passages) == 3
    assert passages[0] == "เรื่องหนี้"
    assert all(isinstance(p, str) for p in passages)


class _FakeMessage:
    def __init__(self, content):
        self.content = content


class _FakeChatModel:
    def __init__(self, content):
        self.content = content
        self.received = None

    async def ainvoke(self, messages):
        self.received = messages
        return _FakeMessage(self.content)


@pytest.mark.asyncio
async def test_generator_returns_text_content():
    llm = _FakeChatModel("คำตอบ")

    assert await GeminiGenerator(llm=llm).generate("prompt") == "คำตอบ"
    assert llm.received[0].content == "prompt"


@pytest.mark.asyncio
async def test_generator_flattens_multipart_content():
    llm = _FakeChatModel([{"type": "text", "text": "ส่วนแรก "}, {"type": "thinking", "thinking": "..."}, "ส่วนสอง"])

    assert await GeminiGenerator(llm=llm).generate("prompt") == "ส่วนแรก ส่วนสอง"


def test_reingest_after_table_drop(store, tmp_path):
    source = tmp_path / "raw"
    source.mkdir()
    (source / "docs.txt").write_text("การออมเงินคือการเก็บเงินไว้ใช้ในอนาคต", encoding="utf-8")
    cache = tmp_path / "hashes.json"

    first = IngestionPipeline(vector_store=store, source_dir=source, cache_path=cache).run()
    store.drop_table()
    again = IngestionPipeline(vector_store=store, source_dir=source, cache_path=cache).run()

    assert again["files_processed"] == 1
    assert again["files_skipped"] == 0
    assert store.count() == first["total_chunks"] > 0


# ── setup_db CLI ───────────────────────────────────────────────────────

@pytest.fixture
def cli_workspace(tmp_path, monkeypatch):
    import langchain_google_genai

    raw = tmp_path / "raw"
    raw.mkdir()
    (raw / "docs.txt").write_text("การชำระหนี้บัตรเครดิตให้เต็มจำนวนทุกเดือน\n\nการลงทุนระยะยาวช่วยสร้างความมั่งคั่ง", encoding="utf-8")

    monkeypatch.setattr(settings, "DATA_RAW_DIR", raw)
    monkeypatch.setattr(settings, "DATA_PROCESSED_DIR", tmp_path / "processed")
    monkeypatch.setattr(settings, "LANCEDB_PATH", tmp_path / "lancedb")
    monkeypatch.setattr(langchain_google_genai, "GoogleGenerativeAIEmbeddings", lambda **kwargs: KeywordEmbedder())
    return tmp_path


def _row_count():
    return FinNovaVectorStore(embedder=KeywordEmbedder()).count()


def test_setup_db_drop_reingests_everything(cli_workspace):
    from finnova.scripts.setup_db import main

    main([])
    ingested = _row_count()
    main(["--drop"])

    assert ingested > 0
    assert _row_count() == ingested


def test_setup_db_drop_only_then_plain_run(cli_workspace):
    from finnova.scripts.setup_db import main

    main([])
    ingested = _row_count()
    main(["--drop-only"])
    assert _row_count() == 0

    main([])
    assert _row_count() == ingested
