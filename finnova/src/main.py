"""
FinNova - Application Entry Point
===================================
FastAPI application factory.  Registers the routes from
``finnova.src.api.routes``, configures CORS, and wires the dialogue
router during the lifespan startup:

    1. Google Generative AI embeddings + ``FinNovaVectorStore``.
    2. Knowledge-base ingestion when the vector table is empty.
    3. ``KnowledgeRetriever`` + ``GeminiGenerator`` → ``DialogueRouter``.

A pre-built ``DialogueRouter`` can be injected (tests do this), in
which case no model or database is touched.

Run:
    finnova-server
    python -m finnova.scripts.serve
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finnova.config.settings import settings
from finnova.src.api.routes import router as api_router
from finnova.src.core.dialogue_router import DialogueRouter
from finnova.src.utils.logger import get_logger

logger = get_logger(__name__)


def build_dialogue_router() -> DialogueRouter:
    """Build the production router: LanceDB retrieval + Gemini generation."""
    from langchain_google_genai import GoogleGenerativeAIEmbeddings

    from finnova.src.core.generator import GeminiGenerator
    from finnova.src.core.ingestor import IngestionPipeline
    from finnova.src.core.retriever import KnowledgeRetriever
    from finnova.src.database.vector_store import FinNovaVectorStore

    t_start = time.perf_counter()
    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
    store = FinNovaVectorStore(embedder=embedder)

    if store.count() == 0:
        logger.info("Knowledge base is empty — ingesting %s", settings.DATA_RAW_DIR)
        IngestionPipeline(vector_store=store).run()

    dialogue = DialogueRouter(retriever=KnowledgeRetriever(store), generator=GeminiGenerator())
    logger.info("Dialogue router ready in %.1fms (%d knowledge chunks).", (time.perf_counter() - t_start) * 1000, store.count())
    return dialogue


def create_app(dialogue_router: DialogueRouter | None = None) -> FastAPI:
    """Create the FastAPI application, optionally around an injected router."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "dialogue_router", None) is None:
            app.state.dialogue_router = build_dialogue_router()
        logger.info("FinNova backend running at http://%s:%d", settings.HOST, settings.PORT)
        yield

    app = FastAPI(title="FinNova Backend", version="1.0.0", lifespan=lifespan)
    app.state.dialogue_router = dialogue_router
    app.add_middleware(CORSMiddleware, allow_origins=settings.CORS_ORIGINS, allow_methods=["*"], allow_headers=["*"])
    app.include_router(api_router)
    return app

