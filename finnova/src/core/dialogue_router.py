"""
FinNova - Dialogue Router
===========================
Decides, for every user message, how the answer is produced and keeps
the conversation memory up to date.

Flow
----
1. Lock the conversation's session (turns of one conversation never
   interleave).
2. Classify the message → ``TaxQuery`` or ``GeneralQuery``.
3. ``TaxQuery`` → deterministic tax breakdown, templated answer, turn
   recorded.  The memory summary is left as is unless
   ``SUMMARIZE_TAX_TURNS`` is enabled.
4. ``GeneralQuery`` →
       a. retrieve the top passages for the message,
       b. build the RAG prompt (persona, passages, summary, question),
       c. generate the answer,
       d. summarize the transcript including the new turn,
       e. commit turn + summary together, return the answer.

Failure semantics
-----------------
Retriever / generator errors are not retried.  They are raised as
``UpstreamError`` (``UpstreamTimeoutError`` once
``UPSTREAM_TIMEOUT_SECONDS`` elapses) and nothing is written to memory
for the failed exchange.

Usage:
    router = DialogueRouter(retriever, generator)
    answer = await router.handle_message("เงินเดือน 50000 เสียภาษีเท่าไหร่")
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from finnova.config.prompt_templates import PERSONA, RAG_PROMPT_TEMPLATE, SUMMARIZATION_PROMPT
from finnova.config.settings import settings
from finnova.src.core.errors import UpstreamError, UpstreamTimeoutError
from finnova.src.core.intent import TaxQuery, classify_intent
from finnova.src.core.memory import ConversationMemory, SessionStore, Turn, render_transcript
from finnova.src.core.tax_calculator import compute_tax, format_tax_answer
from finnova.src.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# ══════════════════════════════════════════════════════════════════════
#  COLLABORATOR PROTOCOLS
# ══════════════════════════════════════════════════════════════════════


class Retriever(Protocol):
    """Top-*k* passages for a query, most relevant first."""

    def search(self, query: str, k: int) -> list[str]: ...


class Generator(Protocol):
    """Prompt in, generated text out."""

    async def generate(self, prompt: str) -> str: ...


# ══════════════════════════════════════════════════════════════════════
#  DIALOGUE ROUTER
# ══════════════════════════════════════════════════════════════════════


class DialogueRouter:
    """
    Routes user messages to the tax calculator or the RAG pipeline.

    Parameters
    ----------
    retriever
        Knowledge retriever (``KnowledgeRetriever`` in production).
    generator
        Answer generator (``GeminiGenerator`` in production).
    sessions
        Optional custom ``SessionStore``.
    timeout
        Seconds allowed per retriever / generator call.
        Defaults to ``settings.UPSTREAM_TIMEOUT_SECONDS``.
    search_limit
        Passages retrieved per question.  Defaults to ``settings.SEARCH_RESULTS_LIMIT``.
    summarize_tax_turns
        Refresh the summary after calculator answers too.
        Defaults to ``settings.SUMMARIZE_TAX_TURNS``.
    """

    __slots__ = ("_retriever", "_generator", "_sessions", "_timeout", "_search_limit", "_summarize_tax_turns")

    def __init__(self, retriever: Retriever, generator: Generator, sessions: SessionStore | None = None, timeout: float | None = None, search_limit: int | None = None, summarize_tax_turns: bool | None = None) -> None:
        self._retriever = retriever
        self._generator = generator
        self._sessions = sessions if sessions is not None else SessionStore()
        self._timeout = timeout if timeout is not None else settings.UPSTREAM_TIMEOUT_SECONDS
        self._search_limit = search_limit if search_limit is not None else settings.SEARCH_RESULTS_LIMIT
        self._summarize_tax_turns = settings.SUMMARIZE_TAX_TURNS if summarize_tax_turns is None else summarize_tax_turns


    @property
    def sessions(self) -> SessionStore:
        return self._sessions


    async def handle_message(self, user_text: str, session_id: str | None = None) -> str:
        """Answer *user_text* within the given conversation (default session if omitted)."""
        session_id = session_id or settings.DEFAULT_SESSION_ID
        session = self._sessions.get(session_id)

        async with session.lock:
            intent = classify_intent(user_text)
            if isinstance(intent, TaxQuery):
                logger.info("[ROUTER] Session '%s': tax query (salary=%d).", session_id, intent.salary)
                return await self._answer_tax(session.memory, user_text, intent.salary)

            logger.info("[ROUTER] Session '%s': general query (%d chars).", session_id, len(user_text))
            return await self._answer_general(session.memory, user_text)

    # ══════════════════════════════════════════════════════════════════
    #  CALCULATOR PATH
    # ══════════════════════════════════════════════════════════════════

    async def _answer_tax(self, memory: ConversationMemory, user_text: str, salary: int) -> str:
        breakdown = compute_tax(salary)
        answer = format_tax_answer(breakdown)
        turn = Turn(user_text=user_text, ai_text=answer)

        if self._summarize_tax_turns:
            transcript = (*memory.get_transcript(), turn)
            summary = await self._summarize(transcript)
            memory.append_turn(turn)
            memory.set_summary(summary)
        else:
            memory.append_turn(turn)

        logger.info("[ROUTER] Tax computed: net=%.2f, tax=%.2f.", breakdown.net_income, breakdown.tax_owed)
        return answer

    # ══════════════════════════════════════════════════════════════════
    #  RETRIEVAL + GENERATION PATH
    # ══════════════════════════════════════════════════════════════════

    async def _answer_general(self, memory: ConversationMemory, user_text: str) -> str:
        t_start = time.perf_counter()

        passages = await self._call("retrieve", asyncio.to_thread(self._retriever.search, user_text, self._search_limit))
        context = "\n".join(passages)
        retrieve_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[ROUTER] Retrieved %d passage(s) in %.1fms.", len(passages), retrieve_ms)

        prompt = self.build_prompt(context, memory.get_summary(), user_text)

        t_llm = time.perf_counter()
        answer = await self._call("generate", self._generator.generate(prompt))
        llm_ms = (time.perf_counter() - t_llm) * 1000

        turn = Turn(user_text=user_text, ai_text=answer)
        t_summary = time.perf_counter()
        summary = await self._summarize((*memory.get_transcript(), turn))
        summary_ms = (time.perf_counter() - t_summary) * 1000

        memory.append_turn(turn)
        memory.set_summary(summary)

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[ROUTER] Pipeline total: %.1fms (retrieve=%.1f, llm=%.1f, summary=%.1f)", total_ms, retrieve_ms, llm_ms, summary_ms)
        return answer


    async def _summarize(self, transcript: tuple[Turn, ...]) -> str:
        prompt = SUMMARIZATION_PROMPT.format(conversation=render_transcript(transcript))
        summary = await self._call("summarize", self._generator.generate(prompt))
        logger.debug("[MEMORY] Summary refreshed over %d turn(s).", len(transcript))
        return summary


    @staticmethod
    def build_prompt(context: str, summary: str, question: str) -> str:
        """Assemble the RAG prompt: persona, reference passages, prior summary, question."""
        return RAG_PROMPT_TEMPLATE.format(persona=PERSONA, context=context, summary=summary, question=question)


    async def _call(self, stage: str, awaitable: Awaitable[T]) -> T:
        """Await an upstream call under the timeout, wrapping failures in ``UpstreamError``."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            logger.error("[ROUTER] '%s' timed out after %.1fs.", stage, self._timeout)
            raise UpstreamTimeoutError(stage, self._timeout) from exc
        except UpstreamError:
            raise
        except Exception as exc:
            logger.exception("[ROUTER] '%s' call failed.", stage)
            raise UpstreamError(stage) from exc
