"""
Pytest configuration and fixtures
"""
import asyncio
import os

# Settings are instantiated at import time; provide a dummy key before any finnova import
os.environ.setdefault("GOOGLE_API_KEY", "test-google-api-key")
os.environ.setdefault("ENV", "prod")

import pytest
from fastapi.testclient import TestClient

from finnova.config.prompt_templates import SUMMARIZATION_PROMPT
from finnova.src.core.dialogue_router import DialogueRouter
from finnova.src.main import create_app

SUMMARY_PREFIX = SUMMARIZATION_PROMPT.split("{conversation}")[0]


class StubRetriever:
    """Returns fixed passages and records every query."""

    def __init__(self, passages=None, error=None):
        self.passages = passages if passages is not None else ["passage one", "passage two", "passage three", "passage four"]
        self.error = error
        self.calls = []

    def search(self, query, k):
        self.calls.append((query, k))
        if self.error is not None:
            raise self.error
        return self.passages[:k]


class StubGenerator:
    """
    Answers prompts deterministically and records them.

    Answer prompts get ``answer-N``; summarization prompts get ``summary-N``.
    ``fail_on`` makes the given kind (``"answer"`` / ``"summary"``) raise.
    ``delay`` makes every call sleep first.
    """

    def __init__(self, fail_on=None, delay=0.0):
        self.fail_on = fail_on
        self.delay = delay
        self.prompts = []
        self.answer_count = 0
        self.summary_count = 0

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if prompt.startswith(SUMMARY_PREFIX):
            if self.fail_on == "summary":
                raise RuntimeError("summary model unavailable")
            self.summary_count += 1
            return f"summary-{self.summary_count}"
        if self.fail_on == "answer":
            raise RuntimeError("answer model unavailable")
        self.answer_count += 1
        return f"answer-{self.answer_count}"

    @property
    def answer_prompts(self):
        return [p for p in self.prompts if not p.startswith(SUMMARY_PREFIX)]

    @property
    def summary_prompts(self):
        return [p for p in self.prompts if p.startswith(SUMMARY_PREFIX)]


@pytest.fixture
def retriever():
    return StubRetriever()


@pytest.fixture
def generator():
    return StubGenerator()


@pytest.fixture
def dialogue_router(retriever, generator):
    return DialogueRouter(retriever=retriever, generator=generator, timeout=5.0, search_limit=3, summarize_tax_turns=False)


@pytest.fixture
def client(dialogue_router):
    with TestClient(create_app(dialogue_router)) as test_client:
        yield test_client
