"""
FinNova - Gemini Answer Generator
===================================
Thin async wrapper around ``ChatGoogleGenerativeAI``: one prompt in,
one piece of text out.  No streaming, no retries — failures propagate
to the dialogue router.

Usage:
    from finnova.src.core.generator import GeminiGenerator
    generator = GeminiGenerator()
    text = await generator.generate("...")
"""

from __future__ import annotations

from finnova.config.settings import settings
from finnova.src.utils.logger import get_logger

logger = get_logger(__name__)


class GeminiGenerator:
    """
    Generate text with Gemini through LangChain.

    Parameters
    ----------
    llm
        Optional pre-built chat model (anything exposing ``ainvoke``).
        Defaults to ``ChatGoogleGenerativeAI`` configured from settings.
    """

    __slots__ = ("_llm",)

    def __init__(self, llm: object | None = None) -> None:
        self._llm = llm or self._init_llm()


    @staticmethod
    def _init_llm() -> object:
        """Initialise the Gemini LLM via LangChain."""
        from langchain_google_genai import ChatGoogleGenerativeAI

        llm = ChatGoogleGenerativeAI(model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, google_api_key=settings.GOOGLE_API_KEY.get_secret_value())
        logger.info("LLM initialised: %s (temperature=%.2f)", settings.LLM_MODEL, settings.LLM_TEMPERATURE)
        return llm


    async def generate(self, prompt: str) -> str:
        """Send *prompt* as a single human message and return the reply text."""
        from langchain_core.messages import HumanMessage

        response = await self._llm.ainvoke([HumanMessage(content=prompt)])  # type: ignore[union-attr]
        return self._extract_text(response)


    @staticmethod
    def _extract_text(response: object) -> str:
        """Flatten a LangChain message into plain text."""
        content = response.content if hasattr(response, "content") else str(response)
        if isinstance(content, str):
            return content
        # Multi-part content: keep the text parts only
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
