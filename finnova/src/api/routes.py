"""
FinNova - API Routes
=====================
Thin controllers over the ``DialogueRouter``:

  - ``GET    /``                  → liveness banner
  - ``GET    /test``              → plain ``OK``
  - ``GET    /health``            → ``{"status": "ok"}``
  - ``POST   /chat``              → ``{"message", "session_id"?}`` → ``{"answer"}``
  - ``DELETE /chat/{session_id}`` → forget a conversation

Request validation happens in the Pydantic models, so malformed
payloads are rejected with 422 before reaching the router.  Upstream
failures become a 502 with a fixed, user-facing message; internal
details stay in the server log.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field, StrictStr

from finnova.config.prompt_templates import ROOT_BANNER, UPSTREAM_FAILURE_MESSAGE
from finnova.src.core.dialogue_router import DialogueRouter
from finnova.src.core.errors import UpstreamError
from finnova.src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


class ChatRequest(BaseModel):
    message: StrictStr = Field(..., description="The user's latest message")
    session_id: StrictStr | None = Field(default=None, description="Conversation identifier; omitted → shared default conversation")


class ChatResponse(BaseModel):
    answer: str


class ErrorResponse(BaseModel):
    error: str


def _dialogue_router(request: Request) -> DialogueRouter:
    return request.app.state.dialogue_router


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return ROOT_BANNER


@router.get("/test", response_class=PlainTextResponse)
def test() -> str:
    return "OK"


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/chat", response_model=ChatResponse, responses={502: {"model": ErrorResponse}})
async def chat(req: ChatRequest, request: Request):
    dialogue = _dialogue_router(request)
    logger.info("[API] Incoming chat: session=%s message_len=%d", req.session_id or "<default>", len(req.message))

    try:
        answer = await dialogue.handle_message(req.message, session_id=req.session_id)
    except UpstreamError as exc:
        logger.error("[API] Upstream failure (stage=%s): %s", exc.stage, exc)
        return JSONResponse(status_code=502, content={"error": UPSTREAM_FAILURE_MESSAGE})

    return ChatResponse(answer=answer)


@router.delete("/chat/{session_id}")
def clear_chat(session_id: str, request: Request) -> dict[str, bool]:
    cleared = _dialogue_router(request).sessions.clear(session_id)
    return {"cleared": cleared}
