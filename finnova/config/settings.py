"""
FinNova - Centralized Configuration
====================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the project-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr`` and has **no default value**.
  If the key is missing at startup, Pydantic raises a ``ValidationError``
  and the server refuses to start.  The raw value is never exposed in
  repr, logs, or tracebacks.

Paths
-----
All filesystem paths are ``Path.resolve()``-d at class level so they
work identically on Windows, WSL, and Linux.

Timeouts
--------
``UPSTREAM_TIMEOUT_SECONDS`` bounds every retriever and generator call
made by the dialogue router.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).
    Fields *without* a default are **required**.

    Attributes
    ----------
    GOOGLE_API_KEY : SecretStr
        API key for Google AI Studio (Gemini).  **Required.**
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    HOST, PORT
        Bind address of the HTTP server.
    CORS_ORIGINS : list[str]
        Origins allowed to call the API from a browser.
    LLM_MODEL, LLM_TEMPERATURE
        Gemini model used for answers and conversation summaries.
    EMBEDDING_MODEL : str
        Model identifier passed to ``GoogleGenerativeAIEmbeddings``.
    CHUNK_SIZE, CHUNK_OVERLAP
        Knowledge-base splitter parameters.
    SEARCH_RESULTS_LIMIT : int
        Number of passages retrieved per question.
    UPSTREAM_TIMEOUT_SECONDS : float
        Upper bound for a single retriever / generator call.
    SUMMARIZE_TAX_TURNS : bool
        Also refresh the memory summary after calculator answers.
    DEFAULT_SESSION_ID : str
        Conversation used when a request carries no session id.
    MAX_SESSIONS : int
        Conversations kept in memory; least recently used idle ones are
        dropped beyond this.
    LOG_LEVEL : str | None
        Explicit log level; overrides the one derived from ``ENV``.
    """

    # ── Resolved Absolute Paths ────────────────────────────────────────
    BASE_DIR: Path = Path(__file__).resolve().parent.parent
    DATA_RAW_DIR: Path = BASE_DIR / "data" / "raw"
    DATA_PROCESSED_DIR: Path = BASE_DIR / "data" / "processed"
    LANCEDB_PATH: Path = BASE_DIR / "data" / "lancedb"

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "dev"

    # ── API Keys (REQUIRED — no default) ───────────────────────────────
    GOOGLE_API_KEY: SecretStr

    # ── HTTP Server ────────────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: list[str] = ["*"]

    # ── Model Configuration ────────────────────────────────────────────
    LLM_MODEL: str = "gemini-2.5-flash"
    LLM_TEMPERATURE: float = 0.25
    EMBEDDING_MODEL: str = "gemini-embedding-001"

    # ── Ingestion Parameters ───────────────────────────────────────────
    CHUNK_SIZE: int = 300
    CHUNK_OVERLAP: int = 50

    # ── LanceDB ────────────────────────────────────────────────────────
    LANCEDB_TABLE_NAME: str = "finnova_docs"

    # ── Dialogue ───────────────────────────────────────────────────────
    SEARCH_RESULTS_LIMIT: int = 3
    UPSTREAM_TIMEOUT_SECONDS: float = 30.0
    SUMMARIZE_TAX_TURNS: bool = False
    DEFAULT_SESSION_ID: str = "default"
    MAX_SESSIONS: int = 1000

    # ── Logging ────────────────────────────────────────────────────────
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("CHUNK_SIZE")
    @classmethod
    def _chunk_size_positive(cls, v: int) -> int:
        if v < 50:
            raise ValueError(f"CHUNK_SIZE must be ≥ 50, got {v}")
        return v


    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be 0–2, got {v}")
        return v


    @field_validator("SEARCH_RESULTS_LIMIT")
    @classmethod
    def _search_limit_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"SEARCH_RESULTS_LIMIT must be ≥ 1, got {v}")
        return v


    @field_validator("UPSTREAM_TIMEOUT_SECONDS")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"UPSTREAM_TIMEOUT_SECONDS must be > 0, got {v}")
        return v


    @field_validator("MAX_SESSIONS")
    @classmethod
    def _max_sessions_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"MAX_SESSIONS must be ≥ 1, got {v}")
        return v


    @model_validator(mode="after")
    def _overlap_below_size(self) -> "Settings":
        if self.CHUNK_OVERLAP >= self.CHUNK_SIZE:
            raise ValueError(f"CHUNK_OVERLAP ({self.CHUNK_OVERLAP}) must be smaller than CHUNK_SIZE ({self.CHUNK_SIZE})")
        return self

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from finnova.config.settings import settings
settings = Settings()
