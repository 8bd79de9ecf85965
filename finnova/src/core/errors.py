"""
FinNova - Error Types
======================
Typed failures raised by the dialogue core.  The transport layer is the
only place that turns these into HTTP responses.
"""

from __future__ import annotations


class FinNovaError(Exception):
    """Base class for every error raised by the FinNova core."""


class UpstreamError(FinNovaError):
    """
    A retriever or generator call failed.

    Parameters
    ----------
    stage
        Which call failed: ``"retrieve"``, ``"generate"`` or ``"summarize"``.
    """

    def __init__(self, stage: str, message: str | None = None) -> None:
        self.stage = stage
        super().__init__(message or f"Upstream call failed during '{stage}'.")


class UpstreamTimeoutError(UpstreamError):
    """A retriever or generator call did not answer within the configured timeout."""

    def __init__(self, stage: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(stage, f"Upstream call '{stage}' timed out after {timeout:.1f}s.")
