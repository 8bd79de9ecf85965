"""
FinNova - Text Utilities
=========================
Helper functions for normalising knowledge-base text before it is
chunked and embedded, and for rendering currency amounts in answers.

Consumed by ``IngestionPipeline`` and the tax calculator; stateless
and side-effect-free.
"""

from __future__ import annotations

import re
import unicodedata


# ── Non-printable character pattern ────────────────────────────────────
# Control characters (C0/C1) except \n, \r, \t, plus BOM, zero-width
# characters and soft hyphens that leak in from copy-pasted documents.
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufeff\u200b\u200c\u200d\u200e\u200f\u00ad\u2060\ufffe]")


def clean_text(text: str) -> str:
    """
    Sanitise raw document text for embedding.

    Steps:
        1. Unicode NFC normalisation – Thai vowels and tone marks are
           stored in one canonical order.
        2. Strip non-printable / zero-width characters.
        3. Collapse runs of horizontal whitespace into a single space,
           *preserving* newlines.
        4. Strip leading / trailing whitespace from every line.
        5. Collapse 3+ consecutive blank lines to 2.

    Args:
        text: Raw text read from a knowledge-base file.

    Returns:
        Cleaned, normalised text ready for chunking.
    """
    text = unicodedata.normalize("NFC", text)
    text = _NON_PRINTABLE_RE.sub("", text)
    text = re.sub(r"[^\S\n]+", " ", text)
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def format_amount(value: float) -> str:
    """
    Render a currency amount with thousands separators.

    At most two decimals are shown and trailing zeros are dropped, so
    ``120000`` → ``"120,000"`` and ``7500.5`` → ``"7,500.5"``.
    """
    rendered = f"{value:,.2f}"
    if "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    return rendered
