"""
FinNova - Intent Parser
========================
Classifies a user message into a tagged intent before routing:

``TaxQuery(salary)``
    The message mentions the salary keyword (``เงินเดือน``) followed by
    optional whitespace and digits.  Only the first mention counts.

``GeneralQuery()``
    Everything else, including captures that cannot be used as a
    monthly salary.  Those fall through to retrieval + generation.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Union

SALARY_PATTERN = re.compile(r"เงินเดือน\s*([0-9]+)")


@dataclass(frozen=True, slots=True)
class TaxQuery:
    salary: int


@dataclass(frozen=True, slots=True)
class GeneralQuery:
    pass


Intent = Union[TaxQuery, GeneralQuery]


def classify_intent(text: str) -> Intent:
    """Return the intent of *text*; malformed salary captures yield ``GeneralQuery``."""
    match = SALARY_PATTERN.search(text)
    if match is None:
        return GeneralQuery()

    try:
        salary = int(match.group(1))
        usable = math.isfinite(float(salary) * 12)
    except (ValueError, OverflowError):
        usable = False

    if not usable:
        return GeneralQuery()
    return TaxQuery(salary=salary)
