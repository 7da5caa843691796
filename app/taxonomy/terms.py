from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable

_EDGE_BEFORE = r"(?<![A-Za-z0-9])"
_EDGE_AFTER = r"(?![A-Za-z0-9+#])"


def compact_key(term: str) -> str:
    return re.sub(r"[\s\-]+", "", term.strip().lower())


def term_pattern(term: str) -> str:
    """Regex body for a term; inner spaces also match hyphens or nothing."""
    parts = [re.escape(part) for part in term.strip().lower().split()]
    return r"[\s\-]*".join(parts)


def compile_terms(terms: Iterable[str]) -> re.Pattern[str] | None:
    ordered = sorted({term.strip().lower() for term in terms if term.strip()}, key=len, reverse=True)
    if not ordered:
        return None
    alternation = "|".join(term_pattern(term) for term in ordered)
    return re.compile(rf"{_EDGE_BEFORE}(?:{alternation}){_EDGE_AFTER}", re.IGNORECASE)


@lru_cache(maxsize=2048)
def _single_term_re(term: str) -> re.Pattern[str]:
    return re.compile(rf"{_EDGE_BEFORE}{term_pattern(term)}{_EDGE_AFTER}", re.IGNORECASE)


def contains_term(text: str, term: str) -> bool:
    if not text or not term.strip():
        return False
    return bool(_single_term_re(term.strip().lower()).search(text))


def terms_overlap(left: str, right: str) -> bool:
    """True when either term appears inside the other on word edges."""
    return contains_term(left, right) or contains_term(right, left)


def dedupe_casefold(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        clean = value.strip()
        key = clean.casefold()
        if not clean or key in seen:
            continue
        seen.add(key)
        result.append(clean)
    return result
