from __future__ import annotations

from typing import Protocol


class TaxonomyProvider(Protocol):
    def canonical_term(self, raw: str) -> str:
        """Return the display form of a term ("powerbi" -> "Power BI")."""

    def categorize(self, term: str) -> str:
        """Return the skill category a term belongs to, defaulting to "others"."""

    def past_tense(self, verb: str) -> str:
        """Return the past tense used when a weak verb is replaced."""
