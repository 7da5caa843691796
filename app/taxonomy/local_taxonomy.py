from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml

from .provider import TaxonomyProvider
from .terms import compact_key, compile_terms, contains_term

SKILL_CATEGORIES = ("programming", "tools", "databases", "cloud", "others")

_SQL_RE = re.compile(r"sql", re.IGNORECASE)


def _as_terms(values: Any) -> tuple[str, ...]:
    if not isinstance(values, list):
        return ()
    return tuple(str(value).strip().lower() for value in values if str(value).strip())


def _as_groups(raw: Any) -> dict[str, tuple[str, ...]]:
    if not isinstance(raw, dict):
        return {}
    return {str(name): _as_terms(terms) for name, terms in raw.items()}


class LocalTaxonomy(TaxonomyProvider):
    """Keyword tables from keywords.yaml plus the lookups built on them."""

    def __init__(self, keywords_path: str | Path | None = None) -> None:
        path = Path(keywords_path) if keywords_path else Path(__file__).with_name("keywords.yaml")
        tables = self._load_tables(path)

        categories = _as_groups(tables.get("skill_categories"))
        self.skill_categories: dict[str, tuple[str, ...]] = {
            name: categories.get(name, ()) for name in SKILL_CATEGORIES
        }
        self.jd_technology_groups = _as_groups(tables.get("jd_technology_groups"))
        self.jd_skill_groups = _as_groups(tables.get("jd_skill_groups"))
        self.methodologies = frozenset(_as_terms(tables.get("methodologies")))
        self.must_have_terms = _as_terms(tables.get("must_have_terms"))
        self.weak_verbs = _as_terms(tables.get("weak_verbs"))

        raw_canonical = tables.get("canonical_terms") or {}
        self.canonical_terms: dict[str, str] = {
            compact_key(str(key)): str(value) for key, value in raw_canonical.items()
        }
        raw_synonyms = tables.get("tech_synonyms") or {}
        self.tech_synonyms: dict[str, tuple[str, ...]] = {
            str(key): _as_terms(values) for key, values in raw_synonyms.items()
        }
        self.related_concepts = _as_groups(tables.get("related_concepts"))
        raw_verbs = tables.get("action_verbs") or {}
        self.action_verbs: dict[str, str] = {
            str(base).strip().lower(): str(past).strip().lower() for base, past in raw_verbs.items()
        }

        self.category_patterns = {
            name: compile_terms(terms) for name, terms in self.skill_categories.items()
        }
        self.all_skill_pattern = compile_terms(
            term for terms in self.skill_categories.values() for term in terms
        )
        self.jd_technology_patterns = {
            name: compile_terms(terms) for name, terms in self.jd_technology_groups.items()
        }
        self.jd_skill_patterns = {
            name: compile_terms(terms) for name, terms in self.jd_skill_groups.items()
        }

    @staticmethod
    def _load_tables(path: Path) -> dict[str, Any]:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RuntimeError(f"Failed to read keyword tables '{path}': {exc}") from exc
        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise RuntimeError(f"Invalid YAML in keyword tables '{path}': {exc}") from exc
        if not isinstance(parsed, dict):
            raise RuntimeError(f"Invalid keyword tables '{path}': expected a top-level mapping.")
        return parsed

    def canonical_term(self, raw: str) -> str:
        clean = " ".join(raw.split())
        if not clean:
            return ""
        known = self.canonical_terms.get(compact_key(clean))
        if known:
            return known
        titled = " ".join(word[:1].upper() + word[1:].lower() for word in clean.split(" "))
        return _SQL_RE.sub("SQL", titled)

    def categorize(self, term: str) -> str:
        lowered = " ".join(term.lower().split())
        key = compact_key(lowered)
        for category, terms in self.skill_categories.items():
            if any(compact_key(entry) == key for entry in terms):
                return category
        for category, terms in self.skill_categories.items():
            if any(contains_term(lowered, entry) for entry in terms):
                return category
        return "others"

    def past_tense(self, verb: str) -> str:
        return self.action_verbs.get(verb.lower(), verb.lower())
