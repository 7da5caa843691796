from functools import lru_cache

from .local_taxonomy import SKILL_CATEGORIES, LocalTaxonomy
from .provider import TaxonomyProvider


@lru_cache(maxsize=1)
def get_default_taxonomy_provider() -> LocalTaxonomy:
    return LocalTaxonomy()


__all__ = ["SKILL_CATEGORIES", "TaxonomyProvider", "LocalTaxonomy", "get_default_taxonomy_provider"]
