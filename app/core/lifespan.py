from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.render.template import validate_template
from app.services.resume_llm import resume_llm_enabled
from app.taxonomy import get_default_taxonomy_provider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    taxonomy = get_default_taxonomy_provider()
    if not validate_template():
        raise RuntimeError("Invalid PDF template configuration.")
    logger.info(
        "startup_ready skill_terms=%s jd_groups=%s llm_enabled=%s pdf_overflow=%s",
        sum(len(terms) for terms in taxonomy.skill_categories.values()),
        len(taxonomy.jd_technology_groups),
        resume_llm_enabled(),
        settings.pdf_overflow_policy,
    )
    yield
