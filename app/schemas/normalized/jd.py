from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KeywordProfile(BaseModel):
    """Keyword/skill profile extracted from a job description."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role_title: str = ""
    technologies: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
    methodologies: list[str] = Field(default_factory=list)
    role_keywords: list[str] = Field(default_factory=list)
    action_verbs: list[str] = Field(default_factory=list)
    requirements: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.role_title
            or self.technologies
            or self.skills
            or self.role_keywords
            or self.action_verbs
            or self.requirements
        )
