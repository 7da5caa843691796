from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

PLACEHOLDER_NAME = "YOUR NAME"
PLACEHOLDER_SUMMARY = "Experienced professional with a strong background in relevant skills and expertise."
PLACEHOLDER_TITLE = "Position"
PLACEHOLDER_COMPANY = "Company"
PLACEHOLDER_START = "Start Date"
PLACEHOLDER_END = "End Date"
PLACEHOLDER_DEGREE = "Degree"
PLACEHOLDER_UNIVERSITY = "University"
PLACEHOLDER_YEARS = "Years"
PLACEHOLDER_LOCATION = "Location"
PLACEHOLDER_PROJECT_TITLE = "Project Title"
PLACEHOLDER_PROJECT_DESCRIPTION = "Project description"
PLACEHOLDER_CONTRIBUTION = "Key contributions"
PLACEHOLDER_TECH_STACK = "Technologies used"

MAX_EXPERIENCE = 10
MAX_EDUCATION = 5
MAX_PROJECTS = 5
MAX_ACHIEVEMENTS = 10
MAX_CERTIFICATIONS = 5


def _dedupe(values: list[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        clean = value.strip()
        if not clean or clean.casefold() in seen:
            continue
        seen.add(clean.casefold())
        result.append(clean)
    return result


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Contact(_CamelModel):
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    portfolio: str = ""
    github: str = ""


class Experience(_CamelModel):
    title: str = PLACEHOLDER_TITLE
    company: str = PLACEHOLDER_COMPANY
    start_date: str = PLACEHOLDER_START
    end_date: str = PLACEHOLDER_END
    bullets: list[str] = Field(default_factory=list)


class Education(_CamelModel):
    degree: str = PLACEHOLDER_DEGREE
    university: str = PLACEHOLDER_UNIVERSITY
    years: str = PLACEHOLDER_YEARS
    location: str = PLACEHOLDER_LOCATION


class SkillSet(_CamelModel):
    programming: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    databases: list[str] = Field(default_factory=list)
    cloud: list[str] = Field(default_factory=list)
    others: list[str] = Field(default_factory=list)

    @field_validator("programming", "tools", "databases", "cloud", "others")
    @classmethod
    def _drop_duplicates(cls, value: list[str]) -> list[str]:
        return _dedupe(value)

    def all_skills(self) -> list[str]:
        return [*self.programming, *self.tools, *self.databases, *self.cloud, *self.others]


class Project(_CamelModel):
    title: str = PLACEHOLDER_PROJECT_TITLE
    description: str = PLACEHOLDER_PROJECT_DESCRIPTION
    contribution: str = PLACEHOLDER_CONTRIBUTION
    tech_stack: str = PLACEHOLDER_TECH_STACK


class Resume(_CamelModel):
    name: str = PLACEHOLDER_NAME
    contact: Contact = Field(default_factory=Contact)
    summary: str = PLACEHOLDER_SUMMARY
    experience: list[Experience] = Field(default_factory=list)
    education: list[Education] = Field(default_factory=list)
    skills: SkillSet = Field(default_factory=SkillSet)
    achievements: list[str] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)

    @field_validator("experience")
    @classmethod
    def _cap_experience(cls, value: list[Experience]) -> list[Experience]:
        return value[:MAX_EXPERIENCE]

    @field_validator("education")
    @classmethod
    def _cap_education(cls, value: list[Education]) -> list[Education]:
        return value[:MAX_EDUCATION]

    @field_validator("projects")
    @classmethod
    def _cap_projects(cls, value: list[Project]) -> list[Project]:
        return value[:MAX_PROJECTS]

    @field_validator("achievements")
    @classmethod
    def _cap_achievements(cls, value: list[str]) -> list[str]:
        return value[:MAX_ACHIEVEMENTS]

    @field_validator("certifications")
    @classmethod
    def _cap_certifications(cls, value: list[str]) -> list[str]:
        return value[:MAX_CERTIFICATIONS]
