from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.normalized import Resume


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransformResponse(_CamelModel):
    resume: str
    processing_time: int = Field(ge=0)
    strategy: str


class TransformErrorResponse(_CamelModel):
    error: str
    fallback: bool | None = None


class StructuredTransformRequest(_CamelModel):
    resume: Resume
    job_description: str = Field(default="", max_length=50000)


class StructuredTransformResponse(_CamelModel):
    resume: str
    job_title: str = ""


class AnalyzeJobRequest(_CamelModel):
    job_description: str = Field(default="", max_length=50000)


class ParseResumeResponse(_CamelModel):
    text: str
    resume: Resume
    warnings: list[str] = Field(default_factory=list)


class RenderPdfRequest(_CamelModel):
    text: str = Field(default="", max_length=200000)
