from __future__ import annotations

from pydantic import BaseModel, Field, computed_field, field_validator

from .file_security import SUPPORTED_EXTENSIONS


class UploadBlock(BaseModel):
    """One extracted unit: a PDF page or a DOCX paragraph."""

    page: int | None = None
    text: str


class ResumeUpload(BaseModel):
    doc_id: str
    filename: str = ""
    source_type: str
    text: str
    blocks: list[UploadBlock] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @field_validator("source_type")
    @classmethod
    def _known_source_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in SUPPORTED_EXTENSIONS:
            raise ValueError(f"source_type must be one of: {', '.join(SUPPORTED_EXTENSIONS)}")
        return normalized

    @computed_field
    @property
    def char_count(self) -> int:
        return len(self.text)
