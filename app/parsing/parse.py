from __future__ import annotations

import codecs
import hashlib
import logging
from io import BytesIO
from typing import Callable

from docx import Document
from pypdf import PdfReader

from .file_security import upload_extension, validate_upload_signature
from .models import ResumeUpload, UploadBlock

logger = logging.getLogger(__name__)

Extraction = tuple[str, list[UploadBlock], list[str]]


def upload_doc_id(text: str, filename: str) -> str:
    seed = text if text.strip() else filename
    return hashlib.sha256(seed.encode("utf-8", errors="ignore")).hexdigest()[:16]


def _extract_txt(content: bytes) -> Extraction:
    if content.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        try:
            return content.decode("utf-16"), [], []
        except UnicodeDecodeError:
            pass
    try:
        return content.decode("utf-8-sig"), [], []
    except UnicodeDecodeError:
        pass
    try:
        return content.decode("cp1252"), [], ["Text was not UTF-8; decoded as Windows-1252."]
    except UnicodeDecodeError:
        return content.decode("latin-1"), [], ["Text was not UTF-8; decoded as Latin-1."]


def _extract_pdf(content: bytes) -> Extraction:
    blocks: list[UploadBlock] = []
    try:
        reader = PdfReader(BytesIO(content))
        for number, page in enumerate(reader.pages, start=1):
            page_text = (page.extract_text() or "").strip()
            if page_text:
                blocks.append(UploadBlock(page=number, text=page_text))
    except Exception as exc:  # noqa: BLE001 - unreadable PDFs are reported as a warning
        logger.warning("resume_upload_extract_failed type=pdf: %s", type(exc).__name__)
        return "", blocks, ["PDF text extraction failed."]
    warnings = [] if blocks else ["No extractable text found in PDF."]
    return "\n\n".join(block.text for block in blocks), blocks, warnings


def _extract_docx(content: bytes) -> Extraction:
    try:
        document = Document(BytesIO(content))
    except Exception as exc:  # noqa: BLE001 - unreadable DOCX files are reported as a warning
        logger.warning("resume_upload_extract_failed type=docx: %s", type(exc).__name__)
        return "", [], ["DOCX text extraction failed."]
    blocks = [
        UploadBlock(text=paragraph.text.strip())
        for paragraph in document.paragraphs
        if paragraph.text and paragraph.text.strip()
    ]
    warnings = [] if blocks else ["No extractable text found in DOCX."]
    return "\n".join(block.text for block in blocks), blocks, warnings


_EXTRACTORS: dict[str, Callable[[bytes], Extraction]] = {
    "pdf": _extract_pdf,
    "docx": _extract_docx,
    "txt": _extract_txt,
}


def parse_upload(filename: str, content: bytes) -> ResumeUpload:
    """Extract text from an uploaded PDF, DOCX or TXT resume.

    Raises ``ValueError`` when the type is unsupported or the bytes do not
    match the extension. Extraction problems become warnings instead.
    """
    validate_upload_signature(filename=filename, content=content)
    source_type = upload_extension(filename)
    text, blocks, warnings = _EXTRACTORS[source_type](content)
    logger.debug("resume_upload_extracted type=%s blocks=%s chars=%s", source_type, len(blocks), len(text))
    return ResumeUpload(
        doc_id=upload_doc_id(text, filename),
        filename=filename,
        source_type=source_type,
        text=text,
        blocks=blocks,
        warnings=warnings,
    )
