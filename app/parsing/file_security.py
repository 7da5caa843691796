from __future__ import annotations

import codecs
from io import BytesIO
from typing import Callable
from zipfile import BadZipFile, ZipFile

SUPPORTED_EXTENSIONS = ("pdf", "docx", "txt")

PDF_MAGIC = b"%PDF-"
ZIP_MAGICS = (b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08")
TEXT_SAMPLE_BYTES = 4096
MIN_PRINTABLE_RATIO = 0.75


def upload_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def _looks_like_pdf(content: bytes) -> bool:
    return content.startswith(PDF_MAGIC)


def _looks_like_docx(content: bytes) -> bool:
    if not any(content.startswith(prefix) for prefix in ZIP_MAGICS):
        return False
    try:
        with ZipFile(BytesIO(content)) as archive:
            return any(name.startswith("word/") for name in archive.namelist())
    except BadZipFile:
        return False


def _looks_like_text(content: bytes) -> bool:
    sample = content[:TEXT_SAMPLE_BYTES]
    if sample.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return True
    if not sample or b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
        return True
    except UnicodeDecodeError:
        pass
    printable = sum(1 for byte in sample if byte in (9, 10, 13) or 32 <= byte <= 126)
    return printable / len(sample) >= MIN_PRINTABLE_RATIO


_SIGNATURE_CHECKS: dict[str, Callable[[bytes], bool]] = {
    "pdf": _looks_like_pdf,
    "docx": _looks_like_docx,
    "txt": _looks_like_text,
}


def validate_upload_signature(*, filename: str, content: bytes) -> None:
    """Reject uploads whose extension is unsupported or whose bytes do not match it."""
    ext = upload_extension(filename)
    if ext == "doc":
        raise ValueError("Legacy .doc is not supported. Convert to .docx.")
    check = _SIGNATURE_CHECKS.get(ext)
    if check is None:
        raise ValueError(f"Unsupported file type '.{ext}'. Supported types: .pdf, .docx, .txt")
    if not check(content):
        raise ValueError(f"File signature does not match .{ext} content.")
