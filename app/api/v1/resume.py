import asyncio
import logging

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.normalize.normalize_jd import analyze_job_description
from app.normalize.normalize_resume import parse_resume
from app.parsing.parse import parse_upload
from app.render import RenderError, render_pdf
from app.schemas.normalized import KeywordProfile
from app.schemas.resume_api import (
    AnalyzeJobRequest,
    ParseResumeResponse,
    RenderPdfRequest,
    StructuredTransformRequest,
    StructuredTransformResponse,
    TransformErrorResponse,
    TransformResponse,
)
from app.services.transform_service import (
    TransformInputError,
    transform_resume_text,
    transform_structured_resume,
)

logger = logging.getLogger(__name__)

router = APIRouter()

GENERIC_TRANSFORM_ERROR = (
    "We encountered an issue processing your resume. "
    "Please try again or contact support if the problem persists."
)
PDF_FILENAME = "resume-ats-optimized.pdf"


def _error_body(message: str, *, fallback: bool | None = None) -> dict:
    return TransformErrorResponse(error=message, fallback=fallback).model_dump(by_alias=True, exclude_none=True)


def _form_text(value) -> str | None:
    return value if isinstance(value, str) else None


@router.post("/resume/transform", summary="Tailor a resume to a job description")
@rate_limit()
async def transform_resume(request: Request):
    # Always HTTP 200: errors are reported in the body.
    try:
        form = await request.form()
    except Exception as exc:  # noqa: BLE001 - malformed bodies are a client error
        logger.info("resume_transform_bad_form: %s", type(exc).__name__)
        return _error_body("Invalid request format. Please try again.")

    try:
        result = await transform_resume_text(
            _form_text(form.get("resumeText")),
            _form_text(form.get("jobDescription")),
        )
    except TransformInputError as exc:
        return _error_body(str(exc))
    except Exception:  # noqa: BLE001 - the endpoint never answers with a 500
        logger.error("resume_transform_failed", exc_info=True)
        return _error_body(GENERIC_TRANSFORM_ERROR, fallback=True)

    return TransformResponse(
        resume=result.document,
        processing_time=result.processing_ms,
        strategy=result.strategy,
    ).model_dump(by_alias=True)


@router.post("/resume/transform-structured", summary="Tailor a structured resume record")
@rate_limit()
async def transform_structured(request: Request, payload: StructuredTransformRequest):
    _ = request
    try:
        result = transform_structured_resume(payload.resume, payload.job_description)
    except TransformInputError as exc:
        return _error_body(str(exc))
    except Exception:  # noqa: BLE001 - the endpoint never answers with a 500
        logger.error("resume_transform_structured_failed", exc_info=True)
        return _error_body(GENERIC_TRANSFORM_ERROR, fallback=True)
    return StructuredTransformResponse(resume=result.document, job_title=result.job_title).model_dump(by_alias=True)


@router.post("/resume/parse", response_model=ParseResumeResponse, summary="Extract and parse an uploaded resume")
@rate_limit()
async def parse_resume_file(request: Request, file: UploadFile = File(...)):
    _ = request
    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Uploaded file is empty.")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
        )
    try:
        parsed = await asyncio.to_thread(parse_upload, file.filename or "", content)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    text = parsed.text[: settings.max_resume_chars]
    warnings = list(parsed.warnings)
    if len(text.strip()) < settings.min_resume_chars:
        warnings.append("Very little text could be extracted; the parsed resume may be incomplete.")
    logger.info(
        "resume_upload_parsed source=%s chars=%s warnings=%s",
        parsed.source_type,
        len(text),
        len(warnings),
    )
    return ParseResumeResponse(text=text, resume=parse_resume(text), warnings=warnings)


@router.post("/resume/analyze-jd", response_model=KeywordProfile, summary="Keyword profile of a job description")
@rate_limit()
async def analyze_jd(request: Request, payload: AnalyzeJobRequest):
    _ = request
    text = payload.job_description.strip()
    if len(text) < settings.min_jd_chars:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Job description is too short. Minimum {settings.min_jd_chars} characters required.",
        )
    return analyze_job_description(text)


@router.post("/resume/pdf", summary="Render the resume text document as a PDF")
@rate_limit()
async def resume_pdf(request: Request, payload: RenderPdfRequest):
    _ = request
    if not payload.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resume text is required.")
    try:
        result = await asyncio.to_thread(
            render_pdf,
            payload.text,
            overflow_policy=settings.pdf_overflow_policy,
            max_chars=settings.max_render_chars,
        )
    except RenderError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate PDF. Please try again.",
        ) from exc

    return Response(
        content=result.pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{PDF_FILENAME}"',
            "X-Resume-Pages": str(result.pages),
            "X-Content-Truncated": "true" if (result.content_truncated or result.truncated) else "false",
        },
    )
