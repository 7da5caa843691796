from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()

def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    max_resume_chars: int
    max_jd_chars: int
    min_resume_chars: int
    min_jd_chars: int
    max_resume_lines: int
    max_upload_bytes: int
    max_render_chars: int
    pdf_overflow_policy: str
    llm_enabled: bool
    hf_token: str | None
    llm_base_url: str
    llm_model: str
    llm_timeout_s: float
    llm_max_retries: int
    llm_temperature: float
    llm_max_tokens: int


settings = Settings(
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX", r"^https:\/\/[a-z0-9-]+-.*\.vercel\.app$"),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", False),
    max_resume_chars=_get_env_int("MAX_RESUME_CHARS", 50_000),
    max_jd_chars=_get_env_int("MAX_JD_CHARS", 20_000),
    min_resume_chars=_get_env_int("MIN_RESUME_CHARS", 50),
    min_jd_chars=_get_env_int("MIN_JD_CHARS", 20),
    max_resume_lines=_get_env_int("MAX_RESUME_LINES", 1000),
    max_upload_bytes=_get_env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024),
    max_render_chars=_get_env_int("MAX_RENDER_CHARS", 50_000),
    pdf_overflow_policy=(_get_env("PDF_OVERFLOW_POLICY", "new_page") or "new_page").strip().lower(),
    llm_enabled=_get_env_bool("LLM_ENABLED", True),
    hf_token=_get_env("HF_TOKEN"),
    llm_base_url=_get_env("LLM_BASE_URL", "https://router.huggingface.co/v1") or "https://router.huggingface.co/v1",
    llm_model=_get_env("LLM_MODEL", "moonshotai/Kimi-K2-Instruct-0905") or "moonshotai/Kimi-K2-Instruct-0905",
    llm_timeout_s=_get_env_float("LLM_TIMEOUT_S", 25.0),
    llm_max_retries=_get_env_int("LLM_MAX_RETRIES", 2),
    llm_temperature=_get_env_float("LLM_TEMPERATURE", 0.3),
    llm_max_tokens=_get_env_int("LLM_MAX_TOKENS", 3000),
)

if settings.pdf_overflow_policy not in {"new_page", "truncate"}:
    raise RuntimeError("PDF_OVERFLOW_POLICY must be either 'new_page' or 'truncate'.")

if settings.min_resume_chars >= settings.max_resume_chars:
    raise RuntimeError("MIN_RESUME_CHARS must be smaller than MAX_RESUME_CHARS.")

if settings.min_jd_chars >= settings.max_jd_chars:
    raise RuntimeError("MIN_JD_CHARS must be smaller than MAX_JD_CHARS.")
