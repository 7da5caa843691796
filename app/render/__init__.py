from .layout import LineContext, LineKind, Pending, classify, classify_document
from .pdf import RenderError, RenderResult, ResumePdfRenderer, render_pdf

__all__ = [
    "LineContext",
    "LineKind",
    "Pending",
    "RenderError",
    "RenderResult",
    "ResumePdfRenderer",
    "classify",
    "classify_document",
    "render_pdf",
]
