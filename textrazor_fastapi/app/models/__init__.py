"""Initialize the models package."""

from .analyze_request import AnalyzeRequest
from .analyze_response import AnnotationResult, TextRazorResponse
from .batch_analyze_request import BatchAnalyzeRequest
from .batch_analyze_response import BatchAnalyzeResponse, HighlightedLine
from .entity import Entity
from .line_result import BatchSummary, EntityCount, LineResult
from .notice import Notice, NoticeKind

__all__ = [
    "AnalyzeRequest",
    "AnnotationResult",
    "BatchAnalyzeRequest",
    "BatchAnalyzeResponse",
    "BatchSummary",
    "Entity",
    "EntityCount",
    "HighlightedLine",
    "LineResult",
    "Notice",
    "NoticeKind",
    "TextRazorResponse",
]
