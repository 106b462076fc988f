"""Response model for line-by-line batch analysis."""

from pydantic import BaseModel, Field

from .entity import Entity
from .line_result import BatchSummary, EntityCount
from .notice import Notice


class HighlightedLine(BaseModel):
    text: str = Field(..., description="The line exactly as submitted")
    html: str = Field(..., description="Escaped line with entity spans marked")
    entities: list[Entity] = Field(..., description="Entities detected in the line")


class BatchAnalyzeResponse(BaseModel):
    lines: list[HighlightedLine] = Field(
        ..., description="Successfully processed lines in submission order"
    )
    entity_counts: list[EntityCount] = Field(
        ..., description="Entity counts per primary type, in first-seen order"
    )
    summary: BatchSummary = Field(..., description="Batch statistics")
    notices: list[Notice] = Field(..., description="Success and per-line error notices")
    lines_submitted: int = Field(..., ge=0, description="Non-empty lines submitted")
    failed_lines: int = Field(..., ge=0, description="Lines whose annotation failed")
    is_error: bool = Field(
        ..., description="Whether the most recent provider call failed"
    )
