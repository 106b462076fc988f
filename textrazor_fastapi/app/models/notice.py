"""User-facing messages produced while a batch runs."""

from enum import Enum

from pydantic import BaseModel, Field


class NoticeKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class Notice(BaseModel):
    kind: NoticeKind = Field(..., description="Whether the notice reports success")
    message: str = Field(..., description="Human-readable message")
    line: str | None = Field(default=None, description="The line that failed")
    reason: str | None = Field(default=None, description="Why the line failed")
    status_code: int | None = Field(
        default=None, description="Failure classification (4xx client, 5xx provider)"
    )
