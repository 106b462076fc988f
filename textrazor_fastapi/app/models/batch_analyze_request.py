"""Model for analyzing a multi-line document line by line."""

from pydantic import BaseModel, Field

from textrazor_fastapi.app.config import settings


class BatchAnalyzeRequest(BaseModel):
    text: str = Field(
        ...,
        min_length=1,
        max_length=settings.MAX_TEXT_LENGTH,
        description="Document whose non-empty lines are annotated one by one",
    )
