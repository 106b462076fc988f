"""Request model for annotating a single text."""

from pydantic import BaseModel, Field

from textrazor_fastapi.app.config import settings


class AnalyzeRequest(BaseModel):
    text: str = Field(
        ...,
        description="The text to annotate",
        min_length=1,
        max_length=settings.MAX_TEXT_LENGTH,
    )
