"""Response models for annotating a single text."""

from pydantic import BaseModel, Field, field_validator

from .entity import Entity


class AnnotationResult(BaseModel):
    """Entities returned by the annotation provider for one text."""

    entities: list[Entity] = Field(
        default_factory=list, description="Detected entities in provider order"
    )

    @field_validator("entities", mode="before")
    @classmethod
    def _none_as_empty(cls, value: list | None) -> list:
        return [] if value is None else value


class TextRazorResponse(BaseModel):
    """Payload of the analyze endpoint, shaped like the upstream's answer."""

    response: AnnotationResult = Field(
        default_factory=AnnotationResult, description="Annotation result"
    )
