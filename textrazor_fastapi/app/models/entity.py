"""Model representing an entity detected by TextRazor."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Entity(BaseModel):
    """A named mention returned by the annotation provider.

    Field names follow the provider's camelCase payload; unknown provider
    fields are ignored. Instances are frozen: the pipeline only re-maps them
    for display.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    entity_id: str = Field(..., alias="entityId", description="Provider identifier")
    types: list[str] = Field(
        default_factory=list,
        alias="type",
        description="Category labels, the first one is the primary type",
    )
    confidence_score: float = Field(
        ..., alias="confidenceScore", ge=0.0, description="Provider relevance score"
    )
    matched_text: str = Field(
        ..., alias="matchedText", description="Substring of the line that matched"
    )
    dbpedia_types: list[str] | None = Field(
        default=None, alias="dbpediaTypes", description="Advisory DBpedia labels"
    )

    @field_validator("types", mode="before")
    @classmethod
    def _none_as_empty(cls, value: list[str] | None) -> list[str]:
        return [] if value is None else value
