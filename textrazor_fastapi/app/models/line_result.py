"""Per-line results and the aggregates derived from them."""

from pydantic import BaseModel, Field

from .entity import Entity


class LineResult(BaseModel):
    """One submitted line paired with the entities detected in it."""

    text: str = Field(..., description="The line exactly as submitted")
    entities: list[Entity] = Field(
        default_factory=list, description="Entities in provider order"
    )


class EntityCount(BaseModel):
    type: str = Field(..., description="Primary entity type")
    count: int = Field(..., ge=1, description="Entities of this type in the batch")


class BatchSummary(BaseModel):
    total_lines: int = Field(..., ge=0, description="Successfully processed lines")
    total_entities: int = Field(..., ge=0, description="Entities across all lines")
    top_type: str = Field(..., description="Most frequent primary type")
