"""Entity type counts and batch statistics."""

from collections.abc import Iterable, Sequence

from textrazor_fastapi.app.models import BatchSummary, Entity, EntityCount, LineResult

UNKNOWN_TYPE = "Unknown"
NO_TOP_TYPE = "-"


def primary_type(entity: Entity) -> str:
    """Return the first type label of an entity, or "Unknown" when it has none."""
    return entity.types[0] if entity.types else UNKNOWN_TYPE


def aggregate(line_results: Iterable[LineResult]) -> list[EntityCount]:
    """Count entities per primary type across a batch.

    Args:
        line_results: The successfully processed lines of a batch.

    Returns:
        One EntityCount per distinct primary type, in the order each type was
        first seen. This is the order charts render in.
    """
    counts: dict[str, int] = {}
    for line_result in line_results:
        for entity in line_result.entities:
            key = primary_type(entity)
            counts[key] = counts.get(key, 0) + 1
    return [EntityCount(type=key, count=count) for key, count in counts.items()]


def summarize(entity_counts: Sequence[EntityCount], total_lines: int) -> BatchSummary:
    """Derive batch statistics from entity counts.

    The most frequent type is taken from a sorted copy, so ``entity_counts``
    keeps its first-seen order. Ties go to the type seen first.

    Args:
        entity_counts: Output of :func:`aggregate`.
        total_lines: Number of successfully processed lines.

    Returns:
        The summary; ``top_type`` is "-" when there are no counts.
    """
    ranked = sorted(entity_counts, key=lambda item: item.count, reverse=True)
    return BatchSummary(
        total_lines=total_lines,
        total_entities=sum(item.count for item in entity_counts),
        top_type=ranked[0].type if ranked else NO_TOP_TYPE,
    )
