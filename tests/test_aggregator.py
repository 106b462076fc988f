"""Tests for entity counting and batch statistics."""

from collections import Counter

from textrazor_fastapi.app.models import EntityCount, LineResult
from textrazor_fastapi.app.services.aggregator import aggregate, primary_type, summarize


def test_counts_in_first_seen_order(make_entity) -> None:
    line_results = [
        LineResult(
            text="George Bush was president of USA.",
            entities=[make_entity("George Bush", "Person"), make_entity("USA", "Country")],
        ),
        LineResult(
            text="Obama visited France and Germany.",
            entities=[
                make_entity("Obama", "Person"),
                make_entity("France", "Country"),
                make_entity("Germany", "Country"),
            ],
        ),
    ]

    assert aggregate(line_results) == [
        EntityCount(type="Person", count=2),
        EntityCount(type="Country", count=3),
    ]


def test_empty_types_count_as_unknown(make_entity) -> None:
    entity = make_entity("Something")
    line_results = [LineResult(text="Something happened", entities=[entity])]

    assert primary_type(entity) == "Unknown"
    assert aggregate(line_results) == [EntityCount(type="Unknown", count=1)]


def test_absent_type_counts_as_unknown(make_entity) -> None:
    entity = make_entity("Something", type=None)

    assert aggregate([LineResult(text="x", entities=[entity])]) == [
        EntityCount(type="Unknown", count=1)
    ]


def test_only_primary_type_is_counted(make_entity) -> None:
    line_results = [
        LineResult(text="Paris", entities=[make_entity("Paris", "Place", "City")])
    ]

    assert aggregate(line_results) == [EntityCount(type="Place", count=1)]


def test_count_total_matches_entity_total(make_entity) -> None:
    line_results = [
        LineResult(text="a", entities=[make_entity("a", "A"), make_entity("b")]),
        LineResult(text="b", entities=[]),
        LineResult(text="c", entities=[make_entity("c", "A"), make_entity("d", "D")]),
    ]

    counts = aggregate(line_results)

    assert sum(item.count for item in counts) == sum(
        len(line_result.entities) for line_result in line_results
    )


def test_order_independent_on_entity_multiset(make_entity) -> None:
    line_results = [
        LineResult(text="one", entities=[make_entity("x", "Person")]),
        LineResult(text="two", entities=[make_entity("y", "Country")]),
        LineResult(text="three", entities=[make_entity("z", "Person")]),
    ]

    forward = aggregate(line_results)
    backward = aggregate(list(reversed(line_results)))

    assert Counter((c.type, c.count) for c in forward) == Counter(
        (c.type, c.count) for c in backward
    )


def test_summarize_picks_most_frequent_type() -> None:
    counts = [
        EntityCount(type="Person", count=1),
        EntityCount(type="Country", count=3),
        EntityCount(type="Organization", count=2),
    ]

    summary = summarize(counts, total_lines=4)

    assert summary.total_lines == 4
    assert summary.total_entities == 6
    assert summary.top_type == "Country"


def test_summarize_ties_go_to_first_seen() -> None:
    counts = [
        EntityCount(type="Person", count=2),
        EntityCount(type="Country", count=2),
    ]

    assert summarize(counts, total_lines=1).top_type == "Person"


def test_summarize_does_not_reorder_counts() -> None:
    counts = [
        EntityCount(type="Person", count=1),
        EntityCount(type="Country", count=5),
    ]

    summarize(counts, total_lines=2)

    assert [item.type for item in counts] == ["Person", "Country"]


def test_summarize_empty_counts_uses_placeholder() -> None:
    summary = summarize([], total_lines=0)

    assert summary.top_type == "-"
    assert summary.total_entities == 0
