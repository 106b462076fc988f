"""Annotation, aggregation and provider services."""
