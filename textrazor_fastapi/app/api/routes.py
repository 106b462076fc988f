"""Routes module for the TextRazor FastAPI API."""

import logging
from typing import Dict

from fastapi import APIRouter, HTTPException, Request, status

from textrazor_fastapi.app.exceptions import AnnotationProviderError
from textrazor_fastapi.app.models import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    HighlightedLine,
    TextRazorResponse,
)
from textrazor_fastapi.app.services.aggregator import aggregate, summarize
from textrazor_fastapi.app.services.annotator import entity_highlights, highlight_entities
from textrazor_fastapi.app.services.lines import split_lines
from textrazor_fastapi.app.services.orchestrator import LineAnalysisOrchestrator
from textrazor_fastapi.app.services.provider import AnnotationProvider
from textrazor_fastapi.app.telemetry import trace_method

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API status",
    status_code=status.HTTP_200_OK,
    tags=["Monitoring"],
)
@trace_method("root")
async def root() -> Dict[str, str]:
    """Root API endpoint.

    Returns:
        A simple status message confirming the API is running.
    """
    return {"status": "ok"}


@router.post(
    "/analyze",
    response_model=TextRazorResponse,
    summary="Detect entities in a text",
    response_description="Entities detected by TextRazor",
    status_code=status.HTTP_200_OK,
    tags=["Analyzer"],
)
@trace_method("analyze_text")
async def analyze_text(request: AnalyzeRequest, req: Request) -> TextRazorResponse:
    """Forward a text to TextRazor and return the detected entities.

    The TextRazor credential stays on the server; callers only send the text.

    Args:
        request: The request body containing the text to annotate.
        req: FastAPI request object giving access to the provider on app state.

    Returns:
        TextRazorResponse: ``{"response": {"entities": [...]}}`` where each
        entity carries ``entityId``, ``type``, ``confidenceScore``,
        ``matchedText`` and optionally ``dbpediaTypes``.

    Raises:
        HTTPException:
            - 400 (Bad Request): If the provider rejects the text.
            - 500 (Internal Server Error): If the credential is not configured
              or an unexpected error occurs.
            - 502 / 504: If TextRazor fails, is unreachable or times out.
    """
    provider = _get_provider_from_request(req)
    try:
        result = await provider.annotate(request.text)
    except AnnotationProviderError as e:
        logger.error("Annotation failed: %s", e.message)
        raise HTTPException(status_code=e.status_code, detail=e.message) from e
    except Exception as e:
        logger.exception("Unexpected error during analysis")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error occurred",
        ) from e

    logger.info("Found %d entities", len(result.entities))
    return TextRazorResponse(response=result)


@router.post(
    "/analyze/batch",
    response_model=BatchAnalyzeResponse,
    summary="Detect entities line by line in a document",
    response_description="Highlighted lines, entity counts and statistics",
    status_code=status.HTTP_200_OK,
    tags=["Analyzer"],
)
@trace_method("analyze_batch")
async def analyze_batch(
    request: BatchAnalyzeRequest, req: Request
) -> BatchAnalyzeResponse:
    """Annotate each non-empty line of a document and aggregate the results.

    Lines are sent to TextRazor one at a time. A line whose annotation fails
    is reported in ``notices`` and left out of the statistics; it does not
    fail the request.

    Raises:
        HTTPException:
            - 400 (Bad Request): If the document has no non-empty lines.
            - 500 (Internal Server Error): If the credential is not configured.
    """
    lines = split_lines(request.text)
    if not lines:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request: no non-empty lines to analyze",
        )

    orchestrator = LineAnalysisOrchestrator(_get_provider_from_request(req))
    outcome = await orchestrator.run(lines)

    entity_counts = aggregate(outcome.line_results)
    summary = summarize(entity_counts, total_lines=len(outcome.line_results))
    highlighted = [
        HighlightedLine(
            text=line_result.text,
            html=str(
                highlight_entities(
                    line_result.text, entity_highlights(line_result.entities)
                )
            ),
            entities=line_result.entities,
        )
        for line_result in outcome.line_results
    ]

    logger.info(
        "Processed %d of %d lines in batch",
        len(outcome.line_results),
        outcome.lines_submitted,
    )
    return BatchAnalyzeResponse(
        lines=highlighted,
        entity_counts=entity_counts,
        summary=summary,
        notices=outcome.notices,
        lines_submitted=outcome.lines_submitted,
        failed_lines=outcome.failed_lines,
        is_error=outcome.last_call_failed,
    )


def _get_provider_from_request(req: Request) -> AnnotationProvider:
    provider = getattr(req.app.state, "provider", None)
    if not provider:
        logger.error("Annotation provider not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="TEXTRAZOR_API_KEY not set",
        )
    return provider


@router.get(
    "/health",
    summary="Health check endpoint",
    response_description="Service health status",
    status_code=status.HTTP_200_OK,
    tags=["Monitoring"],
)
@trace_method("health_check")
async def health_check() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        A simple status message confirming the service is healthy.
    """
    return {"status": "healthy"}
