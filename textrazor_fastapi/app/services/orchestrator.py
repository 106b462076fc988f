"""Line-by-line batch analysis against an annotation provider."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum

from textrazor_fastapi.app.exceptions import AnnotationProviderError
from textrazor_fastapi.app.models import LineResult, Notice, NoticeKind
from textrazor_fastapi.app.prometheus import track_entity, track_line
from textrazor_fastapi.app.services.aggregator import primary_type
from textrazor_fastapi.app.services.provider import AnnotationProvider
from textrazor_fastapi.app.telemetry import trace_method

logger = logging.getLogger(__name__)


class BatchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class BatchOutcome:
    """What a finished (or superseded) batch produced.

    Attributes:
        line_results: Successfully processed lines in submission order.
        notices: Per-line error notices followed by the success notice.
        lines_submitted: Number of lines handed to the batch.
        superseded: True when a newer batch started before this one finished;
            its results are then discarded.
        last_call_failed: Error flag of the most recent provider call.
    """

    line_results: list[LineResult] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)
    lines_submitted: int = 0
    superseded: bool = False
    last_call_failed: bool = False

    @property
    def failed_lines(self) -> int:
        return sum(1 for notice in self.notices if notice.kind is NoticeKind.ERROR)


class LineAnalysisOrchestrator:
    """Annotates the lines of a batch one at a time.

    Each line gets exactly one provider call (retries are the provider's
    business) and the next call starts only after the previous one resolved,
    so results are appended in submission order. A failing line produces an
    error notice and is left out of the results; it never aborts the batch.

    Starting a new batch supersedes the one in flight: the older batch stops
    before its next provider call and its results are discarded.
    """

    def __init__(self, provider: AnnotationProvider) -> None:
        self._provider = provider
        self._generation = 0
        self.state = BatchState.IDLE
        self.line_results: list[LineResult] = []
        self.notices: list[Notice] = []

    @property
    def processing(self) -> bool:
        return self.state is BatchState.RUNNING

    @property
    def is_error(self) -> bool:
        """Whether the provider's most recent call failed."""
        return bool(getattr(self._provider, "last_call_failed", False))

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    @trace_method("analyze_lines")
    async def run(self, lines: Sequence[str]) -> BatchOutcome:
        """Annotate every line of a new batch.

        Args:
            lines: Non-empty, trimmed lines in submission order.

        Returns:
            The batch outcome. Per-line failures are reported as notices.
        """
        self._generation += 1
        generation = self._generation
        results: list[LineResult] = []
        notices: list[Notice] = []
        self.line_results = results
        self.notices = notices
        self.state = BatchState.RUNNING

        logger.info("Starting batch %d with %d lines", generation, len(lines))

        for line in lines:
            if not self._is_current(generation):
                break
            try:
                annotation = await self._provider.annotate(line)
            except Exception as e:
                if not self._is_current(generation):
                    break
                self._record_failure(notices, line, e)
                continue
            if not self._is_current(generation):
                break
            results.append(LineResult(text=line, entities=annotation.entities))
            track_line("success")
            for entity in annotation.entities:
                track_entity(primary_type(entity))

        if not self._is_current(generation):
            logger.info("Batch %d superseded, discarding its results", generation)
            return BatchOutcome(
                lines_submitted=len(lines),
                superseded=True,
                last_call_failed=self.is_error,
            )

        if results:
            notices.append(
                Notice(
                    kind=NoticeKind.SUCCESS,
                    message=f"Successfully processed {len(results)} lines!",
                )
            )
        self.state = BatchState.COMPLETED
        logger.info(
            "Batch %d completed: %d processed, %d failed",
            generation,
            len(results),
            len(lines) - len(results),
        )
        return BatchOutcome(
            line_results=list(results),
            notices=list(notices),
            lines_submitted=len(lines),
            last_call_failed=self.is_error,
        )

    @staticmethod
    def _record_failure(notices: list[Notice], line: str, error: Exception) -> None:
        if isinstance(error, AnnotationProviderError):
            reason, status_code = error.message, error.status_code
            logger.warning("Error processing line %r: %s", line, reason)
        else:
            reason, status_code = "Unexpected error", 500
            logger.exception("Unexpected error processing line %r", line)
        track_line("failure")
        notices.append(
            Notice(
                kind=NoticeKind.ERROR,
                message=f'Error processing line: "{line}"',
                line=line,
                reason=reason,
                status_code=status_code,
            )
        )
