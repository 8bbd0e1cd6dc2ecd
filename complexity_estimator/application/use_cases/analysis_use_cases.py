"""Use case running one complexity analysis end to end."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from complexity_estimator.application.options import AnalysisOptions
from complexity_estimator.application.workflows.analysis_workflow import AnalysisWorkflow
from complexity_estimator.application.workflows.handlers import EventCallback
from complexity_estimator.domain.models.analysis import (
    AnalysisIssue,
    AnalysisMetadata,
    AnalysisReport,
    AnalysisStatus,
    FinalVerdict,
)
from complexity_estimator.domain.services.sampling import CostModel
from complexity_estimator.shared.exceptions import ErrorKind

logger = logging.getLogger(__name__)

CancelSignal = Union[threading.Event, Callable[[], bool]]


class AnalysisUseCases:
    """Entry point shared by the library API and the CLI."""

    def analyze(
        self,
        source: str,
        options: Optional[Union[AnalysisOptions, Dict[str, Any]]] = None,
        *,
        cancel_event: Optional[CancelSignal] = None,
        event_callback: Optional[EventCallback] = None,
        cost_model: Optional[CostModel] = None,
    ) -> AnalysisReport:
        """
        Analyze one source snippet.

        Args:
            source: Source code text
            options: AnalysisOptions or a mapping of option values
            cancel_event: Event (or predicate) checked between stages
            event_callback: Receives ``(stage, agent, status, payload)`` events
            cost_model: Cost model overriding ``options.cost_model``

        Returns:
            AnalysisReport; failures are reported as issues, never raised
        """
        started = time.perf_counter()
        source = source or ""
        metadata = AnalysisMetadata(
            analysis_id=str(uuid.uuid4()),
            code_length=len(source),
            lines_of_code=sum(1 for line in source.splitlines() if line.strip()),
        )

        try:
            resolved = self._resolve_options(options)
        except ValidationError as e:
            message = f"Invalid options: {e.errors()[0]['msg']}" if e.errors() else str(e)
            logger.warning(message)
            return self._failed(metadata, started, ErrorKind.INVALID_OPTIONS, message)

        try:
            workflow = AnalysisWorkflow(event_callback=event_callback)
            state = workflow.run(
                source,
                resolved,
                analysis_id=metadata.analysis_id,
                cost_model=cost_model,
                cancel_requested=self._cancel_predicate(cancel_event),
            )
        except Exception as e:
            logger.error(f"Workflow execution failed: {e}", exc_info=True)
            return self._failed(
                metadata,
                started,
                ErrorKind.STAGE_FAILURE,
                f"Workflow execution failed: {str(e)}",
                status=AnalysisStatus.COMPLETED,
            )

        status = AnalysisStatus(state.get("status", AnalysisStatus.COMPLETED.value))
        issues = list(state.get("issues", []))
        metadata.processing_time_ms = (time.perf_counter() - started) * 1000.0

        if status is AnalysisStatus.REJECTED:
            reason = issues[0].message if issues else "Input rejected"
            return AnalysisReport(
                status=status,
                verdict=FinalVerdict.unknown(reason),
                metadata=metadata,
                issues=issues,
            )

        verdict = state.get("verdict")
        if verdict is None:
            reason = (
                "Analysis cancelled before a verdict was reached"
                if status is AnalysisStatus.CANCELLED
                else "No verdict produced"
            )
            structural = state.get("structural")
            verdict = FinalVerdict.unknown(
                reason,
                structural_confidence=structural.confidence if structural else 0.0,
            )

        parse_result = state.get("parse_result")
        return AnalysisReport(
            status=status,
            verdict=verdict,
            metadata=metadata,
            structural=state.get("structural"),
            sampling=state.get("sampling"),
            regression=state.get("regression"),
            complexity_change=state.get("complexity_change"),
            tree=parse_result.tree if parse_result is not None else None,
            issues=issues,
        )

    @staticmethod
    def _resolve_options(
        options: Optional[Union[AnalysisOptions, Dict[str, Any]]]
    ) -> AnalysisOptions:
        if options is None:
            return AnalysisOptions()
        if isinstance(options, AnalysisOptions):
            return options
        return AnalysisOptions.model_validate(options)

    @staticmethod
    def _cancel_predicate(
        cancel_event: Optional[CancelSignal],
    ) -> Optional[Callable[[], bool]]:
        if cancel_event is None:
            return None
        if isinstance(cancel_event, threading.Event):
            return cancel_event.is_set
        return cancel_event

    @staticmethod
    def _failed(
        metadata: AnalysisMetadata,
        started: float,
        kind: ErrorKind,
        message: str,
        status: AnalysisStatus = AnalysisStatus.REJECTED,
    ) -> AnalysisReport:
        metadata.processing_time_ms = (time.perf_counter() - started) * 1000.0
        return AnalysisReport(
            status=status,
            verdict=FinalVerdict.unknown(message),
            metadata=metadata,
            issues=[AnalysisIssue(kind=kind, stage="initialization", message=message)],
        )


def analyze(
    source: str,
    options: Optional[Union[AnalysisOptions, Dict[str, Any]]] = None,
    *,
    cancel_event: Optional[CancelSignal] = None,
    event_callback: Optional[EventCallback] = None,
    cost_model: Optional[CostModel] = None,
) -> AnalysisReport:
    """Module-level convenience wrapper around :meth:`AnalysisUseCases.analyze`."""

    return AnalysisUseCases().analyze(
        source,
        options,
        cancel_event=cancel_event,
        event_callback=event_callback,
        cost_model=cost_model,
    )
