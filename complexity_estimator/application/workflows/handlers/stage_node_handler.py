"""
Stage node handler implementing common stage execution logic.
Centralizes event emission and error handling for stage nodes.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional

from complexity_estimator.application.agents.state import AnalysisState
from complexity_estimator.domain.models.analysis import AnalysisIssue
from complexity_estimator.shared.exceptions import AnalysisError, ErrorKind

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, str, str, Dict[str, Any]], None]


class StageNodeHandler:
    """
    Handles stage node execution with standardized event emission.
    Provides reusable execution wrapper for all stage nodes,
    centralizing start/completion events and error handling.
    """

    def __init__(self, event_callback: Optional[EventCallback] = None):
        self._event_callback = event_callback

    def execute_stage(
        self,
        stage: str,
        agent_name: str,
        agent_fn: Callable[[AnalysisState], AnalysisState],
        state: AnalysisState,
        payload_builder: Optional[Callable[[AnalysisState], Dict[str, Any]]] = None,
    ) -> AnalysisState:
        """
        Execute a stage agent with event emission and error handling.

        Unexpected exceptions are recorded as issues on the state and the
        stage is marked as failed; they never propagate to the graph.
        """
        self._emit_event(
            stage=stage,
            agent_name=agent_name,
            status="started",
            payload={
                "analysis_id": state.get("analysis_id"),
                "stage": stage,
                "message": f"{agent_name} is processing...",
            },
        )
        started = time.perf_counter()

        try:
            updated_state = agent_fn(state)

            completed_payload: Dict[str, Any] = {
                "analysis_id": state.get("analysis_id"),
                "stage": stage,
                "message": f"{agent_name} completed successfully",
                "duration_ms": (time.perf_counter() - started) * 1000.0,
                "errors": list(updated_state.get("errors", [])),
            }

            if payload_builder:
                try:
                    additional_payload = payload_builder(updated_state)
                    if additional_payload:
                        completed_payload.update(additional_payload)
                except Exception as exc:
                    logger.warning(
                        "%s: payload builder failed: %s",
                        agent_name,
                        exc,
                    )

            self._emit_event(
                stage=stage,
                agent_name=agent_name,
                status="completed",
                payload=completed_payload,
            )
            return updated_state

        except Exception as e:
            logger.error(f"{agent_name} failed: {e}", exc_info=True)

            kind = e.kind if isinstance(e, AnalysisError) else ErrorKind.STAGE_FAILURE
            issues = state.get("issues", [])
            issues.append(
                AnalysisIssue(
                    kind=kind,
                    stage=stage,
                    message=f"{agent_name} execution failed: {str(e)}",
                )
            )
            state["issues"] = issues

            errors = state.get("errors", [])
            errors.append(f"{agent_name} execution failed: {str(e)}")
            state["errors"] = errors
            state["failed_stage"] = stage

            self._emit_event(
                stage=stage,
                agent_name=agent_name,
                status="failed",
                payload={
                    "analysis_id": state.get("analysis_id"),
                    "stage": stage,
                    "message": f"{agent_name} failed",
                    "error": str(e),
                },
            )
            return state

    def _emit_event(
        self, stage: str, agent_name: str, status: str, payload: Dict[str, Any]
    ) -> None:
        """
        Emit event through callback if configured.
        """
        if self._event_callback:
            try:
                self._event_callback(stage, agent_name, status, payload)
            except Exception as e:
                logger.warning(f"Event callback failed: {e}")
