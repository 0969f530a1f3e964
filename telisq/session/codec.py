"""Conversion of session states and orchestrator events to and from storage form."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from telisq.events import (
    AgentMessage,
    OrchestratorEvent,
    PlanCompleted,
    PlanMarkerUpdated,
    SessionStopped,
    StepCompleted,
    StepFailed,
    StepStarted,
    TaskRetry,
)
from telisq.models import SessionState, TaskStatus

log = logging.getLogger(__name__)

_EVENT_TYPES: dict[type, str] = {
    StepStarted: "step_started",
    StepCompleted: "step_completed",
    StepFailed: "step_failed",
    AgentMessage: "agent_message",
    PlanCompleted: "plan_completed",
    PlanMarkerUpdated: "plan_marker_updated",
    SessionStopped: "session_stopped",
    TaskRetry: "task_retry",
}

_STATUS_NAMES: dict[TaskStatus, str] = {
    TaskStatus.PENDING: "Pending",
    TaskStatus.IN_PROGRESS: "InProgress",
    TaskStatus.COMPLETED: "Completed",
    TaskStatus.FAILED: "Failed",
    TaskStatus.SKIPPED: "Skipped",
}
_STATUS_BY_NAME = {name: status for status, name in _STATUS_NAMES.items()}

_PAYLOAD_FIELDS = (
    "event_type",
    "task_id",
    "message",
    "error",
    "marker_status",
    "session_id",
    "retry_attempt",
)


def session_state_to_str(state: SessionState) -> str:
    """Return the stored name of a session state."""
    return SessionState(state).value


def str_to_session_state(value: str) -> SessionState:
    """Parse a stored session state; unknown names fall back to running."""
    try:
        return SessionState(value)
    except ValueError:
        log.warning("Unknown session status %r, defaulting to running", value)
        return SessionState.RUNNING


def event_type(event: OrchestratorEvent) -> str:
    """Return the stored type name of an event."""
    try:
        return _EVENT_TYPES[type(event)]
    except KeyError:
        raise TypeError(f"not an orchestrator event: {event!r}") from None


def serialize_event(event: OrchestratorEvent) -> dict[str, Any]:
    """Turn an event into a flat, JSON-ready record."""
    record: dict[str, Any] = dict.fromkeys(_PAYLOAD_FIELDS)
    record["event_type"] = event_type(event)
    if isinstance(event, (StepStarted, StepCompleted)):
        record["task_id"] = event.task_id
    elif isinstance(event, StepFailed):
        record["task_id"] = event.task_id
        record["error"] = event.error
    elif isinstance(event, AgentMessage):
        record["message"] = event.message
    elif isinstance(event, PlanMarkerUpdated):
        record["task_id"] = event.task_id
        record["marker_status"] = _STATUS_NAMES[TaskStatus(event.status)]
    elif isinstance(event, SessionStopped):
        record["session_id"] = str(event.session_id)
    elif isinstance(event, TaskRetry):
        record["task_id"] = event.task_id
        record["error"] = event.error
        record["retry_attempt"] = event.attempt
    return record


def _optional_str(record: dict[str, Any], key: str) -> str | None:
    value = record.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _parse_payload(payload: str) -> dict[str, Any]:
    record = json.loads(payload)
    if not isinstance(record, dict):
        raise ValueError("event payload must be an object")
    if not isinstance(record.get("event_type"), str):
        raise ValueError("event payload has no `event_type` string")
    for key in ("task_id", "message", "error", "marker_status", "session_id"):
        _optional_str(record, key)
    attempt = record.get("retry_attempt")
    if attempt is not None and (
        isinstance(attempt, bool) or not isinstance(attempt, int) or attempt < 0
    ):
        raise ValueError("field `retry_attempt` must be a non-negative integer")
    return record


def _parse_session_id(value: str | None) -> uuid.UUID:
    if value is not None:
        try:
            return uuid.UUID(value)
        except ValueError:
            pass
    return uuid.UUID(int=0)


def deserialize_event(event_type: str, payload: str) -> OrchestratorEvent:
    """Rebuild an event from its stored type and JSON payload.

    Raises ValueError when the payload is not a valid event record.
    """
    record = _parse_payload(payload)
    task_id = record.get("task_id") or ""

    if event_type == "step_started":
        return StepStarted(task_id)
    if event_type == "step_completed":
        return StepCompleted(task_id)
    if event_type == "step_failed":
        error = record.get("error")
        return StepFailed(task_id, "Unknown error" if error is None else error)
    if event_type == "agent_message":
        return AgentMessage(record.get("message") or "")
    if event_type == "plan_completed":
        return PlanCompleted()
    if event_type == "plan_marker_updated":
        status = _STATUS_BY_NAME.get(record.get("marker_status"), TaskStatus.PENDING)
        return PlanMarkerUpdated(task_id, status)
    if event_type == "session_stopped":
        return SessionStopped(_parse_session_id(record.get("session_id")))
    if event_type == "task_retry":
        attempt = record.get("retry_attempt")
        return TaskRetry(task_id, 1 if attempt is None else attempt, record.get("error") or "")

    log.warning("Unknown event type %r during deserialization", event_type)
    return AgentMessage(f"Unknown event: {event_type}")