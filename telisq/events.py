"""Notifications published by the orchestration loop."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Union

from telisq.models import TaskStatus


@dataclass(frozen=True)
class StepStarted:
    """Work on a task has begun."""

    task_id: str


@dataclass(frozen=True)
class StepCompleted:
    """Work on a task finished without error."""

    task_id: str


@dataclass(frozen=True)
class StepFailed:
    """Work on a task ended with an error."""

    task_id: str
    error: str


@dataclass(frozen=True)
class AgentMessage:
    """Free-form text produced by an agent."""

    message: str


@dataclass(frozen=True)
class PlanCompleted:
    """Every task of the plan is finished."""


@dataclass(frozen=True)
class PlanMarkerUpdated:
    """The status marker of a task was rewritten."""

    task_id: str
    status: TaskStatus


@dataclass(frozen=True)
class SessionStopped:
    """The session was halted."""

    session_id: uuid.UUID


@dataclass(frozen=True)
class TaskRetry:
    """Another attempt at a task is about to run."""

    task_id: str
    attempt: int
    error: str


OrchestratorEvent = Union[
    StepStarted,
    StepCompleted,
    StepFailed,
    AgentMessage,
    PlanCompleted,
    PlanMarkerUpdated,
    SessionStopped,
    TaskRetry,
]