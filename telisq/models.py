"""Core data types shared by sessions, events and the store."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TaskStatus(Enum):
    """Lifecycle state of a single plan task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class SessionState(Enum):
    """Lifecycle state of a planning session."""

    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELED = "canceled"


@dataclass
class Session:
    """A named execution session bound to a plan file."""

    name: str
    plan_path: Path
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    state: SessionState = SessionState.RUNNING

    def __post_init__(self) -> None:
        self.plan_path = Path(self.plan_path)

    @classmethod
    def create(cls, name: str, plan_path: str | Path) -> "Session":
        """Create a new running session with a fresh identifier."""
        return cls(name=name, plan_path=Path(plan_path))