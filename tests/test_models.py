import uuid
from pathlib import Path

import pytest

from telisq.models import Session, SessionState, TaskStatus


def test_create_sets_name_and_path():
    session = Session.create("test-session", "/tmp/test-plan.md")
    assert session.name == "test-session"
    assert session.plan_path == Path("/tmp/test-plan.md")


def test_create_starts_running():
    session = Session.create("test-session", "/tmp/test-plan.md")
    assert session.state is SessionState.RUNNING


def test_create_generates_unique_ids():
    first = Session.create("a", "/tmp/a.md")
    second = Session.create("a", "/tmp/a.md")
    assert isinstance(first.id, uuid.UUID)
    assert first.id != second.id


def test_plan_path_coerced_to_path():
    session = Session(name="s", plan_path="/tmp/project1/plan.md")
    assert session.plan_path.parent == Path("/tmp/project1")


def test_explicit_fields_preserved():
    session_id = uuid.uuid4()
    session = Session(
        name="s", plan_path=Path("p.md"), id=session_id, state=SessionState.PAUSED
    )
    assert session.id == session_id
    assert session.state is SessionState.PAUSED


@pytest.mark.parametrize(
    "value, state",
    [
        ("running", SessionState.RUNNING),
        ("paused", SessionState.PAUSED),
        ("completed", SessionState.COMPLETED),
        ("canceled", SessionState.CANCELED),
    ],
)
def test_session_state_values(value, state):
    assert SessionState(value) is state


@pytest.mark.parametrize(
    "value, status",
    [
        ("completed", TaskStatus.COMPLETED),
        ("failed", TaskStatus.FAILED),
        ("skipped", TaskStatus.SKIPPED),
        ("in_progress", TaskStatus.IN_PROGRESS),
    ],
)
def test_task_status_values(value, status):
    assert TaskStatus(value) is status


def test_unknown_task_status_rejected():
    with pytest.raises(ValueError):
        TaskStatus("bogus")