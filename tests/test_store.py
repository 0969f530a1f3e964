import uuid

import pytest

from telisq.events import (
    AgentMessage,
    PlanMarkerUpdated,
    SessionStopped,
    StepCompleted,
    StepFailed,
    StepStarted,
    TaskRetry,
)
from telisq.models import Session, SessionState, TaskStatus
from telisq.session.store import SessionStore, StoreError


@pytest.fixture
def store(tmp_path):
    with SessionStore(tmp_path / "nested" / "test.db") as opened:
        yield opened


def test_store_initialization_creates_file(tmp_path):
    db_path = tmp_path / "deep" / "dir" / "test.db"
    with SessionStore(db_path) as opened:
        assert opened.load_session(uuid.uuid4()) is None
    assert db_path.exists()


def test_reopening_existing_database_keeps_data(tmp_path):
    db_path = tmp_path / "test.db"
    session = Session.create("test-session", "/tmp/test-plan.md")
    with SessionStore(db_path) as first:
        first.save_session(session)
    with SessionStore(db_path) as second:
        assert second.load_session(session.id) == session


def test_save_and_load_session(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    loaded = store.load_session(session.id)
    assert loaded is not None
    assert loaded.name == session.name
    assert loaded.state == session.state
    assert loaded.id == session.id


def test_load_missing_session(store):
    assert store.load_session(uuid.uuid4()) is None


def test_list_sessions(store):
    store.save_session(Session.create("session-1", "/tmp/project1/plan.md"))
    store.save_session(Session.create("session-2", "/tmp/project1/plan2.md"))
    store.save_session(Session.create("session-3", "/tmp/project2/plan.md"))

    project1 = store.list_sessions("/tmp/project1")
    assert len(project1) == 2
    assert {s.name for s in project1} == {"session-1", "session-2"}

    project2 = store.list_sessions("/tmp/project2")
    assert len(project2) == 1
    assert project2[0].name == "session-3"


def test_update_session_status(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.update_session_status(session.id, "paused")
    loaded = store.load_session(session.id)
    assert loaded.state == SessionState.PAUSED


def test_update_session_status_accepts_state(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.update_session_status(session.id, SessionState.COMPLETED)
    assert store.load_session(session.id).state == SessionState.COMPLETED


def test_save_and_load_events(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.save_event(session.id, StepStarted("task-1"))
    store.save_event(session.id, StepCompleted("task-1"))
    events = store.load_events(session.id)
    assert len(events) == 2
    assert events == [StepStarted("task-1"), StepCompleted("task-1")]


def test_events_round_trip_all_kinds(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    events = [
        StepFailed("task-1", "boom"),
        AgentMessage("hi"),
        PlanMarkerUpdated("task-2", TaskStatus.COMPLETED),
        SessionStopped(session.id),
        TaskRetry("task-1", 2, "boom"),
    ]
    for event in events:
        store.save_event(session.id, event)
    assert store.load_events(session.id) == events
    assert store.load_events(uuid.uuid4()) == []


def test_save_and_load_plan_markers(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.save_plan_marker(session.id, "task-1", "completed")
    store.save_plan_marker(session.id, "task-2", "in_progress")
    markers = store.load_plan_markers(session.id)
    assert len(markers) == 2
    assert markers["task-1"] == "completed"
    assert markers["task-2"] == "in_progress"


def test_plan_marker_updates_in_place(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.save_plan_marker(session.id, "task-1", "completed")
    store.save_plan_marker(session.id, "task-2", "in_progress")
    store.save_plan_marker(session.id, "task-3", "pending")
    store.save_plan_marker(session.id, "task-2", "in_progress")
    markers = store.load_plan_markers(session.id)
    assert markers == {"task-1": "completed", "task-2": "in_progress", "task-3": "pending"}


def test_resume_session_resets_in_progress(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_session(session)
    store.save_plan_marker(session.id, "task-1", "completed")
    store.save_plan_marker(session.id, "task-2", "in_progress")
    store.save_plan_marker(session.id, "task-3", "pending")

    resumed = store.resume_session(session.id)
    assert resumed == session
    assert store.load_plan_markers(session.id) == {
        "task-1": "completed",
        "task-2": "pending",
        "task-3": "pending",
    }


def test_resume_missing_session(store):
    assert store.resume_session(uuid.uuid4()) is None


def test_save_and_load_agent_results(store):
    session = Session.create("test-session", "/tmp/test-plan.md")
    store.save_agent_result(session.id, "code", "task-1", {"ok": True, "files": ["a.py"]})
    store.save_agent_result(session.id, "review", "task-2", [1, 2, 3])
    results = store.load_agent_results(session.id)
    assert results == {"task-1": {"ok": True, "files": ["a.py"]}, "task-2": [1, 2, 3]}


def test_unserializable_agent_result_raises(store):
    with pytest.raises(StoreError):
        store.save_agent_result(uuid.uuid4(), "code", "task-1", {"bad": object()})


def test_closed_store_raises(tmp_path):
    opened = SessionStore(tmp_path / "test.db")
    opened.close()
    with pytest.raises(StoreError):
        opened.load_plan_markers(uuid.uuid4())


def test_unwritable_location_raises(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StoreError):
        SessionStore(blocker / "sub" / "test.db")