"""Persistent storage for sessions, events, agent results and plan markers."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from telisq.events import OrchestratorEvent
from telisq.models import Session, SessionState
from telisq.session.codec import (
    deserialize_event,
    event_type,
    serialize_event,
    session_state_to_str,
    str_to_session_state,
)

log = logging.getLogger(__name__)

SCHEMA_VERSION = 1

_MIGRATION_V1 = (
    """CREATE TABLE IF NOT EXISTS sessions (
        id TEXT PRIMARY KEY NOT NULL,
        project_path TEXT NOT NULL,
        plan_path TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT NOT NULL DEFAULT (datetime('now')),
        status TEXT NOT NULL DEFAULT 'running',
        current_task_id TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS events (
        id TEXT PRIMARY KEY NOT NULL,
        session_id TEXT NOT NULL,
        timestamp TEXT NOT NULL DEFAULT (datetime('now')),
        event_type TEXT NOT NULL,
        payload TEXT,
        FOREIGN KEY (session_id) REFERENCES sessions(id)
    )""",
    """CREATE TABLE IF NOT EXISTS agent_results (
        id TEXT PRIMARY KEY NOT NULL,
        session_id TEXT NOT NULL,
        agent_type TEXT NOT NULL,
        task_id TEXT NOT NULL,
        result TEXT NOT NULL,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        FOREIGN KEY (session_id) REFERENCES sessions(id)
    )""",
    """CREATE TABLE IF NOT EXISTS plan_markers (
        id TEXT PRIMARY KEY NOT NULL,
        session_id TEXT NOT NULL,
        task_id TEXT NOT NULL,
        marker TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT (datetime('now')),
        FOREIGN KEY (session_id) REFERENCES sessions(id)
    )""",
    "CREATE INDEX IF NOT EXISTS idx_events_session_id ON events(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_events_timestamp ON events(timestamp)",
    "CREATE INDEX IF NOT EXISTS idx_agent_results_session_id ON agent_results(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_plan_markers_session_id ON plan_markers(session_id)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_project_path ON sessions(project_path)",
    "CREATE INDEX IF NOT EXISTS idx_sessions_status ON sessions(status)",
)


class StoreError(Exception):
    """A session store operation failed."""


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise StoreError(f"Database error: {exc}") from exc


class SessionStore:
    """Session store backed by a SQLite database file."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        path = Path(db_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        log.info("Initializing session store at %s", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as exc:
            raise StoreError(f"IO error: Failed to create database file: {exc}") from exc
        with _database_errors():
            self._conn = sqlite3.connect(str(path), timeout=10, isolation_level=None)
        self._migrate()
        log.info("Session store initialized successfully")

    def __enter__(self) -> "SessionStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> sqlite3.Cursor:
        with _database_errors():
            return self._conn.execute(sql, params)

    def _migrate(self) -> None:
        self._execute(
            """CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY NOT NULL,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            )"""
        )
        (current,) = self._execute("SELECT MAX(version) FROM schema_version").fetchone()
        if current == SCHEMA_VERSION:
            log.debug("Schema is up to date at version %d", SCHEMA_VERSION)
            return
        log.info("Applying migrations from %s to %d", current, SCHEMA_VERSION)
        if current is None or current < 1:
            for statement in _MIGRATION_V1:
                self._execute(statement)
            self._execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
        log.info("Schema migrations completed")

    @staticmethod
    def _row_to_session(row: tuple[str, str, str, str]) -> Session:
        id_text, plan_path, name, status = row
        return Session(
            name=name,
            plan_path=Path(plan_path),
            id=uuid.UUID(id_text),
            state=str_to_session_state(status),
        )

    def save_session(self, session: Session) -> None:
        """Insert or replace a session record."""
        plan_path = str(session.plan_path)
        self._execute(
            "INSERT OR REPLACE INTO sessions "
            "(id, project_path, plan_path, name, status, updated_at) "
            "VALUES (?, ?, ?, ?, ?, datetime('now'))",
            (
                str(session.id),
                os.path.dirname(plan_path),
                plan_path,
                session.name,
                session_state_to_str(session.state),
            ),
        )
        log.debug("Session %s saved", session.id)

    def load_session(self, session_id: uuid.UUID) -> Session | None:
        """Return the session with this id, or None if it is not stored."""
        row = self._execute(
            "SELECT id, plan_path, name, status FROM sessions WHERE id = ?",
            (str(session_id),),
        ).fetchone()
        if row is None:
            log.debug("Session %s not found", session_id)
            return None
        try:
            return self._row_to_session(row)
        except ValueError as exc:
            raise StoreError(f"UUID parse error: {exc}") from exc

    def list_sessions(self, project_path: str) -> list[Session]:
        """Return sessions of a project, most recently updated first."""
        rows = self._execute(
            "SELECT id, plan_path, name, status FROM sessions "
            "WHERE project_path = ? ORDER BY updated_at DESC",
            (str(project_path),),
        ).fetchall()
        sessions = []
        for row in rows:
            try:
                sessions.append(self._row_to_session(row))
            except ValueError:
                continue
        return sessions

    def update_session_status(self, session_id: uuid.UUID, status: str | SessionState) -> None:
        """Set the stored status of a session."""
        if isinstance(status, SessionState):
            status = session_state_to_str(status)
        self._execute(
            "UPDATE sessions SET status = ?, updated_at = datetime('now') WHERE id = ?",
            (status, str(session_id)),
        )

    def save_event(self, session_id: uuid.UUID, event: OrchestratorEvent) -> None:
        """Append an orchestrator event to a session's log."""
        payload = json.dumps(serialize_event(event))
        self._execute(
            "INSERT INTO events (id, session_id, event_type, payload) VALUES (?, ?, ?, ?)",
            (str(uuid.uuid4()), str(session_id), event_type(event), payload),
        )

    def save_agent_result(
        self, session_id: uuid.UUID, agent_type: str, task_id: str, result: Any
    ) -> None:
        """Store the JSON result an agent produced for a task."""
        try:
            result_json = json.dumps(result, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Serialization error: {exc}") from exc
        self._execute(
            "INSERT INTO agent_results (id, session_id, agent_type, task_id, result) "
            "VALUES (?, ?, ?, ?, ?)",
            (str(uuid.uuid4()), str(session_id), agent_type, task_id, result_json),
        )

    def save_plan_marker(self, session_id: uuid.UUID, task_id: str, marker: str) -> None:
        """Insert or update the marker of a task within a session."""
        existing = self._execute(
            "SELECT id FROM plan_markers WHERE session_id = ? AND task_id = ?",
            (str(session_id), task_id),
        ).fetchone()
        if existing is not None:
            self._execute(
                "UPDATE plan_markers SET marker = ?, updated_at = datetime('now') WHERE id = ?",
                (marker, existing[0]),
            )
        else:
            self._execute(
                "INSERT INTO plan_markers (id, session_id, task_id, marker, updated_at) "
                "VALUES (?, ?, ?, ?, datetime('now'))",
                (str(uuid.uuid4()), str(session_id), task_id, marker),
            )

    def load_plan_markers(self, session_id: uuid.UUID) -> dict[str, str]:
        """Return a mapping of task id to marker for a session."""
        rows = self._execute(
            "SELECT task_id, marker FROM plan_markers WHERE session_id = ?",
            (str(session_id),),
        ).fetchall()
        return dict(rows)

    def load_agent_results(self, session_id: uuid.UUID) -> dict[str, Any]:
        """Return a mapping of task id to agent result, skipping unreadable ones."""
        rows = self._execute(
            "SELECT task_id, result FROM agent_results WHERE session_id = ? ORDER BY rowid",
            (str(session_id),),
        ).fetchall()
        results: dict[str, Any] = {}
        for task_id, result_json in rows:
            try:
                results[task_id] = json.loads(result_json)
            except ValueError:
                continue
        return results

    def load_events(self, session_id: uuid.UUID) -> list[OrchestratorEvent]:
        """Return a session's events in chronological order, skipping unreadable ones."""
        rows = self._execute(
            "SELECT event_type, payload FROM events WHERE session_id = ? "
            "ORDER BY timestamp ASC, rowid ASC",
            (str(session_id),),
        ).fetchall()
        events = []
        for kind, payload in rows:
            try:
                events.append(deserialize_event(kind, payload))
            except (TypeError, ValueError):
                continue
        return events

    def resume_session(self, session_id: uuid.UUID) -> Session | None:
        """Load a session and reset its interrupted in-progress tasks to pending."""
        session = self.load_session(session_id)
        if session is None:
            log.warning("Session %s not found for resume", session_id)
            return None
        markers = self.load_plan_markers(session_id)
        results = self.load_agent_results(session_id)
        interrupted = [task_id for task_id, marker in markers.items() if marker == "in_progress"]
        for task_id in interrupted:
            self.save_plan_marker(session_id, task_id, "pending")
        if interrupted:
            log.warning(
                "Reset %d in-progress tasks of session %s to pending",
                len(interrupted),
                session_id,
            )
        log.info(
            "Session %s resumed: %d markers, %d results, %d reset",
            session_id,
            len(markers),
            len(results),
            len(interrupted),
        )
        return session