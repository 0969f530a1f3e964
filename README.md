# telisq

Building blocks for a structured planning and execution engine. The package
has no runtime dependencies beyond the standard library.

- **`telisq.patcher`** applies surgical find-and-replace patches to files. It
  can also check, without writing, that a patch still applies.
- **`telisq.session`** stores sessions, orchestrator events, agent results and
  plan markers in SQLite. A session can be resumed after an interruption.
- **`telisq.llm.types`** holds the message, tool and request/response types
  for OpenAI-compatible chat completion APIs.
- **`telisq.llm.retry`** holds the retry and backoff policy for such requests.
- **`telisq.models`** holds the shared data types: `Session`, `SessionState`
  and `TaskStatus`.
- **`telisq.events`** holds the orchestrator event types: `StepStarted`,
  `StepCompleted`, `StepFailed`, `AgentMessage`, `PlanCompleted`,
  `PlanMarkerUpdated`, `SessionStopped` and `TaskRetry`.

## Installation

```
pip install telisq
```

To run the test suite, install the test extra with
`pip install "telisq[test]"`.

## Patching files

```python
from telisq.patcher import FilePatch, apply_patch, verify_patch

patch = FilePatch(
    file_path="greeting.txt",
    original="Hello, world!",
    replacement="Hello, Python!",
)

print(verify_patch(patch).ok)   # True if the original text is in the file
print(apply_patch(patch).ok)    # replaces every occurrence and writes the file
```

Every call returns a `PatchResult`. Its `outcome` is one of the
`PatchOutcome` members:

- `SUCCESS`;
- `FILE_NOT_FOUND`;
- `CONTENT_MISMATCH`, when the original text is not in the file;
- `FAILURE`, when the file could not be read or written. In this case
  `message` gives the reason.

`apply_patches` and `verify_patches` take an iterable of patches. Each
returns a list of `(path, result)` pairs.

## Sessions

```python
from telisq.events import StepStarted
from telisq.models import Session
from telisq.session.store import SessionStore

with SessionStore("state/sessions.db") as store:
    session = Session.create("build-feature", "/work/project/plan.md")
    store.save_session(session)
    store.save_plan_marker(session.id, "task-1", "in_progress")
    store.save_event(session.id, StepStarted("task-1"))

    resumed = store.resume_session(session.id)
    print(store.load_plan_markers(session.id))   # {'task-1': 'pending'}
```

`SessionStore` creates the database file, its parent directory and the schema
on first use. Relative paths are taken from the current directory. The store
has these methods:

- `save_session`, `load_session` and `update_session_status` handle single
  sessions. `update_session_status` takes a status name or a `SessionState`.
- `list_sessions(project_path)` returns the sessions whose plan file lies in
  that directory, most recently updated first.
- `save_event` and `load_events` handle the event log, kept in order of
  arrival.
- `save_agent_result` and `load_agent_results` store a JSON-serialisable
  result per task.
- `save_plan_marker` and `load_plan_markers` keep one marker per task.
- `resume_session` loads a session and resets every task marked
  `in_progress` to `pending`.

Database and serialisation problems raise `StoreError`.

The stored form of states and events is handled by `telisq.session.codec`,
which provides `session_state_to_str`, `str_to_session_state`, `event_type`,
`serialize_event` and `deserialize_event`. Unknown session states are read
back as running. Unknown event types are read back as an `AgentMessage`.

## Chat completion types

```python
from telisq.llm.types import ChatCompletionRequest, LlmConfig, Message

config = LlmConfig(
    api_key="placeholder",
    base_url="https://llm.example.com/v1",
    model="gpt-4o",
    temperature=0.1,
    max_tokens=4096,
)

request = ChatCompletionRequest(messages=[
    Message.system("You are a helpful assistant"),
    Message.user("What's 6*7?"),
]).with_stream(True)
```

`Message`, `Tool`, `FunctionDefinition`, `ToolCall` and `FunctionCall` turn
into JSON-ready dicts with `to_dict`. `ToolChoice` does the same with
`to_json`; it is one of `none`, `auto`, `required`, or `function` with a
`FunctionCallChoice`.

`ChatCompletionResponse.from_dict` parses a response body. It accepts field
names in camelCase or snake_case and raises `ValueError` on malformed data.

## Retry policy

`telisq.llm.retry` provides the following:

- `RetryConfig`. The defaults are 3 retries and an initial delay of 1 s,
  doubling on each attempt and capped at 30 s.
- `is_retryable_error(status)`, which is true for HTTP 429 and 5xx.
- `calculate_retry_delay(config, attempt)`, which returns the capped
  exponential delay as a `timedelta`.

## What the package does not do

The package does not send HTTP requests. It has no client that calls a chat
completion endpoint, no tool-call dispatch and no streaming reader. The types
and retry policy above are meant to be used with an HTTP client of your
choice. It also has no command-line interface.