"""Request, response and message types for chat completions."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping

_MISSING = object()


def _get(data: Any, camel: str, snake: str | None = None, *, default: Any = _MISSING) -> Any:
    """Look up a field by its camelCase name, falling back to snake_case."""
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    for key in (camel, snake):
        if key is not None and key in data:
            return data[key]
    if default is _MISSING:
        raise ValueError(f"missing field `{camel}`")
    return default


def _str(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"field `{field_name}` must be a string")
    return value


def _opt_str(value: Any, field_name: str) -> str | None:
    return None if value is None else _str(value, field_name)


def _uint(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"field `{field_name}` must be a non-negative integer")
    return value


def _list(value: Any, field_name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"field `{field_name}` must be an array")
    return value


@dataclass(frozen=True)
class LlmConfig:
    """Connection and sampling settings for an OpenAI-compatible endpoint."""

    api_key: str
    base_url: str
    model: str
    temperature: float
    max_tokens: int


class Role(str, Enum):
    """Author of a chat message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


@dataclass
class Message:
    """A single chat message."""

    role: Role
    content: str
    name: str | None = None

    def __post_init__(self) -> None:
        self.role = Role(self.role)

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)

    @classmethod
    def function(cls, name: str, content: str) -> "Message":
        return cls(Role.FUNCTION, content, name)

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role.value, "content": self.content, "name": self.name}


@dataclass
class FunctionDefinition:
    """A callable function described by a JSON Schema."""

    name: str
    description: str
    parameters: Any
    required: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
            "required": None if self.required is None else list(self.required),
        }


@dataclass
class Tool:
    """A tool offered to the model."""

    function: FunctionDefinition
    type: str = "function"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "function": self.function.to_dict()}


@dataclass
class FunctionCall:
    """A function invocation requested by the model."""

    name: str
    arguments: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FunctionCall":
        return cls(
            name=_str(_get(data, "name"), "name"),
            arguments=_str(_get(data, "arguments"), "arguments"),
        )


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    type: str
    function: FunctionCall

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "function": self.function.to_dict()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ToolCall":
        return cls(
            id=_str(_get(data, "id"), "id"),
            type=_str(_get(data, "type"), "type"),
            function=FunctionCall.from_dict(_get(data, "function")),
        )


@dataclass(frozen=True)
class FunctionCallChoice:
    """Names the one function the model must call."""

    name: str


_TOOL_CHOICE_KINDS = ("none", "auto", "required", "function")


@dataclass(frozen=True)
class ToolChoice:
    """Tool selection strategy: none, auto, required, or a named function."""

    kind: str
    function: FunctionCallChoice | None = None

    def __post_init__(self) -> None:
        if self.kind not in _TOOL_CHOICE_KINDS:
            raise ValueError(f"unknown tool choice `{self.kind}`")
        if (self.kind == "function") != (self.function is not None):
            raise ValueError("a function is given exactly when the tool choice is `function`")

    def to_json(self) -> Any:
        if self.function is not None:
            return {"function": {"name": self.function.name}}
        return self.kind


@dataclass
class ChatCompletionRequest:
    """Messages and tool settings for one completion call."""

    messages: list[Message]
    tools: list[Tool] | None = None
    tool_choice: ToolChoice | None = None
    stream: bool = False

    def with_tools(self, tools: Iterable[Tool]) -> "ChatCompletionRequest":
        return replace(self, messages=list(self.messages), tools=list(tools))

    def with_tool_choice(self, tool_choice: ToolChoice) -> "ChatCompletionRequest":
        return replace(self, messages=list(self.messages), tool_choice=tool_choice)

    def with_stream(self, stream: bool) -> "ChatCompletionRequest":
        return replace(self, messages=list(self.messages), stream=stream)


@dataclass
class Usage:
    """Token accounting for a completion."""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Usage":
        return cls(
            prompt_tokens=_uint(_get(data, "promptTokens", "prompt_tokens"), "promptTokens"),
            completion_tokens=_uint(
                _get(data, "completionTokens", "completion_tokens"), "completionTokens"
            ),
            total_tokens=_uint(_get(data, "totalTokens", "total_tokens"), "totalTokens"),
        )


@dataclass
class CompletionMessage:
    """The message returned in a completion choice."""

    role: Role
    content: str | None = None
    function_call: FunctionCall | None = None
    tool_calls: list[ToolCall] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompletionMessage":
        function_call = _get(data, "functionCall", "function_call", default=None)
        tool_calls = _get(data, "toolCalls", "tool_calls", default=None)
        return cls(
            role=Role(_get(data, "role")),
            content=_opt_str(_get(data, "content", default=None), "content"),
            function_call=None if function_call is None else FunctionCall.from_dict(function_call),
            tool_calls=None
            if tool_calls is None
            else [ToolCall.from_dict(item) for item in _list(tool_calls, "toolCalls")],
        )


@dataclass
class ChatCompletionChoice:
    """One alternative in a completion response."""

    index: int
    message: CompletionMessage
    finish_reason: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionChoice":
        return cls(
            index=_uint(_get(data, "index"), "index"),
            message=CompletionMessage.from_dict(_get(data, "message")),
            finish_reason=_str(_get(data, "finishReason", "finish_reason"), "finishReason"),
        )


@dataclass
class ChatCompletionResponse:
    """A full, non-streamed completion response."""

    id: str
    object: str
    created: int
    model: str
    choices: list[ChatCompletionChoice]
    usage: Usage

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatCompletionResponse":
        return cls(
            id=_str(_get(data, "id"), "id"),
            object=_str(_get(data, "object"), "object"),
            created=_uint(_get(data, "created"), "created"),
            model=_str(_get(data, "model"), "model"),
            choices=[
                ChatCompletionChoice.from_dict(item)
                for item in _list(_get(data, "choices"), "choices")
            ],
            usage=Usage.from_dict(_get(data, "usage")),
        )