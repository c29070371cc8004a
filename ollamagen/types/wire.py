"""OpenAI-compatible chat-completion wire schema.

Outgoing payloads are plain dictionaries typed with TypedDicts (tool calls
and tool declarations reuse the ``openai`` package's parameter types), so
they serialize with ``json`` as-is. Incoming payloads are validated into
lenient pydantic models.
"""
from __future__ import annotations

import typing as t

import openai.types.chat as chat_t
import pydantic as pydt
import typing_extensions as te

from ollamagen.types import WireModel

WireRole: t.TypeAlias = t.Literal["system", "user", "assistant", "tool"]

ToolCall: t.TypeAlias = chat_t.ChatCompletionMessageFunctionToolCallParam
"""``{id, type: "function", function: {name, arguments}}``, arguments being
JSON text."""

ToolDescriptor: t.TypeAlias = chat_t.ChatCompletionFunctionToolParam
"""``{type: "function", function: {name, description?, parameters?}}``."""


class WireMessage(te.TypedDict):
    role: WireRole
    """Wire role of the message."""

    content: str
    """Concatenated text, or the JSON-serialized function response."""

    tool_calls: te.NotRequired[list[ToolCall]]
    """Function calls carried by the message, in part order."""

    tool_call_id: te.NotRequired[str]
    """Identifier of the call a tool message answers."""


class ChatCompletionRequest(te.TypedDict):
    model: str
    messages: list[WireMessage]
    stream: bool
    tools: te.NotRequired[list[ToolDescriptor]]
    temperature: te.NotRequired[float]
    top_p: te.NotRequired[float]
    max_tokens: te.NotRequired[int]


class FunctionCall(WireModel):
    name: str
    arguments: str = pydt.Field(..., description="JSON-encoded call arguments")


class ChatCompletionToolCall(WireModel):
    id: str = ""
    type: str = "function"
    function: FunctionCall


class CompletionUsage(WireModel):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionMessage(WireModel):
    role: str = "assistant"
    content: str | None = None
    tool_calls: list[ChatCompletionToolCall] | None = None


class Choice(WireModel):
    index: int = 0
    message: ChatCompletionMessage
    finish_reason: str | None = None


class ChatCompletion(WireModel):
    """Non-streaming chat-completion response body."""

    id: str = pydt.Field("", description="Completion identifier")
    object: str | None = None
    created: int | None = None
    model: str = pydt.Field("", description="Model that produced the completion")
    choices: list[Choice] = pydt.Field(default_factory=list)
    usage: CompletionUsage | None = None


class ChoiceDelta(WireModel):
    role: str | None = None
    content: str | None = None
    tool_calls: list[dict[str, t.Any]] | None = pydt.Field(
        None, description="Raw tool-call deltas; not reassembled"
    )


class ChunkChoice(WireModel):
    index: int = 0
    delta: ChoiceDelta = pydt.Field(default_factory=ChoiceDelta)
    finish_reason: str | None = None


class ChatCompletionChunk(WireModel):
    """One decoded event of a streamed chat completion."""

    id: str = ""
    object: str | None = None
    created: int | None = None
    model: str = ""
    choices: list[ChunkChoice] = pydt.Field(default_factory=list)
    usage: CompletionUsage | None = None
