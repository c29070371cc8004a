"""Unified schema -> chat-completion wire request.

Pure functions: no I/O and no state shared between requests. Tool-call ids
are drawn from a counter created per `build_messages` call.
"""
from __future__ import annotations

import itertools
import json
import logging
import typing as t
import uuid

import openai.types.chat.chat_completion_message_function_tool_call_param as fn_param
import openai.types.shared_params as shared_params
import typing_extensions as te

from ollamagen.types.content import Content
from ollamagen.types.content import FunctionCallPart
from ollamagen.types.content import FunctionResponsePart
from ollamagen.types.content import GenerateContentConfig
from ollamagen.types.content import Role
from ollamagen.types.content import TextPart
from ollamagen.types.content import Tool
from ollamagen.types.wire import ChatCompletionRequest
from ollamagen.types.wire import ToolCall
from ollamagen.types.wire import ToolDescriptor
from ollamagen.types.wire import WireMessage
from ollamagen.types.wire import WireRole
from ollamagen.utils import drop_none

logger = logging.getLogger("ollamagen.mapping")

_ROLES: dict[str, WireRole] = {"model": "assistant", "function": "tool"}
_UNROLES: dict[str, Role] = {"assistant": "model", "tool": "function"}


def map_role(role: Role) -> WireRole:
    """Map a unified role to its wire role.

    ``model`` becomes ``assistant`` and ``function`` becomes ``tool``; the
    other roles are identical on both sides.
    """
    return _ROLES.get(role, t.cast(WireRole, role))


def unmap_role(role: str) -> Role:
    """Inverse of `map_role`."""
    return _UNROLES.get(role, t.cast(Role, role))


def dump_json(value: t.Any) -> str:
    """Serialize a value the way the wire expects it (compact, UTF-8 kept)."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def new_tool_call_id(position: int) -> str:
    """Synthesize a tool-call id.

    The random component makes collisions across requests practically
    impossible; the position makes ids unique within one request.
    """
    return f"call_{uuid.uuid4().hex[:12]}_{position}"


def build_message(content: Content, positions: t.Iterator[int]) -> WireMessage:
    """Convert one content block into one wire message.

    Args:
        content: The unified content block.
        positions: Request-wide counter used for tool-call ids.

    Returns:
        The wire message. A function response overwrites any text gathered
        before it, last write wins.
    """
    text = ""
    tool_calls = []  # type: t.List[ToolCall]
    tool_call_id = None  # type: t.Optional[str]

    for part in content.parts:
        if isinstance(part, TextPart):
            if part.text:
                text += part.text
        elif isinstance(part, FunctionCallPart):
            tool_calls.append(
                ToolCall(
                    id=new_tool_call_id(next(positions)),
                    type="function",
                    function=fn_param.Function(name=part.name, arguments=dump_json(part.args or {})),
                )
            )
        elif isinstance(part, FunctionResponsePart):
            tool_call_id = f"call_{part.name or 'unknown'}"
            text = dump_json(part.response)
        else:
            te.assert_never(part)

    message = WireMessage(role=map_role(content.role), content=text)
    if tool_calls:
        message["tool_calls"] = tool_calls
    if tool_call_id is not None:
        message["tool_call_id"] = tool_call_id
    return message


def render_system_instruction(instruction: str | Content) -> str:
    """Flatten a system instruction to text.

    Non-text parts of a structured instruction contribute nothing.
    """
    if isinstance(instruction, str):
        return instruction
    return "".join(part.text for part in instruction.parts if isinstance(part, TextPart))


def build_messages(
    contents: t.Sequence[Content],
    system_instruction: str | Content | None = None,
) -> list[WireMessage]:
    """Convert an ordered conversation into wire messages.

    Args:
        contents: Conversation in order.
        system_instruction: Optional instruction, sent first with role
            ``system``.

    Returns:
        Wire messages in conversation order.
    """
    positions = itertools.count()
    messages = [build_message(content, positions) for content in contents]
    # An empty string means no instruction; an empty Content is still sent
    has_system = system_instruction is not None and system_instruction != ""
    if has_system:
        messages.insert(
            0, WireMessage(role="system", content=render_system_instruction(system_instruction))
        )
    logger.debug(
        "Built %s wire messages from %s contents (system=%s)",
        len(messages),
        len(contents),
        has_system,
    )
    return messages


def build_tools(tools: t.Sequence[Tool] | None) -> list[ToolDescriptor] | None:
    """Flatten tool groups into wire tool descriptors.

    Declarations without a name are dropped.

    Returns:
        Descriptors in declaration order, or None when nothing is left (the
        ``tools`` key is then omitted rather than sent empty).
    """
    descriptors = []  # type: t.List[ToolDescriptor]
    for tool in tools or ():
        for decl in tool.function_declarations:
            if not decl.name:
                logger.debug("Dropping unnamed function declaration")
                continue
            function = shared_params.FunctionDefinition(name=decl.name)
            if decl.description is not None:
                function["description"] = decl.description
            if decl.parameters is not None:
                function["parameters"] = decl.parameters
            descriptors.append(ToolDescriptor(type="function", function=function))
    return descriptors or None


def build_request(
    contents: t.Sequence[Content],
    *,
    model: str,
    stream: bool,
    config: GenerateContentConfig | None = None,
) -> ChatCompletionRequest:
    """Build the full chat-completion request body.

    Generation scalars are passed through unchanged; unset ones are omitted.

    Args:
        contents: Conversation in order.
        model: Model to request (already resolved against the default).
        stream: Whether the service should stream the answer.
        config: Optional generation config.

    Returns:
        The request body, ready for JSON serialization.
    """
    config = config or GenerateContentConfig()
    body = drop_none(
        {
            "model": model,
            "messages": build_messages(contents, config.system_instruction),
            "stream": stream,
            "temperature": config.temperature,
            "top_p": config.top_p,
            "max_tokens": config.max_output_tokens,
            "tools": build_tools(config.tools),
        }
    )
    return t.cast(ChatCompletionRequest, body)
