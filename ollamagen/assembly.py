"""Chat-completion wire responses -> unified responses."""
from __future__ import annotations

import json
import logging
import typing as t

from ollamagen.exceptions import MalformedToolArgumentsError
from ollamagen.exceptions import NoCandidateError
from ollamagen.mapping import unmap_role
from ollamagen.types.content import Content
from ollamagen.types.content import FunctionCallPart
from ollamagen.types.content import Part
from ollamagen.types.content import TextPart
from ollamagen.types.response import Candidate
from ollamagen.types.response import FinishReason
from ollamagen.types.response import GenerateContentResponse
from ollamagen.types.response import UsageMetadata
from ollamagen.types.wire import ChatCompletion
from ollamagen.types.wire import ChatCompletionChunk
from ollamagen.types.wire import ChatCompletionToolCall
from ollamagen.types.wire import CompletionUsage

logger = logging.getLogger("ollamagen.assembly")

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "length": FinishReason.MAX_TOKENS,
    "tool_calls": FinishReason.STOP,
}


def map_finish_reason(reason: str | None) -> FinishReason:
    """Map wire finish reasons to unified ones.

    Args:
        reason: Wire finish reason, None while generation is ongoing.

    Returns:
        Unified finish reason (tool_calls mapped to STOP, unknown values and
        None mapped to OTHER).
    """
    return _FINISH_REASONS.get(reason or "", FinishReason.OTHER)


def parse_tool_call(tool_call: ChatCompletionToolCall) -> FunctionCallPart:
    """Turn a wire tool call into a function-call part.

    Raises:
        MalformedToolArgumentsError: If the arguments are not a JSON object.
    """
    name = tool_call.function.name
    arguments = tool_call.function.arguments
    try:
        args = json.loads(arguments)
    except json.JSONDecodeError as e:
        raise MalformedToolArgumentsError(name, arguments, reason=e.msg) from e
    if not isinstance(args, dict):
        raise MalformedToolArgumentsError(name, arguments, reason="not a JSON object")
    return FunctionCallPart(name=name, args=args)


def _usage(usage: CompletionUsage | None) -> UsageMetadata | None:
    if usage is None:
        return None
    return UsageMetadata(
        prompt_token_count=usage.prompt_tokens,
        candidates_token_count=usage.completion_tokens,
        total_token_count=usage.total_tokens,
    )


def assemble_response(completion: ChatCompletion) -> GenerateContentResponse:
    """Assemble a unified response from a non-streaming completion.

    Only the first choice is used. Its text (when non-empty) comes first,
    followed by one function-call part per tool call.

    Raises:
        NoCandidateError: If the completion has no choices.
        MalformedToolArgumentsError: If a tool call carries invalid arguments.
    """
    if not completion.choices:
        raise NoCandidateError("No choices in Ollama response")
    choice = completion.choices[0]

    parts = []  # type: t.List[Part]
    if choice.message.content:
        parts.append(TextPart(text=choice.message.content))
    for tool_call in choice.message.tool_calls or ():
        parts.append(parse_tool_call(tool_call))

    logger.debug(
        "Assembled response %s: finish_reason=%s, parts=%s, usage=%s",
        completion.id,
        choice.finish_reason,
        len(parts),
        completion.usage is not None,
    )
    return GenerateContentResponse(
        candidates=[
            Candidate(
                index=0,
                content=Content(role=unmap_role("assistant"), parts=parts),
                finish_reason=map_finish_reason(choice.finish_reason),
            )
        ],
        usage_metadata=_usage(completion.usage),
        model_version=completion.model,
        response_id=completion.id,
    )


def assemble_chunk(chunk: ChatCompletionChunk) -> GenerateContentResponse | None:
    """Assemble a unified partial response from one stream chunk.

    The response always carries exactly one text part holding the delta text
    (empty when the delta has none). Tool-call deltas are not reassembled into
    function-call parts.

    Returns:
        The partial response, or None when the chunk has no choices and
        carries nothing representable.
    """
    if not chunk.choices:
        logger.debug("Stream chunk %s: no choice data", chunk.id)
        return None
    choice = chunk.choices[0]
    if choice.delta.tool_calls:
        logger.debug(
            "Stream chunk %s: ignoring %s tool call deltas", chunk.id, len(choice.delta.tool_calls)
        )

    return GenerateContentResponse(
        candidates=[
            Candidate(
                index=0,
                content=Content(
                    role=unmap_role("assistant"), parts=[TextPart(text=choice.delta.content or "")]
                ),
                finish_reason=map_finish_reason(choice.finish_reason),
            )
        ],
        usage_metadata=_usage(chunk.usage),
        model_version=chunk.model,
        response_id=chunk.id,
    )
