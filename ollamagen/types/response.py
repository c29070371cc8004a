from __future__ import annotations

import enum
import typing as t

import pydantic as pydt

from ollamagen.types import BaseModel
from ollamagen.types.content import Content
from ollamagen.types.content import FunctionCallPart
from ollamagen.types.content import TextPart


class FinishReason(str, enum.Enum):
    """Unified cause of generation termination.

    Tool-initiated stops are reported as ``STOP``; inspect the parts of the
    candidate to tell them apart from natural stops.
    """

    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"
    OTHER = "OTHER"


class UsageMetadata(t.NamedTuple):
    """Token usage statistics reported by the service.

    Attributes:
        prompt_token_count: Number of tokens in the input prompt.
        candidates_token_count: Number of tokens generated.
        total_token_count: Total reported by the service, copied verbatim.
    """

    prompt_token_count: int
    candidates_token_count: int
    total_token_count: int


class Candidate(BaseModel):
    index: int = 0
    content: Content
    finish_reason: FinishReason


class GenerateContentResponse(BaseModel):
    """Unified response for one completion, or one streamed increment.

    Attributes:
        candidates: Generated candidates; the adapter always produces one.
        usage_metadata: Token usage, absent when the service reports none.
        model_version: Model identifier echoed by the service.
        response_id: Completion identifier echoed by the service.
    """

    candidates: list[Candidate] = pydt.Field(default_factory=list)
    usage_metadata: UsageMetadata | None = None
    model_version: str | None = None
    response_id: str | None = None

    @property
    def text(self) -> str | None:
        """Concatenated text of the first candidate, or None without
        candidates."""
        if not self.candidates:
            return None
        return "".join(
            part.text for part in self.candidates[0].content.parts if isinstance(part, TextPart)
        )

    @property
    def function_calls(self) -> list[FunctionCallPart]:
        """Function calls of the first candidate, in order."""
        if not self.candidates:
            return []
        return [
            part for part in self.candidates[0].content.parts if isinstance(part, FunctionCallPart)
        ]


class CountTokensResponse(BaseModel):
    total_tokens: int
