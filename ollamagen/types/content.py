from __future__ import annotations

import typing as t

import pydantic as pydt

from ollamagen.types import BaseModel

Role: t.TypeAlias = t.Literal["system", "user", "model", "function"]


class TextPart(BaseModel):
    """Plain text fragment of a content block."""

    kind: t.Literal["text"] = "text"
    text: str


class FunctionCallPart(BaseModel):
    """Function call requested by the model.

    Attributes:
        name: Name of the function to call.
        args: Structured call arguments. The wire format carries these as
            JSON text; the unified format always holds a mapping.
    """

    kind: t.Literal["function_call"] = "function_call"
    name: str
    args: dict[str, t.Any] | None = None


class FunctionResponsePart(BaseModel):
    """Result of a function call, sent back to the model.

    Attributes:
        name: Name of the function that produced the result.
        response: Any JSON-serializable result value.
    """

    kind: t.Literal["function_response"] = "function_response"
    name: str | None = None
    response: t.Any = None


def _part_kind(value: t.Any) -> str | None:
    if isinstance(value, t.Mapping):
        if "kind" in value:
            return value["kind"]
        # Untagged dicts are recognized by their payload key
        if "text" in value:
            return "text"
        if "response" in value:
            return "function_response"
        if "name" in value:
            return "function_call"
        return None
    return getattr(value, "kind", None)


Part: t.TypeAlias = t.Annotated[
    t.Annotated[TextPart, pydt.Tag("text")]
    | t.Annotated[FunctionCallPart, pydt.Tag("function_call")]
    | t.Annotated[FunctionResponsePart, pydt.Tag("function_response")],
    pydt.Discriminator(_part_kind),
]
"""Closed union over the three part variants, tagged by ``kind``."""


class Content(BaseModel):
    """One conversational turn made of ordered parts.

    Example:
        ```python
        Content(
            role="user",
            parts=[TextPart(text="What is the weather in Paris?")],
        )
        ```
    """

    role: Role = "user"
    parts: list[Part] = pydt.Field(default_factory=list)


def _as_content_list(value: t.Any) -> t.Any:
    if isinstance(value, (Content, t.Mapping)):
        return [value]
    return value


ContentList: t.TypeAlias = t.Annotated[list[Content], pydt.BeforeValidator(_as_content_list)]
"""Ordered contents; a single content block is accepted as a one-item list."""


class FunctionDeclaration(BaseModel):
    """Declaration of a function the model may call.

    Declarations without a name are accepted here but never transmitted.
    """

    name: str | None = None
    description: str | None = None
    parameters: dict[str, t.Any] | None = None


class Tool(BaseModel):
    """Tool group wrapping zero or more function declarations."""

    function_declarations: list[FunctionDeclaration] = pydt.Field(default_factory=list)


class GenerateContentConfig(BaseModel):
    """Generation options for a content request.

    Scalar values are passed through to the service unchanged: nothing is
    clamped or range-checked here, so ``temperature=7.5`` or
    ``max_output_tokens=-1`` reach the wire as given. Field types are still
    enforced, like every unified model, so a non-numeric ``temperature`` is
    rejected when the config is built (numeric strings are coerced by
    pydantic's lax mode).
    """

    system_instruction: str | Content | None = None
    temperature: float | None = None
    top_p: float | None = None
    max_output_tokens: int | None = None
    tools: list[Tool] | None = None


class GenerateContentRequest(BaseModel):
    """Request for `ContentGenerator.generate_content` and its streaming
    variant."""

    model: str | None = None
    contents: ContentList
    config: GenerateContentConfig | None = None


class CountTokensRequest(BaseModel):
    model: str | None = None
    contents: ContentList


class EmbedContentRequest(BaseModel):
    model: str | None = None
    contents: ContentList
