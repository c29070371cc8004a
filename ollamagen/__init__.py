from __future__ import annotations

from ollamagen.exceptions import ChunkParseWarning
from ollamagen.exceptions import MalformedToolArgumentsError
from ollamagen.exceptions import MissingBodyError
from ollamagen.exceptions import NoCandidateError
from ollamagen.exceptions import OllamaGenError
from ollamagen.exceptions import StreamConsumedError
from ollamagen.exceptions import TransportError
from ollamagen.exceptions import UnsupportedOperationError
from ollamagen.generator import ContentGenerator
from ollamagen.generator.ollama import OllamaConfig
from ollamagen.generator.ollama import OllamaContentGenerator
from ollamagen.types.content import Content
from ollamagen.types.content import CountTokensRequest
from ollamagen.types.content import EmbedContentRequest
from ollamagen.types.content import FunctionCallPart
from ollamagen.types.content import FunctionDeclaration
from ollamagen.types.content import FunctionResponsePart
from ollamagen.types.content import GenerateContentConfig
from ollamagen.types.content import GenerateContentRequest
from ollamagen.types.content import TextPart
from ollamagen.types.content import Tool
from ollamagen.types.response import Candidate
from ollamagen.types.response import CountTokensResponse
from ollamagen.types.response import FinishReason
from ollamagen.types.response import GenerateContentResponse
from ollamagen.types.response import UsageMetadata
from ollamagen.types.stream import AsyncStream

__title__ = "ollamagen"
__version__ = "0.1.0"

__all__ = [
    "AsyncStream",
    "Candidate",
    "ChunkParseWarning",
    "Content",
    "ContentGenerator",
    "CountTokensRequest",
    "CountTokensResponse",
    "EmbedContentRequest",
    "FinishReason",
    "FunctionCallPart",
    "FunctionDeclaration",
    "FunctionResponsePart",
    "GenerateContentConfig",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "MalformedToolArgumentsError",
    "MissingBodyError",
    "NoCandidateError",
    "OllamaConfig",
    "OllamaContentGenerator",
    "OllamaGenError",
    "StreamConsumedError",
    "TextPart",
    "Tool",
    "TransportError",
    "UnsupportedOperationError",
    "UsageMetadata",
]
