from __future__ import annotations

import typing as t

import pydantic as pyd


class BaseModel(pyd.BaseModel):
    """Base model with common configuration for unified-schema models.

    This class sets default configurations such as forbidding extra fields,
    allowing arbitrary types, and making the model immutable. Unified
    requests and responses are request scoped and never mutated after
    construction.

    Attributes:
        model_config: Configuration dictionary for the model.
    """
    model_config: t.ClassVar[pyd.ConfigDict] = pyd.ConfigDict(
        validate_default=False,  # Do not validate default values
        extra="forbid",  # Disallow extra fields
        arbitrary_types_allowed=True,  # Allow arbitrary types
        populate_by_name=True,  # Allow population by field name
        frozen=True,  # Make the model immutable
        protected_namespaces=(),  # Allow `model_version` and friends
    )


class WireModel(pyd.BaseModel):
    """Base model for payloads received from the chat-completion service.

    Servers add fields freely (``system_fingerprint``, ``logprobs``, ...), so
    unknown keys are kept instead of rejected.
    """
    model_config: t.ClassVar[pyd.ConfigDict] = pyd.ConfigDict(
        extra="allow",
        frozen=True,
    )
