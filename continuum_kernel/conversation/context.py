"""
Conversation Context operations.

Behavioral Contract:
- Append-only. Messages are never reordered, edited or deleted.
- updated_at advances strictly with every append.
- A stored Message is a copy; objects handed in or returned earlier are never mutated.
- serialize/deserialize round-trip exactly. Nothing provider-specific is
  added, dropped or reordered; provider details live only in each message's
  ModelInvocation.providerMetadata.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from continuum_kernel.errors import ValidationError
from continuum_kernel.models.conversation import (
    ConversationContext,
    Message,
    MessageRole,
    ModelInvocation,
)
from continuum_kernel.models.registry import ModelDefinition


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_conversation(
    title: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    conversation_id: Optional[str] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> ConversationContext:
    now = clock()
    return ConversationContext(
        id=conversation_id or f"conv_{uuid4().hex[:12]}",
        title=title,
        messages=[],
        created_at=now,
        updated_at=now,
        metadata=metadata,
    )


def _coerce_message(message: Union[Message, Dict[str, Any]]) -> Message:
    if isinstance(message, Message):
        candidate = message.model_copy(deep=True)
    else:
        try:
            candidate = Message.model_validate(message)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid message: {e}") from e

    try:
        candidate.role = MessageRole(candidate.role)
    except ValueError as e:
        allowed = ", ".join(r.value for r in MessageRole)
        raise ValidationError(
            f"Invalid message role {candidate.role!r}; expected one of: {allowed}"
        ) from e
    return candidate


def append_message(
    context: ConversationContext,
    message: Union[Message, Dict[str, Any]],
    clock: Callable[[], datetime] = _utcnow,
) -> Message:
    """
    Append a message to the end of the conversation and return the stored copy.

    Assigns id and created_at when absent. Raises ValidationError on a role
    outside system/user/assistant/tool.
    """
    stored = _coerce_message(message)
    now = clock()
    # Naive timestamps are UTC; match the context's awareness before comparing
    if context.updated_at.tzinfo is None and now.tzinfo is not None:
        now = now.astimezone(timezone.utc).replace(tzinfo=None)
    elif context.updated_at.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if now <= context.updated_at:
        now = context.updated_at + timedelta(microseconds=1)

    if stored.id is None:
        stored.id = f"msg_{uuid4().hex[:12]}"
    if stored.created_at is None:
        stored.created_at = now

    context.messages.append(stored)
    context.updated_at = now
    return stored


def make_model_invocation(
    model: ModelDefinition,
    provider_model_id: Optional[str] = None,
    provider_metadata: Optional[Dict[str, Any]] = None,
    clock: Callable[[], datetime] = _utcnow,
) -> ModelInvocation:
    return ModelInvocation(
        model=model,
        provider_model_id=provider_model_id or model.api_model_name,
        invoked_at=clock(),
        provider_metadata=provider_metadata,
    )


def models_used(context: ConversationContext) -> List[str]:
    """Distinct registry model ids used in the conversation, in order of first use."""
    seen: List[str] = []
    for message in context.messages:
        if message.model_invocation and message.model_invocation.model.id not in seen:
            seen.append(message.model_invocation.model.id)
    return seen


def serialize(context: ConversationContext) -> str:
    return context.model_dump_json(by_alias=True)


def deserialize(data: Union[str, bytes]) -> ConversationContext:
    try:
        return ConversationContext.model_validate_json(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid conversation context: {e}") from e
