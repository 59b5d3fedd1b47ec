"""
Conversation Context — provider-agnostic, append-only conversation log.

Each Message carries its own ModelInvocation, so one conversation can mix
models and providers freely with no translation step.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from continuum_kernel.models.base import WireModel
from continuum_kernel.models.registry import ModelDefinition


class MessageRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ToolInvocation(WireModel):
    id: str
    tool_name: str
    arguments: Dict[str, Any] = {}
    result: Optional[Any] = None
    invoked_at: datetime
    completed_at: Optional[datetime] = None
    success: bool
    error: Optional[str] = None


class ModelInvocation(WireModel):
    model: ModelDefinition                  # Reference to a registry entry
    provider_model_id: Optional[str] = None # May differ from the registry id
    invoked_at: datetime
    provider_metadata: Optional[Dict[str, Any]] = None


class Message(WireModel):
    id: Optional[str] = None                # Assigned on append when absent
    role: MessageRole
    content: str
    created_at: Optional[datetime] = None   # Assigned on append when absent
    model_invocation: Optional[ModelInvocation] = None
    tool_invocations: List[ToolInvocation] = []


class ConversationContext(WireModel):
    id: str
    title: Optional[str] = None
    messages: List[Message] = []            # Chronological, append-only
    created_at: datetime
    updated_at: datetime
    metadata: Optional[Dict[str, Any]] = None
