"""Continuum Kernel data models."""

from continuum_kernel.models.conversation import (
    ConversationContext,
    Message,
    MessageRole,
    ModelInvocation,
    ToolInvocation,
)
from continuum_kernel.models.document import CanonicalDocument, KeyLookupResult, MatchTier
from continuum_kernel.models.registry import (
    ModelDefinition,
    ModelProvider,
    ModelRegistry,
    ModelStatus,
    RegistryLoadResult,
    RegistrySource,
)
from continuum_kernel.models.workspace import (
    ActionCheck,
    ActionKind,
    GovernedAction,
    ModeResolution,
    OperatingMode,
    ReadinessStatus,
    WorkspaceReadiness,
)

__all__ = [
    "ActionCheck",
    "ActionKind",
    "CanonicalDocument",
    "ConversationContext",
    "GovernedAction",
    "KeyLookupResult",
    "MatchTier",
    "Message",
    "MessageRole",
    "ModeResolution",
    "ModelDefinition",
    "ModelInvocation",
    "ModelProvider",
    "ModelRegistry",
    "ModelStatus",
    "OperatingMode",
    "ReadinessStatus",
    "RegistryLoadResult",
    "RegistrySource",
    "ToolInvocation",
    "WorkspaceReadiness",
]
