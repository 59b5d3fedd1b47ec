"""Model Registry — providers and model definitions available for selection."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from continuum_kernel.models.base import WireModel


class ModelStatus(str, Enum):
    ACTIVE = "active"
    DEPRECATED = "deprecated"
    EXPERIMENTAL = "experimental"


class ModelProvider(WireModel):
    id: str                                 # e.g., "openai", "anthropic"
    display_name: str


class ModelDefinition(WireModel):
    """A single model with its capabilities and metadata."""

    id: str                                 # Stable registry id, e.g., "openai:gpt-5.2"
    provider_id: str
    display_name: str
    api_model_name: Optional[str] = None    # What is sent to the provider, if different
    capabilities: List[str] = []            # e.g., ["chat", "reasoning", "vision", "tools"]
    status: ModelStatus = ModelStatus.ACTIVE
    notes: Optional[str] = None


class ModelRegistry(WireModel):
    providers: List[ModelProvider]
    models: List[ModelDefinition]

    def get_model(self, model_id: str) -> Optional[ModelDefinition]:
        return next((m for m in self.models if m.id == model_id), None)

    def provider_ids(self) -> List[str]:
        """Providers that own at least one model, in registry order."""
        seen: List[str] = []
        for m in self.models:
            if m.provider_id not in seen:
                seen.append(m.provider_id)
        return seen

    def models_for_provider(self, provider_id: str) -> List[ModelDefinition]:
        return [m for m in self.models if m.provider_id == provider_id]

    def models_with_capability(self, capability: str) -> List[ModelDefinition]:
        return [m for m in self.models if capability in m.capabilities]

    def default_model(self, provider_id: Optional[str] = None) -> Optional[ModelDefinition]:
        """First active model, optionally restricted to one provider."""
        candidates = self.models_for_provider(provider_id) if provider_id else self.models
        return next((m for m in candidates if m.status == ModelStatus.ACTIVE), None)


class RegistrySource(str, Enum):
    CANONICAL = "canonical"
    LOCAL_FALLBACK = "local-fallback"


class RegistryLoadResult(WireModel):
    """Provenance lives on the load result, not on the registry value."""

    registry: ModelRegistry
    source: RegistrySource
    error: Optional[str] = None
    loaded_at: datetime
