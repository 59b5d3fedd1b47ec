"""Static default registry, used whenever no valid canonical registry document is available."""

from continuum_kernel.models.registry import ModelRegistry

DEFAULT_REGISTRY_KEY = "continuum-llm-model-registry.md"

DEFAULT_REGISTRY_DATA = {
    "providers": [
        {"id": "openai", "displayName": "OpenAI"},
        {"id": "anthropic", "displayName": "Anthropic"},
        {"id": "google", "displayName": "Google"},
    ],
    "models": [
        {
            "id": "openai:gpt-5.2",
            "providerId": "openai",
            "displayName": "GPT-5.2",
            "apiModelName": "gpt-5.2",
            "capabilities": ["chat", "reasoning", "code", "long_context", "tools"],
            "status": "active",
            "notes": "Enhanced intelligence, improved coding, long-context",
        },
        {
            "id": "openai:gpt-5.1",
            "providerId": "openai",
            "displayName": "GPT-5.1",
            "apiModelName": "gpt-5.1",
            "capabilities": ["chat", "reasoning", "code"],
            "status": "deprecated",
            "notes": "Previous generation",
        },
        {
            "id": "anthropic:claude-opus-4.5",
            "providerId": "anthropic",
            "displayName": "Claude Opus 4.5",
            "apiModelName": "claude-opus-4-5",
            "capabilities": ["chat", "reasoning", "code", "prose", "tools", "long_context"],
            "status": "active",
            "notes": "Advanced coding, autonomous tool use, long-horizon workflows",
        },
        {
            "id": "anthropic:claude-sonnet-4.5",
            "providerId": "anthropic",
            "displayName": "Claude Sonnet 4.5",
            "apiModelName": "claude-sonnet-4-5",
            "capabilities": ["chat", "reasoning", "code", "prose", "tools"],
            "status": "active",
        },
        {
            "id": "anthropic:claude-haiku-4.5",
            "providerId": "anthropic",
            "displayName": "Claude Haiku 4.5",
            "apiModelName": "claude-haiku-4-5",
            "capabilities": ["chat", "fast_response"],
            "status": "active",
        },
        {
            "id": "google:gemini-3-pro",
            "providerId": "google",
            "displayName": "Gemini 3 Pro",
            "apiModelName": "gemini-3-pro",
            "capabilities": ["chat", "reasoning", "math", "vision", "long_context"],
            "status": "active",
        },
        {
            "id": "google:gemini-3-flash",
            "providerId": "google",
            "displayName": "Gemini 3 Flash",
            "apiModelName": "gemini-3-flash",
            "capabilities": ["chat", "fast_response", "vision"],
            "status": "experimental",
        },
    ],
}


def default_registry() -> ModelRegistry:
    """A fresh copy of the default registry."""
    return ModelRegistry.model_validate(DEFAULT_REGISTRY_DATA)
