"""
Model Registry Loader — governed canonical document first, static default second.

Behavioral Contract:
- Key unresolved                      -> default registry, source=local-fallback, no error
- Key resolved, content valid         -> parsed registry, source=canonical
- Key resolved, content invalid       -> default registry, source=local-fallback, error set
- Document service unavailable        -> default registry, source=local-fallback, error set
- Model ids must be unique across the whole registry. A collision in the
  canonical document degrades to the default; a collision in the default
  itself has no safer fallback and raises RegistryValidationError.
- Results are memoized in a RegistryCache owned by the composer until
  invalidate(). Concurrent misses coalesce into one fetch.
"""

import json
import re
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from continuum_kernel.documents.resolver import KeyResolver
from continuum_kernel.errors import (
    DocumentNotFoundError,
    RegistryValidationError,
    TransientIOError,
)
from continuum_kernel.logging import get_logger
from continuum_kernel.models.registry import ModelRegistry, RegistryLoadResult, RegistrySource
from continuum_kernel.registry.defaults import DEFAULT_REGISTRY_KEY, default_registry

logger = get_logger("registry.loader")

_JSON_BLOCK = re.compile(r"```json\s*([\s\S]*?)```")


def parse_registry_document(content: str) -> ModelRegistry:
    """
    Parse registry content: the first ```json fenced block of a markdown
    document, or the whole content when it is bare JSON.
    """
    match = _JSON_BLOCK.search(content)
    if match:
        raw = match.group(1).strip()
    elif content.lstrip().startswith("{"):
        raw = content.strip()
    else:
        raise RegistryValidationError("Registry document has no ```json block")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise RegistryValidationError(f"Registry JSON is malformed: {e}") from e

    if not isinstance(data, dict) or "providers" not in data or "models" not in data:
        raise RegistryValidationError(
            "Registry JSON must be an object with 'providers' and 'models'"
        )

    try:
        return ModelRegistry.model_validate(data)
    except PydanticValidationError as e:
        raise RegistryValidationError(
            f"Registry failed validation: {e.error_count()} error(s): {e.errors()[0]['msg']}"
        ) from e


def validate_unique_model_ids(registry: ModelRegistry) -> ModelRegistry:
    """Model ids are unique across the whole registry, regardless of provider."""
    owners = {}
    for model in registry.models:
        if model.id in owners:
            raise RegistryValidationError(
                f"Duplicate model id '{model.id}' "
                f"(providers '{owners[model.id]}' and '{model.provider_id}')",
                model_id=model.id,
            )
        owners[model.id] = model.provider_id
    return registry


class RegistryCache:
    """
    Holds at most one complete RegistryLoadResult.

    Owned by whatever composes the loader. The clock is injectable so TTL
    expiry can be tested deterministically; ttl_seconds=None never expires.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        ttl_seconds: Optional[float] = None,
    ):
        self._clock = clock
        self.ttl_seconds = ttl_seconds
        self._entry: Optional[Tuple[float, RegistryLoadResult]] = None

    def get(self) -> Optional[RegistryLoadResult]:
        entry = self._entry
        if entry is None:
            return None
        stored_at, result = entry
        if self.ttl_seconds is not None and self._clock() - stored_at >= self.ttl_seconds:
            return None
        return result

    def put(self, result: RegistryLoadResult) -> None:
        # Single assignment: readers see the old entry or the new one, never a mix
        self._entry = (self._clock(), result)

    def invalidate(self) -> None:
        self._entry = None


class ModelRegistryLoader:
    """Loads the model registry and tracks where it came from."""

    def __init__(
        self,
        key_resolver: KeyResolver,
        cache: Optional[RegistryCache] = None,
        registry_key: str = DEFAULT_REGISTRY_KEY,
        fallback_registry: Optional[ModelRegistry] = None,
    ):
        self.key_resolver = key_resolver
        self.cache = cache or RegistryCache()
        self.registry_key = registry_key
        self.fallback_registry = fallback_registry or default_registry()
        self._lock = threading.Lock()

    def load(self) -> RegistryLoadResult:
        cached = self.cache.get()
        if cached is not None:
            logger.debug("Model registry served from cache (source=%s)", cached.source.value)
            return cached

        with self._lock:
            # Another caller may have filled the cache while we waited
            cached = self.cache.get()
            if cached is not None:
                return cached
            result = self._fetch()
            self.cache.put(result)
            return result

    def invalidate(self) -> None:
        """Drop the cached result; the next load() re-resolves from scratch."""
        with self._lock:
            self.cache.invalidate()

    def _fetch(self) -> RegistryLoadResult:
        try:
            document = self.key_resolver.find_by_key(self.registry_key)
        except DocumentNotFoundError as e:
            if isinstance(e.__cause__, TransientIOError):
                logger.warning("Document service unavailable, using default registry: %s", e.__cause__)
                return self._fallback(f"Document service unavailable: {e.__cause__}")
            logger.info(
                "No canonical registry document '%s'; using default registry", self.registry_key
            )
            return self._fallback(None)
        except Exception as e:
            logger.warning("Registry lookup failed, using default registry: %s", e)
            return self._fallback(f"Registry lookup failed: {e}")

        try:
            registry = validate_unique_model_ids(
                parse_registry_document(document.content or "")
            )
        except RegistryValidationError as e:
            logger.warning(
                "Canonical registry document '%s' is invalid, using default registry: %s",
                document.key, e,
            )
            return self._fallback(f"Canonical registry document '{document.key}' is invalid: {e}")

        logger.info(
            "Loaded model registry from canonical document '%s' (%d models)",
            document.key, len(registry.models),
        )
        return RegistryLoadResult(
            registry=registry,
            source=RegistrySource.CANONICAL,
            loaded_at=datetime.now(timezone.utc),
        )

    def _fallback(self, error: Optional[str]) -> RegistryLoadResult:
        registry = validate_unique_model_ids(self.fallback_registry.model_copy(deep=True))
        return RegistryLoadResult(
            registry=registry,
            source=RegistrySource.LOCAL_FALLBACK,
            error=error,
            loaded_at=datetime.now(timezone.utc),
        )
