"""
Error taxonomy shared across the kernel.

- DocumentNotFoundError: key/document absent. Carries the full diagnostic context.
- ValidationError: malformed input (bad role, bad registry content, duplicate model id).
- TransientIOError: network or timeout failure against an external service.
"""

from typing import List, Optional


class ContinuumError(Exception):
    """Base class for kernel errors."""
    pass


class DocumentNotFoundError(ContinuumError):
    """Raised when a document id or key cannot be resolved."""

    def __init__(
        self,
        key: str,
        available_keys: Optional[List[str]] = None,
        detail: Optional[str] = None,
    ):
        self.key = key
        self.available_keys = list(available_keys or [])
        self.detail = detail
        super().__init__(self._format())

    def _format(self) -> str:
        lines = [f"Canonical document not found. Expected key: {self.key}"]
        if self.detail:
            lines.append(self.detail)
        if self.available_keys:
            lines.append("Available keys:")
            lines.extend(f"- {k}" for k in self.available_keys)
        else:
            lines.append("Available keys: none")
        return "\n".join(lines)


class ValidationError(ContinuumError):
    """Raised when input fails structural validation."""
    pass


class RegistryValidationError(ValidationError):
    """Raised when a model registry fails to parse or validate."""

    def __init__(self, message: str, model_id: Optional[str] = None):
        self.model_id = model_id
        super().__init__(message)


class TransientIOError(ContinuumError):
    """Raised when an external service times out or cannot be reached."""

    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(f"{service}: {message}")
