"""
Readiness Service client.

Readiness is computed entirely by the external service; this module only
fetches and normalizes it. GET /api/workspaces/{id} carries `readiness`
and `readinessReasons`.
"""

from typing import Optional, Protocol

import httpx

from continuum_kernel.errors import TransientIOError
from continuum_kernel.models.workspace import ReadinessStatus, WorkspaceReadiness


class ReadinessService(Protocol):
    def get_workspace_readiness(self, workspace_id: str) -> WorkspaceReadiness: ...


class HttpReadinessService:
    """Readiness fetched over HTTP with a bounded timeout."""

    SERVICE_NAME = "readiness-service"

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ):
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)

    def get_workspace_readiness(self, workspace_id: str) -> WorkspaceReadiness:
        try:
            response = self._client.get(f"/api/workspaces/{workspace_id}")
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransientIOError(self.SERVICE_NAME, f"timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransientIOError(self.SERVICE_NAME, str(e)) from e

        data = response.json()
        readiness = data.get("readiness")
        if readiness == ReadinessStatus.READY.value:
            return WorkspaceReadiness(status=ReadinessStatus.READY, reasons=[])

        # Anything other than an explicit READY is NOT_READY
        reasons = list(data.get("readinessReasons") or [])
        if readiness is None:
            reasons.append("Readiness not reported by workspace service")
        return WorkspaceReadiness(status=ReadinessStatus.NOT_READY, reasons=reasons)

    def close(self) -> None:
        self._client.close()
