"""
Governance Mode Resolver — derives the operating mode of a workspace.

Mapping (fail-safe, total):
  NOT_READY                                   -> GUARDED
  READY, governance document unresolved       -> GUARDED (anomaly, recorded as a warning)
  READY, governance document, governed=False  -> ADVISORY
  READY, governance document, governed=True   -> OPERATIONAL
  any failure reaching readiness or documents -> GUARDED

Missing, ambiguous or erroring input never yields a mode more permissive
than the least-informed case. The mode is recomputed on every request.
"""

from typing import Optional

from continuum_kernel.documents.resolver import KeyResolver
from continuum_kernel.errors import DocumentNotFoundError, TransientIOError
from continuum_kernel.governance.readiness import ReadinessService
from continuum_kernel.logging import get_logger
from continuum_kernel.models.document import CanonicalDocument
from continuum_kernel.models.workspace import (
    ModeResolution,
    OperatingMode,
    ReadinessStatus,
    WorkspaceReadiness,
)

logger = get_logger("governance.mode")

DEFAULT_GOVERNANCE_KEY = "continuum-workspace-governance.md"


def resolve_operating_mode(
    readiness: Optional[WorkspaceReadiness],
    governance_doc: Optional[CanonicalDocument],
) -> ModeResolution:
    """Pure derivation of the operating mode. `governance_doc=None` means unresolved."""
    if readiness is None:
        return ModeResolution(
            mode=OperatingMode.GUARDED,
            reasons=["Workspace readiness unknown"],
        )

    if readiness.status != ReadinessStatus.READY:
        reasons = list(readiness.reasons) or ["Workspace is NOT_READY"]
        known = readiness.status if isinstance(readiness.status, ReadinessStatus) else None
        return ModeResolution(
            mode=OperatingMode.GUARDED,
            readiness=known,
            reasons=reasons,
        )

    if governance_doc is None:
        anomaly = (
            "Workspace is READY but no workspace governance document was found"
        )
        return ModeResolution(
            mode=OperatingMode.GUARDED,
            readiness=readiness.status,
            reasons=[anomaly],
            warnings=[anomaly],
        )

    if governance_doc.governed is True:
        return ModeResolution(
            mode=OperatingMode.OPERATIONAL,
            readiness=readiness.status,
            reasons=[],
        )

    return ModeResolution(
        mode=OperatingMode.ADVISORY,
        readiness=readiness.status,
        reasons=[f"Governance document '{governance_doc.key}' is not governed"],
    )


class GovernanceModeResolver:
    """
    Resolves a workspace's mode from the readiness service and its governance document.

    Total with respect to errors: every failure becomes GUARDED.
    """

    def __init__(
        self,
        readiness_service: ReadinessService,
        key_resolver: KeyResolver,
        governance_key_template: str = DEFAULT_GOVERNANCE_KEY,
    ):
        self.readiness_service = readiness_service
        self.key_resolver = key_resolver
        self.governance_key_template = governance_key_template

    def governance_key(self, workspace_id: str) -> str:
        return self.governance_key_template.format(workspace_id=workspace_id)

    def resolve(self, workspace_id: str) -> ModeResolution:
        try:
            readiness = self.readiness_service.get_workspace_readiness(workspace_id)
        except Exception as e:
            logger.warning("Readiness check failed for workspace %s: %s", workspace_id, e)
            return _guarded(f"Failed to check workspace readiness: {e}")

        if readiness is None or readiness.status != ReadinessStatus.READY:
            return resolve_operating_mode(readiness, None)

        try:
            key = self.governance_key(workspace_id)
            governance_doc = self.key_resolver.find_by_key(key)
        except DocumentNotFoundError as e:
            if isinstance(e.__cause__, TransientIOError):
                logger.warning(
                    "Governance document lookup failed for workspace %s: %s",
                    workspace_id, e.__cause__,
                )
                return _guarded(
                    f"Failed to look up governance document: {e.__cause__}",
                    readiness.status,
                )
            resolution = resolve_operating_mode(readiness, None)
            logger.warning(
                "Workspace %s is READY without a governance document (key %r)",
                workspace_id, e.key,
            )
            return resolution
        except Exception as e:
            logger.warning(
                "Governance document lookup failed for workspace %s: %s", workspace_id, e
            )
            return _guarded(f"Failed to look up governance document: {e}", readiness.status)

        return resolve_operating_mode(readiness, governance_doc)


def _guarded(reason: str, readiness: Optional[ReadinessStatus] = None) -> ModeResolution:
    return ModeResolution(mode=OperatingMode.GUARDED, readiness=readiness, reasons=[reason])
