"""Workspace readiness and the derived operating mode."""

from enum import Enum
from typing import List, Optional

from continuum_kernel.models.base import WireModel


class ReadinessStatus(str, Enum):
    READY = "READY"
    NOT_READY = "NOT_READY"


class WorkspaceReadiness(WireModel):
    """Produced by the external readiness service. Never computed here."""

    status: ReadinessStatus
    reasons: List[str] = []


class OperatingMode(str, Enum):
    """
    Derived capability tier. Totally ordered by permissiveness:
    GUARDED < ADVISORY < OPERATIONAL.

    Never persisted. Any stored value found elsewhere is stale.
    """

    GUARDED = "GUARDED"
    ADVISORY = "ADVISORY"
    OPERATIONAL = "OPERATIONAL"

    @property
    def rank(self) -> int:
        return _MODE_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, OperatingMode):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, OperatingMode):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, OperatingMode):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, OperatingMode):
            return NotImplemented
        return self.rank >= other.rank


_MODE_RANK = {
    OperatingMode.GUARDED: 0,
    OperatingMode.ADVISORY: 1,
    OperatingMode.OPERATIONAL: 2,
}


class ModeResolution(WireModel):
    """Mode resolution result: the mode plus the reasons that produced it."""

    mode: OperatingMode
    readiness: Optional[ReadinessStatus] = None  # None when readiness could not be determined
    reasons: List[str] = []
    warnings: List[str] = []                # Anomalies that did not block resolution


class ActionKind(str, Enum):
    READ = "read"
    ADVISORY = "advisory"
    GOVERNED = "governed"


class GovernedAction(str, Enum):
    """Actions that mutate governed state (canon artifacts, governance edits, schema changes)."""

    CREATE_CANON_DOC = "create_canon_doc"
    MODIFY_CANON_DOC = "modify_canon_doc"
    GOVERNANCE_EDIT = "governance_edit"
    SCHEMA_CHANGE = "schema_change"
    WORKSPACE_MODEL_CHANGE = "workspace_model_change"
    NODE_MODEL_CHANGE = "node_model_change"


class ActionCheck(WireModel):
    """The gate's ruling on one action."""

    allowed: bool
    explanation: str
    mode: OperatingMode
    action: Optional[str] = None
