"""
Workspace representations carry computed `readiness` and `aiMode` fields
alongside their stored fields. Computed fields are never persisted; any
stored value under those names is stale and is overwritten.
"""

from typing import Any, Dict

from continuum_kernel.models.workspace import ModeResolution

COMPUTED_FIELDS = ("readiness", "aiMode", "aiModeReasons", "aiModeWarnings")


def annotate_workspace(record: Dict[str, Any], resolution: ModeResolution) -> Dict[str, Any]:
    """Return a copy of a stored workspace record with the computed fields attached."""
    annotated = {k: v for k, v in record.items() if k not in COMPUTED_FIELDS}
    annotated["readiness"] = resolution.readiness.value if resolution.readiness else None
    annotated["aiMode"] = resolution.mode.value
    annotated["aiModeReasons"] = list(resolution.reasons)
    annotated["aiModeWarnings"] = list(resolution.warnings)
    return annotated


def annotate_node(node: Dict[str, Any], resolution: ModeResolution) -> Dict[str, Any]:
    """Annotate the workspace embedded in a node representation."""
    annotated = dict(node)
    workspace = node.get("workspace")
    if isinstance(workspace, dict):
        annotated["workspace"] = annotate_workspace(workspace, resolution)
    return annotated
