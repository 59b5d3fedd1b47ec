"""
Action Gate — stateless permission check against the operating mode.

  OPERATIONAL: every action, governed mutations included
  ADVISORY:    reads and advisory actions; governed mutations blocked
  GUARDED:     reads only

The gate must be consulted immediately before each governed action. The mode
may change between fetches, so rulings are never cached.
"""

from typing import List, Optional, Union

from continuum_kernel.governance.mode import GovernanceModeResolver
from continuum_kernel.logging import get_logger
from continuum_kernel.models.workspace import (
    ActionCheck,
    ActionKind,
    GovernedAction,
    OperatingMode,
)

logger = get_logger("governance.gate")

_MINIMUM_MODE = {
    ActionKind.READ: OperatingMode.GUARDED,
    ActionKind.ADVISORY: OperatingMode.ADVISORY,
    ActionKind.GOVERNED: OperatingMode.OPERATIONAL,
}

_BLOCKED_MESSAGES = {
    OperatingMode.GUARDED: (
        "Workspace is GUARDED: govern Workspace Canon and Scope Boundaries "
        "to unlock governed actions."
    ),
    OperatingMode.ADVISORY: (
        "Workspace is ADVISORY: mark the workspace governance document as governed "
        "to unlock governed actions."
    ),
}


def classify_action(action: Union[ActionKind, GovernedAction, str, None]) -> ActionKind:
    """Map an action name to its kind. Anything unrecognized is treated as governed."""
    if isinstance(action, ActionKind):
        return action
    if action is None or isinstance(action, GovernedAction):
        return ActionKind.GOVERNED
    try:
        return ActionKind(action)
    except ValueError:
        return ActionKind.GOVERNED


def _explain_block(mode: OperatingMode, reasons: List[str]) -> str:
    message = _BLOCKED_MESSAGES.get(mode, f"Workspace mode {mode} does not permit this action.")
    if reasons:
        return f"{message} Current issues: {', '.join(reasons)}"
    return message


def check_action_allowed(
    mode: OperatingMode,
    action: Union[ActionKind, GovernedAction, str, None],
    reasons: Optional[List[str]] = None,
) -> ActionCheck:
    """Rule on a single action under the given mode."""
    reasons = reasons or []
    kind = classify_action(action)
    action_name = action.value if hasattr(action, "value") else action

    try:
        mode = OperatingMode(mode)
    except ValueError:
        mode = OperatingMode.GUARDED

    if mode >= _MINIMUM_MODE[kind]:
        return ActionCheck(
            allowed=True,
            explanation=f"{kind.value} action permitted in {mode.value} mode.",
            mode=mode,
            action=action_name,
        )

    return ActionCheck(
        allowed=False,
        explanation=_explain_block(mode, reasons),
        mode=mode,
        action=action_name,
    )


def check_governed_action_allowed(
    mode: OperatingMode, reasons: Optional[List[str]] = None
) -> ActionCheck:
    """Governed actions are allowed only in OPERATIONAL mode."""
    return check_action_allowed(mode, ActionKind.GOVERNED, reasons)


class ActionGate:
    """Resolves the mode afresh and rules on an action, on every call."""

    def __init__(self, mode_resolver: GovernanceModeResolver):
        self.mode_resolver = mode_resolver

    def authorize(
        self,
        workspace_id: str,
        action: Union[ActionKind, GovernedAction, str, None] = ActionKind.GOVERNED,
    ) -> ActionCheck:
        resolution = self.mode_resolver.resolve(workspace_id)
        check = check_action_allowed(resolution.mode, action, resolution.reasons)
        if not check.allowed:
            logger.info(
                "Blocked %s on workspace %s in %s mode",
                check.action, workspace_id, check.mode.value,
            )
        return check
