"""Route protection decisions (application layer)."""

from dataclasses import dataclass
from typing import Literal

GuardStatus = Literal["WAIT", "PROMPT", "PERMIT"]
AdminGateStatus = Literal["PERMIT", "DENY", "WAIT"]


@dataclass(frozen=True)
class GuardResult:
    """Result contract for page guard evaluation."""

    status: GuardStatus
    reason: str


def evaluate(require_auth: bool, state) -> GuardResult:
    """Decide whether a page may render for the current session state."""
    if state.loading:
        return GuardResult(status="WAIT", reason="session_loading")
    if require_auth and state.account is None:
        return GuardResult(status="PROMPT", reason="auth_required")
    if state.account is None:
        return GuardResult(status="PERMIT", reason="public")
    return GuardResult(status="PERMIT", reason="authenticated")


def admin_gate(state) -> AdminGateStatus:
    # A signed-out visitor is denied too, never prompted to sign in.
    if state.loading:
        return "WAIT"
    return "PERMIT" if state.is_admin else "DENY"
