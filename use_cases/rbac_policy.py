"""Centralized admin access control."""

from use_cases.route_guard import AdminGateStatus, admin_gate


def enforce_admin(state, action: str) -> AdminGateStatus:
    """
    Evaluates the admin gate for the given action.
    Denials are written to the audit log; WAIT is returned while the session resolves.
    """
    import auth
    from infrastructure.repositories.sqlite_audit_repository import AuditAction

    status = admin_gate(state)

    if status == "DENY":
        account = state.account
        auth.get_audit_repo().log_action(
            AuditAction.ADMIN_DENIED,
            target_type="rbac",
            actor_id=account.id if account else None,
            actor_email=account.email if account else None,
            metadata={"target_action": action, "reason": "not_admin" if account else "not_signed_in"},
            result="deny"
        )

    return status
