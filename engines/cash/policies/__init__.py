"""
Comptoir Cash Engine — Policies
=================================
Cash register rules checked before a command reaches the reducer.
"""

from __future__ import annotations

from typing import Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason


def no_open_session_policy(
    command: Command,
    open_session_lookup,
) -> Optional[RejectionReason]:
    """
    Reject opening a session while another one is still open.

    open_session_lookup() returns the currently open session or None.
    """
    current = open_session_lookup()
    if current is not None:
        return RejectionReason(
            code=ReasonCode.CASH_SESSION_ALREADY_OPEN,
            message=(
                f"Cash session '{current.session_id}' is already open. "
                f"Close it before opening a new one."
            ),
            policy_name="no_open_session_policy",
        )
    return None


def session_must_be_open_policy(
    command: Command,
    session_lookup,
) -> Optional[RejectionReason]:
    """Reject closing a session that does not exist or is already closed."""
    session_id = command.payload.get("session_id")
    session = session_lookup(session_id)

    if session is None:
        return RejectionReason(
            code=ReasonCode.CASH_SESSION_NOT_FOUND,
            message=f"Cash session '{session_id}' not found.",
            policy_name="session_must_be_open_policy",
        )

    if not session.is_open:
        return RejectionReason(
            code=ReasonCode.CASH_SESSION_NOT_OPEN,
            message=(
                f"Cash session '{session_id}' is "
                f"{session.status.value}. Only open sessions can be closed."
            ),
            policy_name="session_must_be_open_policy",
        )

    return None
