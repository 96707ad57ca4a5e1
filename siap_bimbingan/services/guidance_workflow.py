"""
Guidance session state machine.

PENDING and OFFERED are entry states (student request, advisor offer).
APPROVED is reached from either; COMPLETED, REJECTED, DECLINED and CANCELLED
are terminal.
"""
from typing import Dict, FrozenSet, NamedTuple, Optional, Union

from siap_bimbingan.utils.constants import TERMINAL_STATUSES, Role, SessionStatus


class WorkflowError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTransitionError(WorkflowError):
    status_code = 400


class ActorNotAllowedError(WorkflowError):
    status_code = 403


class Transition(NamedTuple):
    actor: Role
    sources: FrozenSet[SessionStatus]
    target: SessionStatus


TRANSITIONS: Dict[str, Transition] = {
    "approve": Transition(Role.DOSEN, frozenset({SessionStatus.PENDING}), SessionStatus.APPROVED),
    "reject": Transition(Role.DOSEN, frozenset({SessionStatus.PENDING}), SessionStatus.REJECTED),
    "accept": Transition(Role.MAHASISWA, frozenset({SessionStatus.OFFERED}), SessionStatus.APPROVED),
    "decline": Transition(Role.MAHASISWA, frozenset({SessionStatus.OFFERED}), SessionStatus.DECLINED),
    "complete": Transition(Role.DOSEN, frozenset({SessionStatus.APPROVED}), SessionStatus.COMPLETED),
    "cancel": Transition(
        Role.MAHASISWA,
        frozenset({SessionStatus.PENDING, SessionStatus.OFFERED, SessionStatus.APPROVED}),
        SessionStatus.CANCELLED,
    ),
}

NOTE_STATUSES = frozenset({SessionStatus.APPROVED, SessionStatus.COMPLETED})


def is_terminal(status: Union[str, SessionStatus]) -> bool:
    return SessionStatus(status) in TERMINAL_STATUSES


def next_status(
    current: Union[str, SessionStatus],
    action: str,
    actor_role: Union[str, Role],
    reason: Optional[str] = None,
) -> SessionStatus:
    """
    Resolve the status a session moves to when ``actor_role`` performs ``action``.

    Raises:
        KeyError: unknown action
        ActorNotAllowedError: the role may not perform this action
        InvalidTransitionError: the action is not allowed from ``current``,
            or a decline comes without a reason
    """
    transition = TRANSITIONS[action]
    current = SessionStatus(current)

    if Role(actor_role) != transition.actor:
        raise ActorNotAllowedError(
            f"Only {transition.actor.value} can {action} a guidance session"
        )

    if current not in transition.sources:
        raise InvalidTransitionError(
            f"Cannot {action} a session with status {current.value}"
        )

    if action == "decline" and not (reason and reason.strip()):
        raise InvalidTransitionError("A reason is required to decline an offered session")

    return transition.target


def can_add_note(status: Union[str, SessionStatus]) -> bool:
    return SessionStatus(status) in NOTE_STATUSES
