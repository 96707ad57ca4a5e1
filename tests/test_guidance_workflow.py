import pytest

from siap_bimbingan.services.guidance_workflow import (
    ActorNotAllowedError,
    InvalidTransitionError,
    can_add_note,
    is_terminal,
    next_status,
)
from siap_bimbingan.utils.constants import Role, SessionStatus


@pytest.mark.parametrize(
    "current, action, role, expected",
    [
        ("PENDING", "approve", Role.DOSEN, SessionStatus.APPROVED),
        ("PENDING", "reject", Role.DOSEN, SessionStatus.REJECTED),
        ("OFFERED", "accept", Role.MAHASISWA, SessionStatus.APPROVED),
        ("APPROVED", "complete", Role.DOSEN, SessionStatus.COMPLETED),
        ("PENDING", "cancel", Role.MAHASISWA, SessionStatus.CANCELLED),
        ("APPROVED", "cancel", Role.MAHASISWA, SessionStatus.CANCELLED),
    ],
)
def test_allowed_transitions(current, action, role, expected):
    assert next_status(current, action, role) == expected


def test_decline_requires_reason():
    with pytest.raises(InvalidTransitionError):
        next_status("OFFERED", "decline", Role.MAHASISWA)
    with pytest.raises(InvalidTransitionError):
        next_status("OFFERED", "decline", Role.MAHASISWA, reason="   ")
    assert (
        next_status("OFFERED", "decline", Role.MAHASISWA, reason="Bentrok ujian")
        == SessionStatus.DECLINED
    )


@pytest.mark.parametrize(
    "current, action",
    [
        ("APPROVED", "approve"),
        ("OFFERED", "approve"),
        ("PENDING", "complete"),
        ("COMPLETED", "cancel"),
        ("REJECTED", "approve"),
    ],
)
def test_illegal_transitions(current, action):
    with pytest.raises(InvalidTransitionError):
        next_status(current, action, Role.DOSEN if action != "cancel" else Role.MAHASISWA)


def test_wrong_actor_is_refused():
    with pytest.raises(ActorNotAllowedError) as exc_info:
        next_status("PENDING", "approve", Role.MAHASISWA)
    assert exc_info.value.status_code == 403


def test_unknown_action():
    with pytest.raises(KeyError):
        next_status("PENDING", "postpone", Role.DOSEN)


def test_terminal_statuses_and_notes():
    assert is_terminal("COMPLETED")
    assert is_terminal(SessionStatus.CANCELLED)
    assert not is_terminal("APPROVED")
    assert can_add_note("APPROVED")
    assert can_add_note("COMPLETED")
    assert not can_add_note("PENDING")
