"""Tests for the access control policy."""

from __future__ import annotations

import logging

import pytest

from campuslife.errors import AuthorizationError
from campuslife.models import Club, Event, User, UserRole
from campuslife.policy import Operation, Target, authorize, require

ADMIN = User(id="a", name="Ada", email="ada@college.edu", role=UserRole.ADMIN)
COORD = User(id="c", name="Cyd", email="cyd@college.edu", role=UserRole.COORDINATOR)
OTHER_COORD = User(id="c2", name="Cal", email="cal@college.edu", role=UserRole.COORDINATOR)
STUDENT = User(id="s", name="Sol", email="sol@college.edu", role=UserRole.STUDENT)

CLUB = Club(id="k", name="Chess", description="", coordinator_id="c")
OTHER_CLUB = Club(id="k2", name="Drama", description="", coordinator_id="c2")
EVENT = Event(id="e", title="Blitz", description="", date="2024-01-01", time="10:00", location="Hall", club_id="k")


def test_unauthenticated_can_only_sign_in() -> None:
    assert authorize(None, Operation.LOGIN)
    assert authorize(None, Operation.SIGNUP)
    assert authorize(None, Operation.VIEW_LOGIN_PROFILES)
    assert not authorize(None, Operation.VIEW_CLUBS)
    assert not authorize(None, Operation.REQUEST_JOIN, Target(club=CLUB))


@pytest.mark.parametrize(
    "operation",
    [
        Operation.CREATE_USER,
        Operation.DELETE_USER,
        Operation.CREATE_CLUB,
        Operation.DELETE_CLUB,
        Operation.EXPORT_DATA,
        Operation.VIEW_HISTORY,
    ],
)
def test_admin_only_operations(operation: Operation) -> None:
    assert authorize(ADMIN, operation)
    assert not authorize(COORD, operation)
    assert not authorize(STUDENT, operation)


def test_admin_has_no_student_or_coordinator_capabilities() -> None:
    assert not authorize(ADMIN, Operation.REQUEST_JOIN, Target(club=CLUB))
    assert not authorize(ADMIN, Operation.PROPOSE_EVENT, Target(club=CLUB, is_member=True))
    assert not authorize(ADMIN, Operation.RESPOND_JOIN_REQUEST, Target(club=CLUB))
    assert not authorize(ADMIN, Operation.DECIDE_EVENT, Target(club=CLUB, event=EVENT))
    assert authorize(ADMIN, Operation.VIEW_CLUB_REQUESTS, Target(club=CLUB))


@pytest.mark.parametrize(
    "operation",
    [
        Operation.UPDATE_CLUB,
        Operation.RESPOND_JOIN_REQUEST,
        Operation.CHANGE_MEMBER_ROLE,
        Operation.REMOVE_MEMBER,
        Operation.MANAGE_CUSTOM_ROLES,
    ],
)
def test_coordinator_scoped_to_own_club(operation: Operation) -> None:
    assert authorize(COORD, operation, Target(club=CLUB))
    assert not authorize(COORD, operation, Target(club=OTHER_CLUB))
    assert not authorize(COORD, operation)
    assert not authorize(STUDENT, operation, Target(club=CLUB))


def test_coordinator_decides_only_own_club_events() -> None:
    assert authorize(COORD, Operation.DECIDE_EVENT, Target(club=CLUB, event=EVENT))
    assert not authorize(OTHER_COORD, Operation.DECIDE_EVENT, Target(club=CLUB, event=EVENT))
    decision = authorize(COORD, Operation.DECIDE_EVENT, Target(club=OTHER_CLUB, event=EVENT))
    assert not decision


def test_student_proposes_only_as_member() -> None:
    assert authorize(STUDENT, Operation.PROPOSE_EVENT, Target(club=CLUB, is_member=True))
    denied = authorize(STUDENT, Operation.PROPOSE_EVENT, Target(club=CLUB, is_member=False))
    assert not denied
    assert "only members" in denied.reason
    assert authorize(STUDENT, Operation.REQUEST_JOIN, Target(club=CLUB))
    assert authorize(STUDENT, Operation.REGISTER_EVENT, Target(event=EVENT))
    assert not authorize(COORD, Operation.REGISTER_EVENT, Target(event=EVENT))


def test_everyone_signed_in_views_public_entities() -> None:
    for actor in (ADMIN, COORD, STUDENT):
        assert authorize(actor, Operation.VIEW_CLUBS)
        assert authorize(actor, Operation.VIEW_EVENTS)


def test_self_operations_need_matching_user() -> None:
    assert authorize(STUDENT, Operation.CHANGE_PIN, Target(user=STUDENT))
    assert not authorize(STUDENT, Operation.CHANGE_PIN, Target(user=COORD))
    assert not authorize(ADMIN, Operation.UPDATE_PROFILE, Target(user=STUDENT))


def test_require_raises_and_logs(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="campuslife.policy"):
        with pytest.raises(AuthorizationError, match="Not allowed"):
            require(STUDENT, Operation.DELETE_CLUB, Target(club=CLUB))

    assert any("Denied clubs.delete for s" in r.getMessage() for r in caplog.records)
    require(ADMIN, Operation.DELETE_CLUB, Target(club=CLUB))
