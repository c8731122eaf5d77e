"""Tests for join requests, role assignment, removal and custom roles."""

from __future__ import annotations

import pytest

from campuslife.document import Document
from campuslife.errors import ConflictError, NotFoundError, ValidationError
from campuslife.lifecycle import (
    change_role,
    create_custom_role,
    create_user,
    delete_custom_role,
    membership_state,
    remove_membership,
    request_join,
    resolve_role,
    respond_to_request,
)
from campuslife.models import ClubMembership, RoleRef

from .conftest import CLUB_ID, CUSTOM_ROLE_ID, STUDENT_ID


@pytest.fixture
def sara(doc: Document) -> str:
    return create_user(doc, "Sara Khan", "sara@college.edu", "student").id


def test_request_join_creates_pending_request(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID, "I build robots")

    assert request.status == "pending"
    assert request.message == "I build robots"
    assert membership_state(doc, sara, CLUB_ID) == "pending"
    assert not doc.is_member(sara, CLUB_ID)


def test_duplicate_pending_request_is_a_conflict(doc: Document, sara: str) -> None:
    request_join(doc, sara, CLUB_ID)

    with pytest.raises(ConflictError, match="already pending"):
        request_join(doc, sara, CLUB_ID)
    assert len(doc.requests_for_club(CLUB_ID)) == 1


def test_member_cannot_request_again(doc: Document) -> None:
    with pytest.raises(ConflictError, match="Already a member"):
        request_join(doc, STUDENT_ID, CLUB_ID)


def test_request_for_unknown_club(doc: Document, sara: str) -> None:
    with pytest.raises(NotFoundError):
        request_join(doc, sara, "404")


def test_approve_with_secretary_role(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    respond_to_request(doc, request.id, "approved", "Welcome!", "secretary")

    memberships = [m for m in doc.memberships if m.user_id == sara and m.club_id == CLUB_ID]
    assert len(memberships) == 1
    assert memberships[0].role == RoleRef.base("secretary")
    assert doc.requests_for_club(CLUB_ID, "pending") == []
    assert request.status == "approved"
    assert request.response_message == "Welcome!"
    assert request.responded_at
    assert request.assigned_role == RoleRef.base("secretary")


def test_approve_defaults_to_member(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    respond_to_request(doc, request.id, "approved")

    assert doc.membership(sara, CLUB_ID).role == RoleRef.base("member")


def test_approve_with_custom_role_name(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    respond_to_request(doc, request.id, "approved", assigned_role="tech lead")

    role = doc.membership(sara, CLUB_ID).role
    assert role.is_custom
    assert role.role_id == CUSTOM_ROLE_ID


def test_unknown_role_leaves_request_pending(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    with pytest.raises(ValidationError):
        respond_to_request(doc, request.id, "approved", assigned_role="president")

    assert request.is_pending
    assert not doc.is_member(sara, CLUB_ID)


def test_rejection_creates_no_membership_and_allows_new_request(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    respond_to_request(doc, request.id, "rejected", "Club is full", assigned_role="secretary")

    assert request.status == "rejected"
    assert request.assigned_role is None
    assert not doc.is_member(sara, CLUB_ID)
    assert membership_state(doc, sara, CLUB_ID) == "none"

    again = request_join(doc, sara, CLUB_ID)
    assert again.id != request.id
    assert again.is_pending


def test_resolved_request_never_changes_status(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)
    respond_to_request(doc, request.id, "rejected")

    with pytest.raises(ConflictError):
        respond_to_request(doc, request.id, "approved")

    assert request.status == "rejected"
    assert not doc.is_member(sara, CLUB_ID)


def test_rejoin_after_removal_yields_single_membership(doc: Document, sara: str) -> None:
    first = request_join(doc, sara, CLUB_ID)
    respond_to_request(doc, first.id, "approved")
    remove_membership(doc, sara, CLUB_ID)
    second = request_join(doc, sara, CLUB_ID)
    respond_to_request(doc, second.id, "approved")

    assert first.status == "approved" and second.status == "approved"
    assert len([m for m in doc.memberships if m.user_id == sara]) == 1


def test_approving_when_already_member_is_a_conflict(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)
    # Membership added out of band while the request was pending
    doc.memberships.append(
        ClubMembership(user_id=sara, club_id=CLUB_ID, joined_at="2024-01-01")
    )

    with pytest.raises(ConflictError):
        respond_to_request(doc, request.id, "approved")

    assert request.is_pending
    assert len([m for m in doc.memberships if m.user_id == sara]) == 1


def test_invalid_decision(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)

    with pytest.raises(ValidationError):
        respond_to_request(doc, request.id, "maybe")


def test_change_role_in_place(doc: Document) -> None:
    membership = change_role(doc, STUDENT_ID, CLUB_ID, "Vice President")

    assert membership.role == RoleRef.base("vice_president")
    assert len(doc.memberships_for_user(STUDENT_ID)) == 1


def test_change_role_requires_membership(doc: Document, sara: str) -> None:
    with pytest.raises(NotFoundError):
        change_role(doc, sara, CLUB_ID, "treasurer")


def test_remove_membership_keeps_request_history(doc: Document, sara: str) -> None:
    request = request_join(doc, sara, CLUB_ID)
    respond_to_request(doc, request.id, "approved")

    remove_membership(doc, sara, CLUB_ID)

    assert not doc.is_member(sara, CLUB_ID)
    assert doc.join_request(request.id).status == "approved"


def test_create_custom_role_rules(doc: Document) -> None:
    role = create_custom_role(doc, CLUB_ID, "Event Head", "Runs events")
    assert role.name == "Event Head"

    with pytest.raises(ConflictError):
        create_custom_role(doc, CLUB_ID, "event head")
    with pytest.raises(ValidationError):
        create_custom_role(doc, CLUB_ID, "Treasurer")
    with pytest.raises(ValidationError):
        create_custom_role(doc, CLUB_ID, "   ")


def test_delete_custom_role_reverts_holders(doc: Document) -> None:
    change_role(doc, STUDENT_ID, CLUB_ID, "Tech Lead")

    role, reverted = delete_custom_role(doc, CUSTOM_ROLE_ID)

    assert role.name == "Tech Lead"
    assert [m.user_id for m in reverted] == [STUDENT_ID]
    assert doc.membership(STUDENT_ID, CLUB_ID).role == RoleRef.base("member")
    assert doc.custom_roles == []


def test_custom_role_of_another_club_is_rejected(doc: Document) -> None:
    with pytest.raises(ValidationError):
        resolve_role(doc, "other-club", "Tech Lead")
