r"""
Membership lifecycle: join requests, role assignment, removal, custom roles.

Per (user, club) pair the states are:

    no relation --request_join--> request pending --approve--> member
                                                 \--reject--> (recorded; may request again)

Functions here mutate the document they are given, which is always a
working copy owned by a store transaction. Preconditions are checked before
the first mutation, so a raised error leaves the copy untouched.
"""

from __future__ import annotations

from ..document import Document
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import (
    BASE_ROLE_MEMBER,
    BASE_ROLES,
    DECISION_APPROVED,
    DECISIONS,
    REQUEST_PENDING,
    ClubMembership,
    CustomRole,
    JoinRequest,
    RoleRef,
)
from ..util import new_id, utc_now_iso


def _normalize_base_name(name: str) -> str:
    return name.strip().lower().replace(" ", "_").replace("-", "_")


def resolve_role(doc: Document, club_id: str, role: str | RoleRef | None) -> RoleRef:
    """
    Resolve a requested role for a membership in `club_id`.

    Accepts a base role name ("secretary", "Vice President"), a custom role
    name or id belonging to the club, or a RoleRef. Empty means `member`.

    Raises:
        ValidationError: the role is neither a base role nor one of the
            club's custom roles
    """
    if role is None:
        return RoleRef.base(BASE_ROLE_MEMBER)

    if isinstance(role, RoleRef):
        if not role.is_custom:
            if role.name not in BASE_ROLES:
                raise ValidationError(f"Unknown base role: {role.name}")
            return role
        custom = doc.custom_role(role.role_id or "")
        if custom is None or custom.club_id != club_id:
            raise ValidationError(f"Custom role {role.role_id} does not belong to club {club_id}")
        return RoleRef.custom(custom)

    text = role.strip()
    if not text:
        return RoleRef.base(BASE_ROLE_MEMBER)

    base = _normalize_base_name(text)
    if base in BASE_ROLES:
        return RoleRef.base(base)

    custom = doc.custom_role_by_name(club_id, text)
    if custom is None:
        by_id = doc.custom_role(text)
        custom = by_id if by_id is not None and by_id.club_id == club_id else None
    if custom is None:
        raise ValidationError(
            f"Unknown role '{text}' for club {club_id}; expected one of "
            f"{', '.join(sorted(BASE_ROLES))} or a custom role of the club"
        )
    return RoleRef.custom(custom)


def request_join(
    doc: Document,
    user_id: str,
    club_id: str,
    message: str | None = None,
    *,
    now: str | None = None,
) -> JoinRequest:
    """
    Create a pending join request.

    Raises:
        NotFoundError: unknown user or club
        ConflictError: already a member, or a request is already pending
    """
    doc.require_user(user_id)
    club = doc.require_club(club_id)

    if doc.is_member(user_id, club_id):
        raise ConflictError(f"Already a member of {club.name}")
    if doc.pending_request(user_id, club_id) is not None:
        raise ConflictError(f"A join request for {club.name} is already pending")

    request = JoinRequest(
        id=new_id(),
        user_id=user_id,
        club_id=club_id,
        status=REQUEST_PENDING,
        requested_at=now or utc_now_iso(),
        message=(message.strip() or None) if message else None,
    )
    doc.join_requests.append(request)
    return request


def respond_to_request(
    doc: Document,
    request_id: str,
    decision: str,
    response_message: str | None = None,
    assigned_role: str | RoleRef | None = None,
    *,
    now: str | None = None,
) -> JoinRequest:
    """
    Approve or reject a pending join request.

    Approval creates the membership with `assigned_role` (default `member`).
    Rejection creates nothing and ignores `assigned_role`.

    Raises:
        ValidationError: unknown decision or role
        NotFoundError: unknown request
        ConflictError: request already resolved, or the user is already a
            member of the club
    """
    if decision not in DECISIONS:
        raise ValidationError(f"Decision must be one of: {', '.join(sorted(DECISIONS))}")

    request = doc.require_join_request(request_id)
    if not request.is_pending:
        raise ConflictError(f"Join request {request_id} was already {request.status}")

    timestamp = now or utc_now_iso()
    role: RoleRef | None = None
    if decision == DECISION_APPROVED:
        role = resolve_role(doc, request.club_id, assigned_role)
        if doc.is_member(request.user_id, request.club_id):
            raise ConflictError(f"User {request.user_id} is already a member of club {request.club_id}")
        doc.memberships.append(
            ClubMembership(
                user_id=request.user_id,
                club_id=request.club_id,
                joined_at=timestamp,
                role=role,
            )
        )

    request.status = decision
    request.responded_at = timestamp
    request.response_message = (response_message or "").strip() or None
    request.assigned_role = role
    return request


def change_role(doc: Document, user_id: str, club_id: str, new_role: str | RoleRef) -> ClubMembership:
    """
    Replace a member's role in place. No history is kept.

    Raises:
        NotFoundError: no such membership
        ValidationError: unknown role
    """
    membership = doc.require_membership(user_id, club_id)
    membership.role = resolve_role(doc, club_id, new_role)
    return membership


def remove_membership(doc: Document, user_id: str, club_id: str) -> ClubMembership:
    """
    Delete a membership. The approved join request that created it stays.

    Raises:
        NotFoundError: no such membership
    """
    membership = doc.require_membership(user_id, club_id)
    doc.memberships.remove(membership)
    return membership


def create_custom_role(
    doc: Document,
    club_id: str,
    name: str,
    description: str = "",
    *,
    now: str | None = None,
) -> CustomRole:
    """
    Define a club-scoped role label.

    Raises:
        NotFoundError: unknown club
        ValidationError: empty name, or the name of a base role
        ConflictError: the club already has a role with this name
    """
    doc.require_club(club_id)
    clean = name.strip()
    if not clean:
        raise ValidationError("Role name is required")
    if _normalize_base_name(clean) in BASE_ROLES:
        raise ValidationError(f"'{clean}' is a built-in role")
    if doc.custom_role_by_name(club_id, clean) is not None:
        raise ConflictError(f"Role '{clean}' already exists in this club")

    role = CustomRole(
        id=new_id(),
        club_id=club_id,
        name=clean,
        description=description.strip(),
        created_at=now or utc_now_iso(),
    )
    doc.custom_roles.append(role)
    return role


def delete_custom_role(doc: Document, role_id: str) -> tuple[CustomRole, list[ClubMembership]]:
    """
    Delete a custom role; memberships holding it revert to `member`.

    Returns the deleted role and the memberships that were reverted.
    """
    role = doc.require_custom_role(role_id)
    reverted: list[ClubMembership] = []
    for membership in doc.memberships_for_club(role.club_id):
        if membership.role.is_custom and membership.role.role_id == role.id:
            membership.role = RoleRef.base(BASE_ROLE_MEMBER)
            reverted.append(membership)
    doc.custom_roles.remove(role)
    return role, reverted


def membership_state(doc: Document, user_id: str, club_id: str) -> str:
    """One of "member", "pending" or "none" for the (user, club) pair."""
    if doc.club(club_id) is None:
        raise NotFoundError(f"Club not found: {club_id}")
    if doc.is_member(user_id, club_id):
        return "member"
    if doc.pending_request(user_id, club_id) is not None:
        return "pending"
    return "none"
