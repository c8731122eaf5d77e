"""
Cascading deletes.

Every dependent collection is enumerated here once, so deleting a user or a
club removes the same set of records no matter which command asked for it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass

from ..document import Document
from ..errors import ConflictError
from ..models import UserRole


@dataclass
class RemovalSummary:
    """Counts of records removed by one delete operation."""

    users: int = 0
    clubs: int = 0
    memberships: int = 0
    join_requests: int = 0
    events: int = 0
    registrations: int = 0
    custom_roles: int = 0
    pins: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @property
    def total(self) -> int:
        return sum(asdict(self).values())

    def describe(self) -> str:
        parts = [f"{count} {name.replace('_', ' ')}" for name, count in asdict(self).items() if count]
        return ", ".join(parts) if parts else "nothing"


def _remove_club(doc: Document, club_id: str, summary: RemovalSummary) -> None:
    before = len(doc.clubs)
    doc.clubs = [c for c in doc.clubs if c.id != club_id]
    summary.clubs += before - len(doc.clubs)

    before = len(doc.memberships)
    doc.memberships = [m for m in doc.memberships if m.club_id != club_id]
    summary.memberships += before - len(doc.memberships)

    before = len(doc.join_requests)
    doc.join_requests = [r for r in doc.join_requests if r.club_id != club_id]
    summary.join_requests += before - len(doc.join_requests)

    before = len(doc.events)
    doc.events = [e for e in doc.events if e.club_id != club_id]
    summary.events += before - len(doc.events)

    before = len(doc.custom_roles)
    doc.custom_roles = [r for r in doc.custom_roles if r.club_id != club_id]
    summary.custom_roles += before - len(doc.custom_roles)


def delete_club(doc: Document, club_id: str) -> RemovalSummary:
    """
    Delete a club with its memberships, join requests, events and custom roles.

    Raises:
        NotFoundError: unknown club
    """
    doc.require_club(club_id)
    summary = RemovalSummary()
    _remove_club(doc, club_id, summary)
    return summary


def delete_user(doc: Document, user_id: str) -> RemovalSummary:
    """
    Delete a user and everything that references them.

    Removes the user's PIN, memberships, join requests and event
    registrations. A coordinator's clubs go too, each with its own
    dependents (see delete_club).

    Raises:
        NotFoundError: unknown user
        ConflictError: the user is the last admin
    """
    user = doc.require_user(user_id)
    if user.role == UserRole.ADMIN and sum(1 for _ in doc.users_with_role(UserRole.ADMIN)) <= 1:
        raise ConflictError("Cannot delete the last admin account")

    summary = RemovalSummary()
    if user.role == UserRole.COORDINATOR:
        for club in doc.clubs_for_coordinator(user_id):
            _remove_club(doc, club.id, summary)

    doc.users = [u for u in doc.users if u.id != user_id]
    summary.users = 1

    if doc.pins.pop(user_id, None) is not None:
        summary.pins = 1

    before = len(doc.memberships)
    doc.memberships = [m for m in doc.memberships if m.user_id != user_id]
    summary.memberships += before - len(doc.memberships)

    before = len(doc.join_requests)
    doc.join_requests = [r for r in doc.join_requests if r.user_id != user_id]
    summary.join_requests += before - len(doc.join_requests)

    for event in doc.events:
        if user_id in event.registered_users:
            event.registered_users = [uid for uid in event.registered_users if uid != user_id]
            summary.registrations += 1

    return summary
