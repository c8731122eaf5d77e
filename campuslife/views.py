"""
Role dashboards: read models derived from one document snapshot.

Nothing here mutates the document. Dates are compared as YYYY-MM-DD strings,
which order the same way as the dates they name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .document import Document
from .models import (
    BASE_ROLE_ORDER,
    EVENT_APPROVED,
    REQUEST_PENDING,
    Club,
    ClubMembership,
    CustomRole,
    Event,
    JoinRequest,
    RoleRef,
    User,
    UserRole,
)


@dataclass
class ClubSummary:
    club: Club
    coordinator: User | None
    member_count: int


@dataclass
class AdminDashboard:
    user_count: int
    club_count: int
    event_count: int
    coordinators: list[User] = field(default_factory=list)
    students: list[User] = field(default_factory=list)
    clubs: list[ClubSummary] = field(default_factory=list)


@dataclass
class MemberRow:
    user: User
    membership: ClubMembership


@dataclass
class RequestRow:
    request: JoinRequest
    user: User


@dataclass
class CoordinatorDashboard:
    coordinator: User
    club: Club | None
    members: list[MemberRow] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    pending_requests: list[RequestRow] = field(default_factory=list)
    custom_roles: list[CustomRole] = field(default_factory=list)


@dataclass
class MyClub:
    club: Club
    role: RoleRef
    joined_at: str


@dataclass
class ClubListing:
    club: Club
    member_count: int
    state: str  # "member" | "pending" | "none"


@dataclass
class StudentDashboard:
    student: User
    my_clubs: list[MyClub] = field(default_factory=list)
    clubs: list[ClubListing] = field(default_factory=list)
    upcoming_events: list[Event] = field(default_factory=list)
    past_events: list[Event] = field(default_factory=list)


def role_sort_key(role: RoleRef) -> tuple[int, str]:
    """Base roles in seniority order, then custom roles by name."""
    if not role.is_custom and role.name in BASE_ROLE_ORDER:
        return (BASE_ROLE_ORDER.index(role.name), "")
    return (len(BASE_ROLE_ORDER), role.name.lower())


def _member_count(doc: Document, club_id: str) -> int:
    return len(doc.memberships_for_club(club_id))


def admin_dashboard(doc: Document) -> AdminDashboard:
    return AdminDashboard(
        user_count=len(doc.users),
        club_count=len(doc.clubs),
        event_count=len(doc.events),
        coordinators=list(doc.users_with_role(UserRole.COORDINATOR)),
        students=list(doc.users_with_role(UserRole.STUDENT)),
        clubs=[
            ClubSummary(
                club=club,
                coordinator=doc.user(club.coordinator_id),
                member_count=_member_count(doc, club.id),
            )
            for club in doc.clubs
        ],
    )


def club_members(doc: Document, club_id: str) -> list[MemberRow]:
    """Members of a club grouped by role; memberships of deleted users are skipped."""
    rows = []
    for membership in doc.memberships_for_club(club_id):
        user = doc.user(membership.user_id)
        if user is not None:
            rows.append(MemberRow(user=user, membership=membership))
    rows.sort(key=lambda row: (role_sort_key(row.membership.role), row.user.name.lower()))
    return rows


def pending_requests(doc: Document, club_id: str) -> list[RequestRow]:
    """Pending join requests in the order they were made."""
    rows = []
    for request in doc.requests_for_club(club_id, REQUEST_PENDING):
        user = doc.user(request.user_id)
        if user is not None:
            rows.append(RequestRow(request=request, user=user))
    return rows


def coordinator_dashboard(doc: Document, coordinator_id: str) -> CoordinatorDashboard:
    coordinator = doc.require_user(coordinator_id)
    club = doc.club_for_coordinator(coordinator_id)
    if club is None:
        return CoordinatorDashboard(coordinator=coordinator, club=None)

    return CoordinatorDashboard(
        coordinator=coordinator,
        club=club,
        members=club_members(doc, club.id),
        events=sorted(doc.events_for_club(club.id), key=lambda e: (e.date, e.time)),
        pending_requests=pending_requests(doc, club.id),
        custom_roles=doc.custom_roles_for_club(club.id),
    )


def search_clubs(doc: Document, term: str = "") -> list[Club]:
    """Case-insensitive substring match on club name or description."""
    needle = term.strip().lower()
    if not needle:
        return list(doc.clubs)
    return [c for c in doc.clubs if needle in c.name.lower() or needle in c.description.lower()]


def upcoming_events(doc: Document, today: date, term: str = "") -> list[Event]:
    """Approved events on or after `today`, soonest first, optionally by title."""
    cutoff = today.isoformat()
    needle = term.strip().lower()
    events = [
        e
        for e in doc.events
        if e.status == EVENT_APPROVED and e.date >= cutoff and needle in e.title.lower()
    ]
    events.sort(key=lambda e: (e.date, e.time))
    return events


def past_events(doc: Document, user_id: str, today: date) -> list[Event]:
    """Approved events before `today` in clubs the user belongs to, latest first."""
    cutoff = today.isoformat()
    club_ids = {m.club_id for m in doc.memberships_for_user(user_id)}
    events = [
        e for e in doc.events if e.status == EVENT_APPROVED and e.date < cutoff and e.club_id in club_ids
    ]
    events.sort(key=lambda e: (e.date, e.time), reverse=True)
    return events


def student_dashboard(
    doc: Document,
    student_id: str,
    *,
    search: str = "",
    today: date | None = None,
    my_clubs_only: bool = False,
) -> StudentDashboard:
    student = doc.require_user(student_id)
    today = today or date.today()

    my_clubs = []
    for membership in doc.memberships_for_user(student_id):
        club = doc.club(membership.club_id)
        if club is not None:
            my_clubs.append(MyClub(club=club, role=membership.role, joined_at=membership.joined_at))
    my_club_ids = {mc.club.id for mc in my_clubs}

    listings = []
    for club in search_clubs(doc, search):
        if my_clubs_only and club.id not in my_club_ids:
            continue
        if club.id in my_club_ids:
            state = "member"
        elif doc.pending_request(student_id, club.id) is not None:
            state = "pending"
        else:
            state = "none"
        listings.append(ClubListing(club=club, member_count=_member_count(doc, club.id), state=state))

    return StudentDashboard(
        student=student,
        my_clubs=my_clubs,
        clubs=listings,
        upcoming_events=upcoming_events(doc, today, search),
        past_events=past_events(doc, student_id, today),
    )
