"""
Access control policy.

`authorize` is a pure function of (actor, operation, target): it reads no
storage and has no side effects. Callers build the Target from the document
they are about to mutate, then call `require`, which raises before any
mutation happens.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import AuthorizationError
from .models import Club, Event, User, UserRole

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    # Unauthenticated
    VIEW_LOGIN_PROFILES = "auth.profiles"
    LOGIN = "auth.login"
    SIGNUP = "auth.signup"

    # Any signed-in user, on themselves
    CHANGE_PIN = "self.change_pin"
    UPDATE_PROFILE = "self.update_profile"

    # Any signed-in user
    VIEW_CLUBS = "clubs.view"
    VIEW_EVENTS = "events.view"

    # Admin
    CREATE_USER = "users.create"
    DELETE_USER = "users.delete"
    VIEW_USERS = "users.view"
    CREATE_CLUB = "clubs.create"
    DELETE_CLUB = "clubs.delete"
    EXPORT_DATA = "data.export"
    VIEW_HISTORY = "data.history"
    VIEW_ADMIN_DASHBOARD = "dashboard.admin"

    # Coordinator of the target club
    UPDATE_CLUB = "clubs.update"
    VIEW_CLUB_REQUESTS = "requests.view"
    RESPOND_JOIN_REQUEST = "requests.respond"
    DECIDE_EVENT = "events.decide"
    VIEW_CLUB_EVENTS = "events.view_all"
    CHANGE_MEMBER_ROLE = "members.change_role"
    REMOVE_MEMBER = "members.remove"
    MANAGE_CUSTOM_ROLES = "roles.manage"
    VIEW_COORDINATOR_DASHBOARD = "dashboard.coordinator"

    # Student
    REQUEST_JOIN = "requests.create"
    PROPOSE_EVENT = "events.propose"
    REGISTER_EVENT = "events.register"
    VIEW_STUDENT_DASHBOARD = "dashboard.student"


UNAUTHENTICATED_OPERATIONS = frozenset({
    Operation.VIEW_LOGIN_PROFILES,
    Operation.LOGIN,
    Operation.SIGNUP,
})

SELF_OPERATIONS = frozenset({Operation.CHANGE_PIN, Operation.UPDATE_PROFILE})

PUBLIC_OPERATIONS = frozenset({Operation.VIEW_CLUBS, Operation.VIEW_EVENTS})

ADMIN_OPERATIONS = frozenset({
    Operation.CREATE_USER,
    Operation.DELETE_USER,
    Operation.VIEW_USERS,
    Operation.CREATE_CLUB,
    Operation.DELETE_CLUB,
    Operation.EXPORT_DATA,
    Operation.VIEW_HISTORY,
    Operation.VIEW_ADMIN_DASHBOARD,
})

# Coordinator operations are scoped to the club they own
COORDINATOR_CLUB_OPERATIONS = frozenset({
    Operation.UPDATE_CLUB,
    Operation.VIEW_CLUB_REQUESTS,
    Operation.RESPOND_JOIN_REQUEST,
    Operation.DECIDE_EVENT,
    Operation.VIEW_CLUB_EVENTS,
    Operation.CHANGE_MEMBER_ROLE,
    Operation.REMOVE_MEMBER,
    Operation.MANAGE_CUSTOM_ROLES,
})

# Club-scoped reads an admin may also perform
ADMIN_READABLE_CLUB_OPERATIONS = frozenset({
    Operation.VIEW_CLUB_REQUESTS,
    Operation.VIEW_CLUB_EVENTS,
})

STUDENT_OPERATIONS = frozenset({
    Operation.REQUEST_JOIN,
    Operation.PROPOSE_EVENT,
    Operation.REGISTER_EVENT,
    Operation.VIEW_STUDENT_DASHBOARD,
})


@dataclass(frozen=True)
class Target:
    """
    What an operation acts on, as far as the policy needs to know.

    `is_member` says whether the actor holds a membership in `club`; the
    caller computes it because the policy never reads the document.
    """

    club: Club | None = None
    user: User | None = None
    event: Event | None = None
    is_member: bool = False


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str

    def __bool__(self) -> bool:
        return self.allowed


def _allow(reason: str) -> Decision:
    return Decision(True, reason)


def _deny(reason: str) -> Decision:
    return Decision(False, reason)


def authorize(actor: User | None, operation: Operation, target: Target | None = None) -> Decision:
    """Decide whether `actor` may perform `operation` on `target`."""
    target = target or Target()

    if operation in UNAUTHENTICATED_OPERATIONS:
        return _allow("open to everyone")

    if actor is None:
        return _deny("sign in required")

    if operation in PUBLIC_OPERATIONS:
        return _allow("visible to all signed-in users")

    if operation in SELF_OPERATIONS:
        if target.user is not None and target.user.id == actor.id:
            return _allow("own account")
        return _deny("users can only change their own account")

    if operation in ADMIN_OPERATIONS:
        if actor.role == UserRole.ADMIN:
            return _allow("admin")
        return _deny(f"{operation.value} requires the admin role")

    if operation == Operation.VIEW_COORDINATOR_DASHBOARD:
        if actor.role == UserRole.COORDINATOR:
            return _allow("coordinator")
        return _deny("only coordinators have a club dashboard")

    if operation in COORDINATOR_CLUB_OPERATIONS:
        if actor.role == UserRole.ADMIN and operation in ADMIN_READABLE_CLUB_OPERATIONS:
            return _allow("admin")
        if actor.role != UserRole.COORDINATOR:
            return _deny(f"{operation.value} requires the coordinator role")
        club = target.club
        if club is None:
            return _deny("no club given")
        if club.coordinator_id != actor.id:
            return _deny(f"{actor.name} does not coordinate {club.name}")
        if target.event is not None and target.event.club_id != club.id:
            return _deny("event belongs to another club")
        return _allow("coordinator of the club")

    if operation in STUDENT_OPERATIONS:
        if actor.role != UserRole.STUDENT:
            return _deny(f"{operation.value} is only available to students")
        if operation == Operation.PROPOSE_EVENT:
            if target.club is None:
                return _deny("no club given")
            if not target.is_member:
                return _deny(f"only members of {target.club.name} can propose events")
        if operation == Operation.REQUEST_JOIN and target.club is None:
            return _deny("no club given")
        return _allow("student")

    return _deny(f"unknown operation {operation.value}")


def require(actor: User | None, operation: Operation, target: Target | None = None) -> None:
    """
    Raise AuthorizationError unless `actor` may perform `operation`.
    """
    decision = authorize(actor, operation, target)
    if not decision.allowed:
        logger.warning(
            "Denied %s for %s: %s",
            operation.value,
            actor.id if actor is not None else "anonymous",
            decision.reason,
        )
        raise AuthorizationError(f"Not allowed: {decision.reason}")
