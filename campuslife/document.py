"""
The campus document: one complete snapshot of all persisted state.

The document is always read and written as a whole. Lookups here are plain
linear scans over the collections; the dataset is a single campus held in one
JSON blob, so there is nothing to index.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from .errors import NotFoundError
from .models import (
    BASE_ROLES,
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

logger = logging.getLogger(__name__)

# Top-level keys of the persisted document
USERS = "users"
CLUBS = "clubs"
EVENTS = "events"
CLUB_MEMBERSHIPS = "clubMemberships"
JOIN_REQUESTS = "joinRequests"
CUSTOM_ROLES = "customRoles"
PINS = "pins"

COLLECTION_KEYS = (USERS, CLUBS, EVENTS, CLUB_MEMBERSHIPS, JOIN_REQUESTS, CUSTOM_ROLES)
DOCUMENT_KEYS = (*COLLECTION_KEYS, PINS)
EXPORT_KEYS = (USERS, CLUBS, EVENTS, CLUB_MEMBERSHIPS, JOIN_REQUESTS)


def normalize_raw(data: Mapping[str, Any] | None) -> dict[str, Any]:
    """Fill missing or malformed top-level collections with empty containers."""
    data = data or {}
    result: dict[str, Any] = {}
    for key in COLLECTION_KEYS:
        value = data.get(key)
        result[key] = list(value) if isinstance(value, list) else []
    pins = data.get(PINS)
    result[PINS] = dict(pins) if isinstance(pins, dict) else {}
    return result


@dataclass
class Document:
    users: list[User] = field(default_factory=list)
    clubs: list[Club] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)
    memberships: list[ClubMembership] = field(default_factory=list)
    join_requests: list[JoinRequest] = field(default_factory=list)
    custom_roles: list[CustomRole] = field(default_factory=list)
    pins: dict[str, str] = field(default_factory=dict)  # user id -> 4-digit PIN
    # Set by a gateway when the stored document could not be read and this is
    # the bootstrap stand-in. Never serialized; a store will not flush it.
    recovered: bool = field(default=False, compare=False, repr=False)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            USERS: [u.to_dict() for u in self.users],
            CLUBS: [c.to_dict() for c in self.clubs],
            EVENTS: [e.to_dict() for e in self.events],
            CLUB_MEMBERSHIPS: [m.to_dict() for m in self.memberships],
            JOIN_REQUESTS: [r.to_dict() for r in self.join_requests],
            CUSTOM_ROLES: [r.to_dict() for r in self.custom_roles],
            PINS: dict(self.pins),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> Document:
        """
        Build a document from its JSON shape.

        Missing collections become empty, email-keyed PINs are re-keyed to
        user ids, and free-text membership roles that name one of the club's
        custom roles are resolved to custom-role references.
        """
        raw = normalize_raw(data)
        doc = cls(
            users=[User.from_dict(u) for u in raw[USERS]],
            clubs=[Club.from_dict(c) for c in raw[CLUBS]],
            events=[Event.from_dict(e) for e in raw[EVENTS]],
            memberships=[ClubMembership.from_dict(m) for m in raw[CLUB_MEMBERSHIPS]],
            join_requests=[JoinRequest.from_dict(r) for r in raw[JOIN_REQUESTS]],
            custom_roles=[CustomRole.from_dict(r) for r in raw[CUSTOM_ROLES]],
        )
        doc.pins = doc._rekey_pins(raw[PINS])
        doc._resolve_legacy_roles()
        return doc

    def copy(self) -> Document:
        """Deep working copy; mutations on it never reach this document."""
        return copy.deepcopy(self)

    def _rekey_pins(self, pins: Mapping[str, Any]) -> dict[str, str]:
        by_email = {u.email.lower(): u.id for u in self.users}
        ids = {u.id for u in self.users}
        result: dict[str, str] = {}
        for key, pin in pins.items():
            key = str(key)
            if key in ids:
                result[key] = str(pin)
            elif key.lower() in by_email:
                # Entries already keyed by id win over legacy email keys
                result.setdefault(by_email[key.lower()], str(pin))
            else:
                logger.debug("Dropping PIN entry with no matching user: %s", key)
        return result

    def _resolve_legacy_roles(self) -> None:
        for membership in self.memberships:
            role = membership.role
            if role.is_custom:
                custom = self.custom_role(role.role_id or "")
                if custom is None:
                    logger.warning(
                        "Membership %s/%s references missing custom role %s; reverting to member",
                        membership.user_id,
                        membership.club_id,
                        role.role_id,
                    )
                    membership.role = RoleRef.base()
                elif custom.name != role.name:
                    membership.role = RoleRef.custom(custom)
                continue
            if role.name in BASE_ROLES:
                continue
            custom = self.custom_role_by_name(membership.club_id, role.name)
            if custom is not None:
                membership.role = RoleRef.custom(custom)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def user_by_email(self, email: str) -> User | None:
        needle = email.strip().lower()
        return next((u for u in self.users if u.email.lower() == needle), None)

    def club(self, club_id: str) -> Club | None:
        return next((c for c in self.clubs if c.id == club_id), None)

    def event(self, event_id: str) -> Event | None:
        return next((e for e in self.events if e.id == event_id), None)

    def join_request(self, request_id: str) -> JoinRequest | None:
        return next((r for r in self.join_requests if r.id == request_id), None)

    def custom_role(self, role_id: str) -> CustomRole | None:
        return next((r for r in self.custom_roles if r.id == role_id), None)

    def custom_role_by_name(self, club_id: str, name: str) -> CustomRole | None:
        needle = name.strip().lower()
        return next(
            (r for r in self.custom_roles if r.club_id == club_id and r.name.strip().lower() == needle),
            None,
        )

    def membership(self, user_id: str, club_id: str) -> ClubMembership | None:
        return next(
            (m for m in self.memberships if m.user_id == user_id and m.club_id == club_id),
            None,
        )

    def is_member(self, user_id: str, club_id: str) -> bool:
        return self.membership(user_id, club_id) is not None

    def memberships_for_club(self, club_id: str) -> list[ClubMembership]:
        return [m for m in self.memberships if m.club_id == club_id]

    def memberships_for_user(self, user_id: str) -> list[ClubMembership]:
        return [m for m in self.memberships if m.user_id == user_id]

    def pending_request(self, user_id: str, club_id: str) -> JoinRequest | None:
        return next(
            (
                r
                for r in self.join_requests
                if r.user_id == user_id and r.club_id == club_id and r.status == REQUEST_PENDING
            ),
            None,
        )

    def requests_for_club(self, club_id: str, status: str | None = None) -> list[JoinRequest]:
        """Join requests for a club in insertion order, optionally by status."""
        return [
            r
            for r in self.join_requests
            if r.club_id == club_id and (status is None or r.status == status)
        ]

    def events_for_club(self, club_id: str) -> list[Event]:
        return [e for e in self.events if e.club_id == club_id]

    def custom_roles_for_club(self, club_id: str) -> list[CustomRole]:
        return [r for r in self.custom_roles if r.club_id == club_id]

    def clubs_for_coordinator(self, coordinator_id: str) -> list[Club]:
        return [c for c in self.clubs if c.coordinator_id == coordinator_id]

    def club_for_coordinator(self, coordinator_id: str) -> Club | None:
        return next(iter(self.clubs_for_coordinator(coordinator_id)), None)

    def users_with_role(self, role: UserRole) -> Iterator[User]:
        return (u for u in self.users if u.role == role)

    # ------------------------------------------------------------------
    # Resolving lookups (raise NotFoundError)
    # ------------------------------------------------------------------

    def require_user(self, user_id: str) -> User:
        user = self.user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def require_club(self, club_id: str) -> Club:
        club = self.club(club_id)
        if club is None:
            raise NotFoundError(f"Club not found: {club_id}")
        return club

    def require_event(self, event_id: str) -> Event:
        event = self.event(event_id)
        if event is None:
            raise NotFoundError(f"Event not found: {event_id}")
        return event

    def require_join_request(self, request_id: str) -> JoinRequest:
        request = self.join_request(request_id)
        if request is None:
            raise NotFoundError(f"Join request not found: {request_id}")
        return request

    def require_custom_role(self, role_id: str) -> CustomRole:
        role = self.custom_role(role_id)
        if role is None:
            raise NotFoundError(f"Custom role not found: {role_id}")
        return role

    def require_membership(self, user_id: str, club_id: str) -> ClubMembership:
        membership = self.membership(user_id, club_id)
        if membership is None:
            raise NotFoundError(f"Membership not found: user {user_id} in club {club_id}")
        return membership


def export_document(doc: Document) -> dict[str, Any]:
    """The downloadable export: the document minus custom roles and PINs."""
    full = doc.to_dict()
    return {key: full[key] for key in EXPORT_KEYS}
