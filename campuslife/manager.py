"""
CampusManager: the single entry point for every campus operation.

Each mutation runs inside one store transaction:

    resolve actor from the fresh snapshot -> authorize -> run the lifecycle
    engine on the working copy -> flush

and only after the flush succeeds is the operation logged and appended to
the audit trail. The acting user is passed as an id and re-read from the
document each time, so a deleted account can no longer act.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import date
from typing import Any, Iterator

from . import auth, policy
from .audit_log import AuditEntry, log_operation, read_audit_log
from .config import Settings
from .document import Document, export_document
from .errors import ValidationError
from .lifecycle import (
    EventDetails,
    RemovalSummary,
    cascade,
    directory,
    membership,
    proposals,
)
from .models import EVENT_APPROVED, Club, ClubMembership, CustomRole, Event, JoinRequest, User, UserRole
from .policy import Operation, Target
from .storage.gateway import JsonFileGateway
from .storage.seed import seed_document
from .storage.session import SessionFile
from .store import DomainStore
from .views import (
    AdminDashboard,
    CoordinatorDashboard,
    MemberRow,
    StudentDashboard,
    admin_dashboard,
    club_members,
    coordinator_dashboard,
    student_dashboard,
)

logger = logging.getLogger(__name__)


def _actor(doc: Document, actor_id: str | None) -> User | None:
    return doc.user(actor_id) if actor_id else None


class CampusManager:
    def __init__(
        self,
        settings: Settings,
        *,
        store: DomainStore | None = None,
        session: SessionFile | None = None,
    ):
        self.settings = settings
        self.store = store or DomainStore(JsonFileGateway(settings.data_path))
        self.session = session or SessionFile(settings.home)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    @contextmanager
    def _mutation(self, actor_id: str | None) -> Iterator[tuple[Document, User | None]]:
        with self.store.transaction() as doc:
            yield doc, _actor(doc, actor_id)

    def _read(self, actor_id: str | None) -> tuple[Document, User | None]:
        doc = self.store.refresh()
        return doc, _actor(doc, actor_id)

    def _record(
        self,
        operation: Operation | str,
        actor_id: str | None,
        *,
        removed: RemovalSummary | None = None,
        **metadata: Any,
    ) -> None:
        name = operation.value if isinstance(operation, Operation) else operation
        logger.info("%s by %s %s", name, actor_id or "anonymous", metadata or "")
        if self.settings.audit:
            try:
                log_operation(self.settings.home, name, actor_id, removed, metadata)
            except OSError as exc:
                # The document is already saved; only the audit entry is lost
                logger.error("Saved %s but could not append to the audit log: %s", name, exc)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def initialize(self, seed: dict[str, Any] | None = None) -> Document:
        """Replace all stored data with `seed` or the bootstrap document, and sign out."""
        doc = self.store.reset(seed_document(seed) if seed is not None else None)
        self.session.clear()
        self._record("data.init", None, users=len(doc.users), clubs=len(doc.clubs))
        return doc

    # ------------------------------------------------------------------
    # Authentication and session
    # ------------------------------------------------------------------

    def login_profiles(self) -> list[User]:
        doc, _ = self._read(None)
        policy.require(None, Operation.VIEW_LOGIN_PROFILES)
        return list(doc.users)

    def login(self, email: str, pin: str) -> User:
        doc, _ = self._read(None)
        policy.require(None, Operation.LOGIN)
        user = auth.authenticate(doc, email, pin, default_pin=self.settings.default_pin)
        self.session.write(user.id)
        logger.info("Signed in %s (%s)", user.email, user.role.value)
        return user

    def logout(self) -> None:
        self.session.clear()

    def current_user(self) -> User | None:
        """The signed-in user, or None. A session for a deleted user is cleared."""
        session = self.session.read()
        if session is None:
            return None
        doc, user = self._read(session.user_id)
        if user is None:
            logger.warning("Session user %s no longer exists; signing out", session.user_id)
            self.session.clear()
        return user

    def current_user_id(self) -> str | None:
        user = self.current_user()
        return user.id if user is not None else None

    def signup(
        self,
        name: str,
        email: str,
        *,
        reg_no: str | None = None,
        department: str | None = None,
        phone: str | None = None,
    ) -> User:
        with self._mutation(None) as (doc, _):
            policy.require(None, Operation.SIGNUP)
            user = directory.create_user(
                doc,
                name,
                email,
                UserRole.STUDENT,
                reg_no=reg_no,
                department=department,
                phone=phone,
                pin=self.settings.default_pin,
            )
        self._record(Operation.SIGNUP, None, user=user.id, email=user.email)
        return user

    def change_pin(self, actor_id: str | None, current: str, new: str, confirm: str) -> User:
        with self._mutation(actor_id) as (doc, actor):
            policy.require(actor, Operation.CHANGE_PIN, Target(user=actor))
            user = auth.change_pin(doc, actor.id, current, new, confirm, default_pin=self.settings.default_pin)
        self._record(Operation.CHANGE_PIN, actor_id)
        return user

    def update_profile(self, actor_id: str | None, user_id: str | None = None, **fields: str | None) -> User:
        with self._mutation(actor_id) as (doc, actor):
            target = doc.require_user(user_id) if user_id else actor
            policy.require(actor, Operation.UPDATE_PROFILE, Target(user=target))
            user = directory.update_profile(doc, target.id, **fields)
        self._record(
            Operation.UPDATE_PROFILE,
            actor_id,
            user=user.id,
            fields=sorted(k for k, v in fields.items() if v is not None),
        )
        return user

    # ------------------------------------------------------------------
    # Directory (admin)
    # ------------------------------------------------------------------

    def list_users(self, actor_id: str | None, role: UserRole | str | None = None) -> list[User]:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_USERS)
        if role is None:
            return list(doc.users)
        return list(doc.users_with_role(UserRole(role)))

    def create_user(
        self,
        actor_id: str | None,
        name: str,
        email: str,
        role: UserRole | str,
        **profile: str | None,
    ) -> User:
        with self._mutation(actor_id) as (doc, actor):
            policy.require(actor, Operation.CREATE_USER)
            user = directory.create_user(doc, name, email, role, pin=self.settings.default_pin, **profile)
        self._record(Operation.CREATE_USER, actor_id, user=user.id, role=user.role.value)
        return user

    def delete_user(self, actor_id: str | None, user_id: str) -> RemovalSummary:
        with self._mutation(actor_id) as (doc, actor):
            target = doc.require_user(user_id)
            policy.require(actor, Operation.DELETE_USER, Target(user=target))
            summary = cascade.delete_user(doc, user_id)
        self._record(Operation.DELETE_USER, actor_id, removed=summary, user=user_id, email=target.email)
        return summary

    def create_club(
        self,
        actor_id: str | None,
        name: str,
        description: str,
        coordinator_id: str,
        *,
        category: str = "",
        image: str = "",
    ) -> Club:
        with self._mutation(actor_id) as (doc, actor):
            policy.require(actor, Operation.CREATE_CLUB)
            club = directory.create_club(
                doc,
                name,
                description,
                coordinator_id,
                created_by=actor.id,
                category=category,
                image=image,
            )
        self._record(Operation.CREATE_CLUB, actor_id, club=club.id, coordinator=coordinator_id)
        return club

    def delete_club(self, actor_id: str | None, club_id: str) -> RemovalSummary:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.DELETE_CLUB, Target(club=club))
            summary = cascade.delete_club(doc, club_id)
        self._record(Operation.DELETE_CLUB, actor_id, removed=summary, club=club_id, name=club.name)
        return summary

    def update_club_image(self, actor_id: str | None, club_id: str, image: str) -> Club:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.UPDATE_CLUB, Target(club=club))
            club = directory.update_club(doc, club_id, image=image)
        self._record(Operation.UPDATE_CLUB, actor_id, club=club_id)
        return club

    def export(self, actor_id: str | None) -> dict[str, Any]:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.EXPORT_DATA)
        return export_document(doc)

    def history(self, actor_id: str | None, last_n: int | None = None) -> list[AuditEntry]:
        _, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_HISTORY)
        return read_audit_log(self.settings.home, last_n)

    # ------------------------------------------------------------------
    # Clubs and membership
    # ------------------------------------------------------------------

    def list_clubs(self, actor_id: str | None) -> list[Club]:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_CLUBS)
        return list(doc.clubs)

    def get_club(self, actor_id: str | None, club_id: str) -> Club:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_CLUBS)
        return doc.require_club(club_id)

    def members(self, actor_id: str | None, club_id: str) -> list[MemberRow]:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_CLUBS)
        doc.require_club(club_id)
        return club_members(doc, club_id)

    def custom_roles(self, actor_id: str | None, club_id: str) -> list[CustomRole]:
        doc, actor = self._read(actor_id)
        policy.require(actor, Operation.VIEW_CLUBS)
        doc.require_club(club_id)
        return doc.custom_roles_for_club(club_id)

    def join_requests(self, actor_id: str | None, club_id: str, status: str | None = None) -> list[JoinRequest]:
        doc, actor = self._read(actor_id)
        club = doc.require_club(club_id)
        policy.require(actor, Operation.VIEW_CLUB_REQUESTS, Target(club=club))
        return doc.requests_for_club(club_id, status)

    def request_join(self, actor_id: str | None, club_id: str, message: str | None = None) -> JoinRequest:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.REQUEST_JOIN, Target(club=club))
            request = membership.request_join(doc, actor.id, club_id, message)
        self._record(Operation.REQUEST_JOIN, actor_id, request=request.id, club=club_id)
        return request

    def respond_to_request(
        self,
        actor_id: str | None,
        request_id: str,
        decision: str,
        response_message: str | None = None,
        assigned_role: str | None = None,
    ) -> JoinRequest:
        with self._mutation(actor_id) as (doc, actor):
            request = doc.require_join_request(request_id)
            club = doc.require_club(request.club_id)
            policy.require(actor, Operation.RESPOND_JOIN_REQUEST, Target(club=club))
            request = membership.respond_to_request(doc, request_id, decision, response_message, assigned_role)
        self._record(
            Operation.RESPOND_JOIN_REQUEST,
            actor_id,
            request=request_id,
            decision=decision,
            role=str(request.assigned_role) if request.assigned_role else None,
        )
        return request

    def change_role(self, actor_id: str | None, user_id: str, club_id: str, role: str) -> ClubMembership:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.CHANGE_MEMBER_ROLE, Target(club=club))
            updated = membership.change_role(doc, user_id, club_id, role)
        self._record(Operation.CHANGE_MEMBER_ROLE, actor_id, user=user_id, club=club_id, role=str(updated.role))
        return updated

    def remove_member(self, actor_id: str | None, user_id: str, club_id: str) -> ClubMembership:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.REMOVE_MEMBER, Target(club=club))
            removed = membership.remove_membership(doc, user_id, club_id)
        self._record(
            Operation.REMOVE_MEMBER,
            actor_id,
            removed=RemovalSummary(memberships=1),
            user=user_id,
            club=club_id,
        )
        return removed

    def create_custom_role(self, actor_id: str | None, club_id: str, name: str, description: str = "") -> CustomRole:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            policy.require(actor, Operation.MANAGE_CUSTOM_ROLES, Target(club=club))
            role = membership.create_custom_role(doc, club_id, name, description)
        self._record(Operation.MANAGE_CUSTOM_ROLES, actor_id, action="create", role=role.id, name=role.name)
        return role

    def delete_custom_role(self, actor_id: str | None, role_id: str) -> tuple[CustomRole, list[ClubMembership]]:
        with self._mutation(actor_id) as (doc, actor):
            role = doc.require_custom_role(role_id)
            club = doc.require_club(role.club_id)
            policy.require(actor, Operation.MANAGE_CUSTOM_ROLES, Target(club=club))
            role, reverted = membership.delete_custom_role(doc, role_id)
        self._record(
            Operation.MANAGE_CUSTOM_ROLES,
            actor_id,
            removed=RemovalSummary(custom_roles=1),
            action="delete",
            role=role.id,
            reverted=len(reverted),
        )
        return role, reverted

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def events(self, actor_id: str | None, club_id: str | None = None, *, all_statuses: bool = False) -> list[Event]:
        """
        Events sorted by date. Without `all_statuses` only approved events are
        listed; the full list of a club needs its coordinator (or an admin).
        """
        doc, actor = self._read(actor_id)
        if all_statuses:
            if club_id is None:
                raise ValidationError("A club is required to list events of every status")
            club = doc.require_club(club_id)
            policy.require(actor, Operation.VIEW_CLUB_EVENTS, Target(club=club))
            events = doc.events_for_club(club_id)
        else:
            policy.require(actor, Operation.VIEW_EVENTS)
            events = [e for e in doc.events if e.status == EVENT_APPROVED and (club_id is None or e.club_id == club_id)]
        return sorted(events, key=lambda e: (e.date, e.time))

    def propose_event(self, actor_id: str | None, club_id: str, details: EventDetails) -> Event:
        with self._mutation(actor_id) as (doc, actor):
            club = doc.require_club(club_id)
            is_member = actor is not None and doc.is_member(actor.id, club_id)
            policy.require(actor, Operation.PROPOSE_EVENT, Target(club=club, is_member=is_member))
            event = proposals.propose_event(doc, club_id, actor.id, details)
        self._record(Operation.PROPOSE_EVENT, actor_id, event=event.id, club=club_id, title=event.title)
        return event

    def decide_event(self, actor_id: str | None, event_id: str, decision: str) -> Event:
        with self._mutation(actor_id) as (doc, actor):
            event = doc.require_event(event_id)
            club = doc.require_club(event.club_id)
            policy.require(actor, Operation.DECIDE_EVENT, Target(club=club, event=event))
            event = proposals.decide_event(doc, event_id, decision)
        self._record(Operation.DECIDE_EVENT, actor_id, event=event_id, decision=decision)
        return event

    def register_for_event(self, actor_id: str | None, event_id: str) -> Event:
        with self._mutation(actor_id) as (doc, actor):
            event = doc.require_event(event_id)
            policy.require(actor, Operation.REGISTER_EVENT, Target(event=event))
            event = proposals.register_for_event(doc, event_id, actor.id)
        self._record(Operation.REGISTER_EVENT, actor_id, action="register", event=event_id)
        return event

    def unregister_from_event(self, actor_id: str | None, event_id: str) -> Event:
        with self._mutation(actor_id) as (doc, actor):
            event = doc.require_event(event_id)
            policy.require(actor, Operation.REGISTER_EVENT, Target(event=event))
            event = proposals.unregister_from_event(doc, event_id, actor.id)
        self._record(
            Operation.REGISTER_EVENT,
            actor_id,
            removed=RemovalSummary(registrations=1),
            action="unregister",
            event=event_id,
        )
        return event

    # ------------------------------------------------------------------
    # Dashboards
    # ------------------------------------------------------------------

    def dashboard(
        self,
        actor_id: str | None,
        *,
        search: str = "",
        today: date | None = None,
        my_clubs_only: bool = False,
    ) -> AdminDashboard | CoordinatorDashboard | StudentDashboard:
        """The dashboard for the actor's role."""
        doc, actor = self._read(actor_id)
        if actor is not None and actor.role == UserRole.ADMIN:
            policy.require(actor, Operation.VIEW_ADMIN_DASHBOARD)
            return admin_dashboard(doc)
        if actor is not None and actor.role == UserRole.COORDINATOR:
            policy.require(actor, Operation.VIEW_COORDINATOR_DASHBOARD)
            return coordinator_dashboard(doc, actor.id)
        policy.require(actor, Operation.VIEW_STUDENT_DASHBOARD)
        return student_dashboard(doc, actor.id, search=search, today=today, my_clubs_only=my_clubs_only)
