r"""
Event proposal lifecycle.

    proposed --decide(approved)--> approved
             \--decide(rejected)--> rejected

Both outcomes are terminal. Exactly one of approved_at / rejected_at is set
once an event is decided. Registration is only open on approved events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..document import Document
from ..errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models import (
    DECISION_APPROVED,
    DECISIONS,
    EVENT_APPROVED,
    EVENT_PROPOSED,
    Event,
)
from ..util import new_id, utc_now_iso

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class EventDetails:
    """What a member fills in when proposing an event."""

    title: str
    date: str
    time: str
    location: str
    description: str = ""
    image: str = ""
    links: list[dict[str, str]] = field(default_factory=list)

    def validate(self) -> list[str]:
        errors: list[str] = []
        for name in ("title", "date", "time", "location"):
            if not str(getattr(self, name) or "").strip():
                errors.append(f"{name} is required")
        if self.date.strip():
            try:
                datetime.strptime(self.date.strip(), DATE_FORMAT)
            except ValueError:
                errors.append(f"date must be YYYY-MM-DD (got {self.date!r})")
        if self.time.strip():
            try:
                datetime.strptime(self.time.strip(), TIME_FORMAT)
            except ValueError:
                errors.append(f"time must be HH:MM (got {self.time!r})")
        for link in self.links:
            if not str(link.get("url", "")).strip():
                errors.append("every link needs a url")
                break
        return errors


def propose_event(
    doc: Document,
    club_id: str,
    proposer_id: str,
    details: EventDetails,
    *,
    now: str | None = None,
) -> Event:
    """
    Create an event in the `proposed` state on behalf of a club member.

    Raises:
        NotFoundError: unknown club or proposer
        AuthorizationError: proposer is not a member of the club
        ValidationError: missing or malformed details
    """
    club = doc.require_club(club_id)
    doc.require_user(proposer_id)
    if not doc.is_member(proposer_id, club_id):
        raise AuthorizationError(f"Only members of {club.name} can propose events for it")

    errors = details.validate()
    if errors:
        raise ValidationError("; ".join(errors))

    event = Event(
        id=new_id(),
        title=details.title.strip(),
        description=details.description.strip(),
        date=details.date.strip(),
        time=details.time.strip(),
        location=details.location.strip(),
        club_id=club_id,
        image=details.image.strip(),
        registered_users=[],
        status=EVENT_PROPOSED,
        proposed_by=proposer_id,
        proposed_at=now or utc_now_iso(),
        links=[
            {"name": str(link.get("name", "")).strip(), "url": str(link["url"]).strip()}
            for link in details.links
        ],
    )
    doc.events.append(event)
    return event


def decide_event(doc: Document, event_id: str, decision: str, *, now: str | None = None) -> Event:
    """
    Approve or reject a proposed event.

    Raises:
        ValidationError: unknown decision
        NotFoundError: unknown event
        ConflictError: the event was already decided
    """
    if decision not in DECISIONS:
        raise ValidationError(f"Decision must be one of: {', '.join(sorted(DECISIONS))}")

    event = doc.require_event(event_id)
    if event.is_decided:
        raise ConflictError(f"Event '{event.title}' was already {event.status}")

    timestamp = now or utc_now_iso()
    event.status = decision
    if decision == DECISION_APPROVED:
        event.approved_at = timestamp
        event.rejected_at = None
    else:
        event.rejected_at = timestamp
        event.approved_at = None
    return event


def register_for_event(doc: Document, event_id: str, user_id: str) -> Event:
    """
    Add a user to an approved event's registration set.

    Raises:
        NotFoundError: unknown event or user
        ConflictError: event not approved, or already registered
    """
    event = doc.require_event(event_id)
    doc.require_user(user_id)
    if event.status != EVENT_APPROVED:
        raise ConflictError(f"Event '{event.title}' is not open for registration ({event.status})")
    if user_id in event.registered_users:
        raise ConflictError(f"Already registered for '{event.title}'")
    event.registered_users.append(user_id)
    return event


def unregister_from_event(doc: Document, event_id: str, user_id: str) -> Event:
    """
    Remove a user from an event's registration set.

    Raises:
        NotFoundError: unknown event, or the user is not registered
    """
    event = doc.require_event(event_id)
    if user_id not in event.registered_users:
        raise NotFoundError(f"Not registered for '{event.title}'")
    event.registered_users.remove(user_id)
    return event
