"""Event commands: listing, proposals, decisions, registration."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..config import Settings
from ..errors import CampusLifeError
from ..lifecycle import EventDetails
from ..models import EVENT_APPROVED, EVENT_REJECTED
from .common import _manager, report_error, report_success

STATUS_STYLES = {EVENT_APPROVED: "green", EVENT_REJECTED: "red"}


def parse_link(value: str) -> dict[str, str]:
    """`name=url` or a bare url."""
    name, sep, url = value.partition("=")
    if not sep:
        return {"name": "", "url": value.strip()}
    return {"name": name.strip(), "url": url.strip()}


def run_events_list(settings: Settings, *, club_id: str | None = None, all_statuses: bool = False) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        events = mgr.events(mgr.current_user_id(), club_id, all_statuses=all_statuses)
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Events")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("date")
    table.add_column("time")
    table.add_column("title")
    table.add_column("location", style="dim")
    table.add_column("status")
    table.add_column("registered", justify="right")
    for event in events:
        table.add_row(
            event.id,
            event.date,
            event.time,
            event.title,
            event.location,
            Text(event.status, style=STATUS_STYLES.get(event.status, "yellow")),
            str(len(event.registered_users)),
        )
    console.print(table)
    return 0


def run_event_propose(
    settings: Settings,
    club_id: str,
    *,
    title: str,
    date: str,
    time: str,
    location: str,
    description: str = "",
    image: str = "",
    links: list[str] | tuple[str, ...] = (),
) -> int:
    console = Console()
    mgr = _manager(settings)
    details = EventDetails(
        title=title,
        date=date,
        time=time,
        location=location,
        description=description,
        image=image,
        links=[parse_link(link) for link in links],
    )
    try:
        event = mgr.propose_event(mgr.current_user_id(), club_id, details)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Proposed event {event.title} ({event.id}); awaiting the coordinator")
    return 0


def run_event_decide(settings: Settings, event_id: str, decision: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        event = mgr.decide_event(mgr.current_user_id(), event_id, decision)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Event {event.title} {event.status}")
    return 0


def run_event_register(settings: Settings, event_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        event = mgr.register_for_event(mgr.current_user_id(), event_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Registered for {event.title}")
    return 0


def run_event_unregister(settings: Settings, event_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        event = mgr.unregister_from_event(mgr.current_user_id(), event_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Unregistered from {event.title}")
    return 0
