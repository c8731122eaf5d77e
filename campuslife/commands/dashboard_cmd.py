"""Role dashboard command."""

from __future__ import annotations

from datetime import date

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import CampusLifeError
from ..views import AdminDashboard, CoordinatorDashboard, StudentDashboard
from .common import _manager, report_error


def _print_admin(console: Console, view: AdminDashboard) -> None:
    console.print("Admin Dashboard", style="bold")
    console.print(
        f"  {view.user_count} users, {view.club_count} clubs, {view.event_count} events "
        f"({len(view.coordinators)} coordinators, {len(view.students)} students)"
    )

    table = Table(title="Clubs")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("coordinator")
    table.add_column("members", justify="right")
    for summary in view.clubs:
        table.add_row(
            summary.club.id,
            summary.club.name,
            summary.coordinator.name if summary.coordinator else "",
            str(summary.member_count),
        )
    console.print(table)


def _print_coordinator(console: Console, view: CoordinatorDashboard) -> None:
    if view.club is None:
        console.print(f"{view.coordinator.name} has no club assigned yet.", style="yellow", markup=False)
        return

    console.print(f"{view.club.name}", style="bold", markup=False)

    requests = Table(title=f"Pending requests ({len(view.pending_requests)})")
    requests.add_column("id", style="cyan", no_wrap=True)
    requests.add_column("student")
    requests.add_column("message")
    for row in view.pending_requests:
        requests.add_row(row.request.id, row.user.name, row.request.message or "")
    console.print(requests)

    members = Table(title=f"Club Members ({len(view.members)})")
    members.add_column("user", style="cyan", no_wrap=True)
    members.add_column("name")
    members.add_column("role", style="magenta")
    for row in view.members:
        members.add_row(row.user.id, row.user.name, str(row.membership.role))
    console.print(members)

    events = Table(title="Club Events")
    events.add_column("id", style="cyan", no_wrap=True)
    events.add_column("date")
    events.add_column("title")
    events.add_column("status")
    for event in view.events:
        events.add_row(event.id, event.date, event.title, event.status)
    console.print(events)


def _print_student(console: Console, view: StudentDashboard) -> None:
    console.print(f"Welcome, {view.student.name}", style="bold", markup=False)

    if view.my_clubs:
        console.print("My clubs:")
        for mine in view.my_clubs:
            console.print(f"  {mine.club.name} ({mine.role})", markup=False)

    clubs = Table(title="Clubs")
    clubs.add_column("id", style="cyan", no_wrap=True)
    clubs.add_column("name")
    clubs.add_column("members", justify="right")
    clubs.add_column("status")
    labels = {"member": "Member", "pending": "Request Pending", "none": ""}
    for listing in view.clubs:
        clubs.add_row(listing.club.id, listing.club.name, str(listing.member_count), labels[listing.state])
    console.print(clubs)

    upcoming = Table(title="Upcoming Events")
    upcoming.add_column("id", style="cyan", no_wrap=True)
    upcoming.add_column("date")
    upcoming.add_column("time")
    upcoming.add_column("title")
    for event in view.upcoming_events:
        upcoming.add_row(event.id, event.date, event.time, event.title)
    console.print(upcoming)

    if view.my_clubs:
        past = Table(title="Past Events")
        past.add_column("date")
        past.add_column("title")
        for event in view.past_events:
            past.add_row(event.date, event.title)
        console.print(past)


def run_dashboard(
    settings: Settings,
    *,
    search: str = "",
    my_clubs_only: bool = False,
    today: date | None = None,
) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        view = mgr.dashboard(mgr.current_user_id(), search=search, today=today, my_clubs_only=my_clubs_only)
    except CampusLifeError as exc:
        return report_error(exc)

    if isinstance(view, AdminDashboard):
        _print_admin(console, view)
    elif isinstance(view, CoordinatorDashboard):
        _print_coordinator(console, view)
    else:
        _print_student(console, view)
    return 0
