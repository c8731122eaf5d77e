"""Join request commands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import CampusLifeError
from .common import _manager, report_error, report_success


def run_join(settings: Settings, club_id: str, message: str | None = None) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        request = mgr.request_join(mgr.current_user_id(), club_id, message)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Join request {request.id} sent")
    return 0


def run_requests_list(settings: Settings, club_id: str, *, status: str | None = "pending") -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        requests = mgr.join_requests(mgr.current_user_id(), club_id, status)
        doc = mgr.store.snapshot()
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Join requests")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("student")
    table.add_column("status", style="magenta")
    table.add_column("requested", style="dim")
    table.add_column("message")
    for request in requests:
        user = doc.user(request.user_id)
        table.add_row(
            request.id,
            user.name if user else request.user_id,
            request.status,
            request.requested_at[:10],
            request.message or "",
        )
    console.print(table)
    return 0


def run_request_respond(
    settings: Settings,
    request_id: str,
    decision: str,
    *,
    message: str | None = None,
    role: str | None = None,
) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        request = mgr.respond_to_request(mgr.current_user_id(), request_id, decision, message, role)
    except CampusLifeError as exc:
        return report_error(exc)
    if request.assigned_role is not None:
        report_success(console, f"Request {request_id} {request.status} as {request.assigned_role}")
    else:
        report_success(console, f"Request {request_id} {request.status}")
    return 0
