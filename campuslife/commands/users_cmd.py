"""User directory commands (admin)."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import CampusLifeError
from .common import _manager, report_error, report_success


def run_users_list(settings: Settings, *, role: str | None = None) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        users = mgr.list_users(mgr.current_user_id(), role)
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Users")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("email")
    table.add_column("role", style="magenta")
    table.add_column("department", style="dim")
    for user in users:
        table.add_row(user.id, user.name, user.email, user.role.value, user.department or "")
    console.print(table)
    return 0


def run_users_add(
    settings: Settings,
    name: str,
    email: str,
    role: str,
    *,
    reg_no: str | None = None,
    department: str | None = None,
    phone: str | None = None,
) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        user = mgr.create_user(
            mgr.current_user_id(),
            name,
            email,
            role,
            reg_no=reg_no,
            department=department,
            phone=phone,
        )
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Created {user.role.value} {user.name} ({user.id})")
    return 0


def run_users_remove(settings: Settings, user_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        summary = mgr.delete_user(mgr.current_user_id(), user_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Removed user {user_id}")
    console.print(f"  Removed: {summary.describe()}", style="dim", markup=False)
    return 0
