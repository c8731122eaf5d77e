"""Account commands: profiles, login, logout, whoami, signup, pin, profile."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import CampusLifeError
from .common import _manager, report_error, report_success


def run_profiles(settings: Settings) -> int:
    """List the accounts offered on the sign-in screen."""
    console = Console()
    try:
        users = _manager(settings).login_profiles()
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Profiles")
    table.add_column("name", style="cyan")
    table.add_column("email")
    table.add_column("role", style="magenta")
    for user in users:
        table.add_row(user.name, user.email, user.role.value)
    console.print(table)
    console.print("Default PIN for all accounts is 0000", style="dim")
    return 0


def run_login(settings: Settings, email: str, pin: str) -> int:
    console = Console()
    try:
        user = _manager(settings).login(email, pin)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Signed in as {user.name} ({user.role.value})")
    return 0


def run_logout(settings: Settings) -> int:
    _manager(settings).logout()
    Console().print("Signed out")
    return 0


def run_whoami(settings: Settings) -> int:
    console = Console()
    user = _manager(settings).current_user()
    if user is None:
        console.print("Not signed in", style="dim")
        return 1

    console.print(f"{user.name} <{user.email}>", markup=False)
    console.print(f"  role: {user.role.value}", markup=False)
    for label, value in (("reg no", user.reg_no), ("department", user.department), ("phone", user.phone)):
        if value:
            console.print(f"  {label}: {value}", markup=False)
    console.print(f"  id: {user.id}", style="dim")
    return 0


def run_signup(
    settings: Settings,
    name: str,
    email: str,
    *,
    reg_no: str | None = None,
    department: str | None = None,
    phone: str | None = None,
) -> int:
    console = Console()
    try:
        user = _manager(settings).signup(name, email, reg_no=reg_no, department=department, phone=phone)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Created student account for {user.email}; sign in with PIN {settings.default_pin}")
    return 0


def run_change_pin(settings: Settings, current: str, new: str, confirm: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        mgr.change_pin(mgr.current_user_id(), current, new, confirm)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, "PIN updated successfully")
    return 0


def run_update_profile(
    settings: Settings,
    *,
    name: str | None = None,
    email: str | None = None,
    reg_no: str | None = None,
    department: str | None = None,
    phone: str | None = None,
) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        user = mgr.update_profile(
            mgr.current_user_id(),
            name=name,
            email=email,
            reg_no=reg_no,
            department=department,
            phone=phone,
        )
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Profile updated for {user.name}")
    return 0
