"""Club commands: clubs, members and custom roles."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import CampusLifeError
from ..models import BASE_ROLE_DESCRIPTIONS, BASE_ROLE_ORDER
from .common import _manager, report_error, report_success


def run_clubs_list(settings: Settings) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        actor_id = mgr.current_user_id()
        clubs = mgr.list_clubs(actor_id)
        doc = mgr.store.snapshot()
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Clubs")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("category", style="magenta")
    table.add_column("members", justify="right")
    table.add_column("coordinator", style="dim")
    for club in clubs:
        coordinator = doc.user(club.coordinator_id)
        table.add_row(
            club.id,
            club.name,
            club.category,
            str(len(doc.memberships_for_club(club.id))),
            coordinator.name if coordinator else "",
        )
    console.print(table)
    return 0


def run_club_show(settings: Settings, club_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        actor_id = mgr.current_user_id()
        club = mgr.get_club(actor_id, club_id)
        members = mgr.members(actor_id, club_id)
        events = mgr.events(actor_id, club_id)
    except CampusLifeError as exc:
        return report_error(exc)

    console.print(f"{club.name}", style="bold", markup=False)
    if club.category:
        console.print(f"  category: {club.category}", markup=False)
    if club.description:
        console.print(f"  {club.description}", markup=False)
    if club.image:
        console.print(f"  image: {club.image}", style="dim", markup=False)
    console.print(f"  members: {len(members)}")
    for event in events:
        console.print(f"  event: {event.date} {event.time} {event.title}", markup=False)
    return 0


def run_club_create(
    settings: Settings,
    name: str,
    description: str,
    coordinator_id: str,
    *,
    category: str = "",
    image: str = "",
) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        club = mgr.create_club(
            mgr.current_user_id(),
            name,
            description,
            coordinator_id,
            category=category,
            image=image,
        )
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Created club {club.name} ({club.id})")
    return 0


def run_club_remove(settings: Settings, club_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        summary = mgr.delete_club(mgr.current_user_id(), club_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Removed club {club_id}")
    console.print(f"  Removed: {summary.describe()}", style="dim", markup=False)
    return 0


def run_club_set_image(settings: Settings, club_id: str, image: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        club = mgr.update_club_image(mgr.current_user_id(), club_id, image)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Updated image for {club.name}")
    return 0


def run_members_list(settings: Settings, club_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        rows = mgr.members(mgr.current_user_id(), club_id)
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title=f"Members ({len(rows)})")
    table.add_column("user", style="cyan", no_wrap=True)
    table.add_column("name")
    table.add_column("role", style="magenta")
    table.add_column("joined", style="dim")
    for row in rows:
        table.add_row(row.user.id, row.user.name, str(row.membership.role), row.membership.joined_at[:10])
    console.print(table)
    return 0


def run_member_role(settings: Settings, club_id: str, user_id: str, role: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        membership = mgr.change_role(mgr.current_user_id(), user_id, club_id, role)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Role of {user_id} is now {membership.role}")
    return 0


def run_member_remove(settings: Settings, club_id: str, user_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        mgr.remove_member(mgr.current_user_id(), user_id, club_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Removed {user_id} from club {club_id}")
    return 0


def run_roles_list(settings: Settings, club_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        custom = mgr.custom_roles(mgr.current_user_id(), club_id)
    except CampusLifeError as exc:
        return report_error(exc)

    table = Table(title="Roles")
    table.add_column("role", style="magenta")
    table.add_column("kind")
    table.add_column("id", style="cyan", no_wrap=True)
    table.add_column("description", style="dim")
    for name in BASE_ROLE_ORDER:
        table.add_row(name, "base", "", BASE_ROLE_DESCRIPTIONS[name])
    for role in custom:
        table.add_row(role.name, "custom", role.id, role.description)
    console.print(table)
    return 0


def run_role_create(settings: Settings, club_id: str, name: str, description: str = "") -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        role = mgr.create_custom_role(mgr.current_user_id(), club_id, name, description)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Created role {role.name} ({role.id})")
    return 0


def run_role_delete(settings: Settings, role_id: str) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        role, reverted = mgr.delete_custom_role(mgr.current_user_id(), role_id)
    except CampusLifeError as exc:
        return report_error(exc)
    report_success(console, f"Deleted role {role.name}")
    if reverted:
        console.print(f"  {len(reverted)} member(s) reverted to member", style="dim")
    return 0
