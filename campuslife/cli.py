"""CLI entrypoint for campuslife."""

import sys
from pathlib import Path

import click

from . import __version__
from .config import Settings, load_settings
from .errors import CampusLifeError
from .log import setup_logging

DECISIONS = {"approve": "approved", "reject": "rejected"}


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


@click.group()
@click.version_option(__version__, prog_name="campuslife")
@click.option(
    "--home",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Data directory (defaults to $CAMPUSLIFE_HOME or ~/.campuslife)",
)
@click.option("--verbose", "-V", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, home: Path | None, verbose: bool) -> None:
    """campuslife - campus clubs, memberships and events.

    Sign in with `campuslife login EMAIL`; later commands act as that user
    until `campuslife logout`.
    """
    ctx.ensure_object(dict)
    try:
        settings = load_settings(home.expanduser() if home is not None else None)
    except CampusLifeError as exc:
        raise click.ClickException(exc.message) from exc

    setup_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj["settings"] = settings


# ---------------------------------------------------------------------------
# Data
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--seed",
    "seed_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Start from a YAML or JSON document instead of the default accounts",
)
@click.option("--demo", is_flag=True, help="Include a sample club, event and custom role")
@click.option("--force", is_flag=True, help="Replace existing data")
@click.pass_context
def init(ctx: click.Context, seed_path: Path | None, demo: bool, force: bool) -> None:
    """Create (or reset) the campus data file."""
    from .commands.data_cmd import run_init

    sys.exit(run_init(_settings(ctx), seed_path=seed_path, demo=demo, force=force))


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Output file (default: ./campus_life_export_<date>.json)",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the export instead of writing a file")
@click.pass_context
def export(ctx: click.Context, output: Path | None, to_stdout: bool) -> None:
    """Export users, clubs, events, memberships and join requests (admin)."""
    from .commands.data_cmd import run_export

    sys.exit(run_export(_settings(ctx), output=output, to_stdout=to_stdout))


@cli.command()
@click.option("--last", "last_n", type=int, default=20, show_default=True, help="Show the last N operations")
@click.pass_context
def history(ctx: click.Context, last_n: int) -> None:
    """Show the audit trail of recorded operations (admin)."""
    from .commands.data_cmd import run_history

    sys.exit(run_history(_settings(ctx), last_n=last_n))


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@cli.command()
@click.pass_context
def profiles(ctx: click.Context) -> None:
    """List the accounts you can sign in as."""
    from .commands.auth_cmd import run_profiles

    sys.exit(run_profiles(_settings(ctx)))


@cli.command()
@click.argument("email")
@click.option("--pin", prompt=True, hide_input=True, help="4-digit PIN")
@click.pass_context
def login(ctx: click.Context, email: str, pin: str) -> None:
    """Sign in with an email address and PIN."""
    from .commands.auth_cmd import run_login

    sys.exit(run_login(_settings(ctx), email, pin))


@cli.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Sign out."""
    from .commands.auth_cmd import run_logout

    sys.exit(run_logout(_settings(ctx)))


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in user."""
    from .commands.auth_cmd import run_whoami

    sys.exit(run_whoami(_settings(ctx)))


@cli.command()
@click.option("--name", prompt="Full name", help="Full name")
@click.option("--email", prompt="Email", help="College email address")
@click.option("--reg-no", default=None, help="Registration number")
@click.option("--department", default=None, help="Department")
@click.option("--phone", default=None, help="Phone number")
@click.pass_context
def signup(
    ctx: click.Context,
    name: str,
    email: str,
    reg_no: str | None,
    department: str | None,
    phone: str | None,
) -> None:
    """Create a student account."""
    from .commands.auth_cmd import run_signup

    sys.exit(run_signup(_settings(ctx), name, email, reg_no=reg_no, department=department, phone=phone))


@cli.command()
@click.option("--current", prompt="Current PIN", hide_input=True, help="Current PIN")
@click.option("--new", "new_pin", prompt="New PIN", hide_input=True, help="New 4-digit PIN")
@click.option("--confirm", prompt="Confirm new PIN", hide_input=True, help="New PIN again")
@click.pass_context
def pin(ctx: click.Context, current: str, new_pin: str, confirm: str) -> None:
    """Change your PIN."""
    from .commands.auth_cmd import run_change_pin

    sys.exit(run_change_pin(_settings(ctx), current, new_pin, confirm))


@cli.command()
@click.option("--name", default=None, help="New display name")
@click.option("--email", default=None, help="New email address")
@click.option("--reg-no", default=None, help="Registration number")
@click.option("--department", default=None, help="Department")
@click.option("--phone", default=None, help="Phone number")
@click.pass_context
def profile(
    ctx: click.Context,
    name: str | None,
    email: str | None,
    reg_no: str | None,
    department: str | None,
    phone: str | None,
) -> None:
    """Edit your profile."""
    from .commands.auth_cmd import run_update_profile

    sys.exit(
        run_update_profile(
            _settings(ctx),
            name=name,
            email=email,
            reg_no=reg_no,
            department=department,
            phone=phone,
        )
    )


@cli.command()
@click.option("--search", default="", help="Filter clubs by name or description and events by title")
@click.option("--mine", "my_clubs_only", is_flag=True, help="Only list clubs you belong to")
@click.pass_context
def dashboard(ctx: click.Context, search: str, my_clubs_only: bool) -> None:
    """Show the dashboard for your role."""
    from .commands.dashboard_cmd import run_dashboard

    sys.exit(run_dashboard(_settings(ctx), search=search, my_clubs_only=my_clubs_only))


# ---------------------------------------------------------------------------
# Users (admin)
# ---------------------------------------------------------------------------


@cli.group()
def users() -> None:
    """Manage user accounts (admin)."""
    pass


@users.command("list")
@click.option("--role", type=click.Choice(["admin", "coordinator", "student"]), default=None)
@click.pass_context
def users_list(ctx: click.Context, role: str | None) -> None:
    """List users."""
    from .commands.users_cmd import run_users_list

    sys.exit(run_users_list(_settings(ctx), role=role))


@users.command("add")
@click.argument("name")
@click.argument("email")
@click.option("--role", type=click.Choice(["coordinator", "student"]), required=True)
@click.option("--reg-no", default=None, help="Registration number")
@click.option("--department", default=None, help="Department")
@click.option("--phone", default=None, help="Phone number")
@click.pass_context
def users_add(
    ctx: click.Context,
    name: str,
    email: str,
    role: str,
    reg_no: str | None,
    department: str | None,
    phone: str | None,
) -> None:
    """Create a coordinator or student account with the default PIN."""
    from .commands.users_cmd import run_users_add

    sys.exit(
        run_users_add(_settings(ctx), name, email, role, reg_no=reg_no, department=department, phone=phone)
    )


@users.command("remove")
@click.argument("user_id")
@click.confirmation_option(prompt="Remove this user and everything that references them?")
@click.pass_context
def users_remove(ctx: click.Context, user_id: str) -> None:
    """Delete a user; a coordinator's club goes with them."""
    from .commands.users_cmd import run_users_remove

    sys.exit(run_users_remove(_settings(ctx), user_id))


# ---------------------------------------------------------------------------
# Clubs
# ---------------------------------------------------------------------------


@cli.group()
def clubs() -> None:
    """Browse and manage clubs."""
    pass


@clubs.command("list")
@click.pass_context
def clubs_list(ctx: click.Context) -> None:
    """List clubs."""
    from .commands.clubs_cmd import run_clubs_list

    sys.exit(run_clubs_list(_settings(ctx)))


@clubs.command("show")
@click.argument("club_id")
@click.pass_context
def clubs_show(ctx: click.Context, club_id: str) -> None:
    """Show a club with its approved events."""
    from .commands.clubs_cmd import run_club_show

    sys.exit(run_club_show(_settings(ctx), club_id))


@clubs.command("create")
@click.argument("name")
@click.option("--description", default="", help="Club description")
@click.option("--coordinator", "coordinator_id", required=True, help="Coordinator user id")
@click.option("--category", default="", help="Category (e.g. Technology)")
@click.option("--image", default="", help="Image URL")
@click.pass_context
def clubs_create(
    ctx: click.Context,
    name: str,
    description: str,
    coordinator_id: str,
    category: str,
    image: str,
) -> None:
    """Create a club (admin)."""
    from .commands.clubs_cmd import run_club_create

    sys.exit(run_club_create(_settings(ctx), name, description, coordinator_id, category=category, image=image))


@clubs.command("remove")
@click.argument("club_id")
@click.confirmation_option(prompt="Remove this club with its members, requests and events?")
@click.pass_context
def clubs_remove(ctx: click.Context, club_id: str) -> None:
    """Delete a club (admin)."""
    from .commands.clubs_cmd import run_club_remove

    sys.exit(run_club_remove(_settings(ctx), club_id))


@clubs.command("set-image")
@click.argument("club_id")
@click.argument("image")
@click.pass_context
def clubs_set_image(ctx: click.Context, club_id: str, image: str) -> None:
    """Replace the club image (club coordinator)."""
    from .commands.clubs_cmd import run_club_set_image

    sys.exit(run_club_set_image(_settings(ctx), club_id, image))


@cli.group()
def members() -> None:
    """Club members and their roles."""
    pass


@members.command("list")
@click.argument("club_id")
@click.pass_context
def members_list(ctx: click.Context, club_id: str) -> None:
    """List members by role."""
    from .commands.clubs_cmd import run_members_list

    sys.exit(run_members_list(_settings(ctx), club_id))


@members.command("role")
@click.argument("club_id")
@click.argument("user_id")
@click.argument("role")
@click.pass_context
def members_role(ctx: click.Context, club_id: str, user_id: str, role: str) -> None:
    """Change a member's role (club coordinator)."""
    from .commands.clubs_cmd import run_member_role

    sys.exit(run_member_role(_settings(ctx), club_id, user_id, role))


@members.command("remove")
@click.argument("club_id")
@click.argument("user_id")
@click.pass_context
def members_remove(ctx: click.Context, club_id: str, user_id: str) -> None:
    """Remove a member (club coordinator)."""
    from .commands.clubs_cmd import run_member_remove

    sys.exit(run_member_remove(_settings(ctx), club_id, user_id))


@cli.group()
def roles() -> None:
    """Base and custom club roles."""
    pass


@roles.command("list")
@click.argument("club_id")
@click.pass_context
def roles_list(ctx: click.Context, club_id: str) -> None:
    """List the roles a club can assign."""
    from .commands.clubs_cmd import run_roles_list

    sys.exit(run_roles_list(_settings(ctx), club_id))


@roles.command("create")
@click.argument("club_id")
@click.argument("name")
@click.option("--description", default="", help="What the role does")
@click.pass_context
def roles_create(ctx: click.Context, club_id: str, name: str, description: str) -> None:
    """Define a custom role (club coordinator)."""
    from .commands.clubs_cmd import run_role_create

    sys.exit(run_role_create(_settings(ctx), club_id, name, description))


@roles.command("delete")
@click.argument("role_id")
@click.pass_context
def roles_delete(ctx: click.Context, role_id: str) -> None:
    """Delete a custom role; its holders become members (club coordinator)."""
    from .commands.clubs_cmd import run_role_delete

    sys.exit(run_role_delete(_settings(ctx), role_id))


# ---------------------------------------------------------------------------
# Join requests
# ---------------------------------------------------------------------------


@cli.group()
def requests() -> None:
    """Join requests."""
    pass


@requests.command("join")
@click.argument("club_id")
@click.option("--message", default=None, help="Why you want to join")
@click.pass_context
def requests_join(ctx: click.Context, club_id: str, message: str | None) -> None:
    """Ask to join a club (student)."""
    from .commands.requests_cmd import run_join

    sys.exit(run_join(_settings(ctx), club_id, message))


@requests.command("list")
@click.argument("club_id")
@click.option(
    "--status",
    type=click.Choice(["pending", "approved", "rejected", "all"]),
    default="pending",
    show_default=True,
)
@click.pass_context
def requests_list(ctx: click.Context, club_id: str, status: str) -> None:
    """List a club's join requests in the order they were made."""
    from .commands.requests_cmd import run_requests_list

    sys.exit(run_requests_list(_settings(ctx), club_id, status=None if status == "all" else status))


@requests.command("respond")
@click.argument("request_id")
@click.argument("decision", type=click.Choice(sorted(DECISIONS)))
@click.option("--message", default=None, help="Response shown to the student")
@click.option("--role", default=None, help="Role to assign on approval (default: member)")
@click.pass_context
def requests_respond(
    ctx: click.Context,
    request_id: str,
    decision: str,
    message: str | None,
    role: str | None,
) -> None:
    """Approve or reject a join request (club coordinator)."""
    from .commands.requests_cmd import run_request_respond

    sys.exit(run_request_respond(_settings(ctx), request_id, DECISIONS[decision], message=message, role=role))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@cli.group()
def events() -> None:
    """Club events."""
    pass


@events.command("list")
@click.option("--club", "club_id", default=None, help="Only this club's events")
@click.option("--all", "all_statuses", is_flag=True, help="Include proposed and rejected events (coordinator)")
@click.pass_context
def events_list(ctx: click.Context, club_id: str | None, all_statuses: bool) -> None:
    """List events by date."""
    from .commands.events_cmd import run_events_list

    sys.exit(run_events_list(_settings(ctx), club_id=club_id, all_statuses=all_statuses))


@events.command("propose")
@click.argument("club_id")
@click.option("--title", required=True)
@click.option("--date", "event_date", required=True, help="YYYY-MM-DD")
@click.option("--time", "event_time", required=True, help="HH:MM")
@click.option("--location", required=True)
@click.option("--description", default="")
@click.option("--image", default="", help="Image URL")
@click.option("--link", "links", multiple=True, help="name=url (repeatable)")
@click.pass_context
def events_propose(
    ctx: click.Context,
    club_id: str,
    title: str,
    event_date: str,
    event_time: str,
    location: str,
    description: str,
    image: str,
    links: tuple[str, ...],
) -> None:
    """Propose an event for a club you belong to (student)."""
    from .commands.events_cmd import run_event_propose

    sys.exit(
        run_event_propose(
            _settings(ctx),
            club_id,
            title=title,
            date=event_date,
            time=event_time,
            location=location,
            description=description,
            image=image,
            links=links,
        )
    )


@events.command("decide")
@click.argument("event_id")
@click.argument("decision", type=click.Choice(sorted(DECISIONS)))
@click.pass_context
def events_decide(ctx: click.Context, event_id: str, decision: str) -> None:
    """Approve or reject a proposed event (club coordinator)."""
    from .commands.events_cmd import run_event_decide

    sys.exit(run_event_decide(_settings(ctx), event_id, DECISIONS[decision]))


@events.command("register")
@click.argument("event_id")
@click.pass_context
def events_register(ctx: click.Context, event_id: str) -> None:
    """Register for an approved event (student)."""
    from .commands.events_cmd import run_event_register

    sys.exit(run_event_register(_settings(ctx), event_id))


@events.command("unregister")
@click.argument("event_id")
@click.pass_context
def events_unregister(ctx: click.Context, event_id: str) -> None:
    """Cancel an event registration (student)."""
    from .commands.events_cmd import run_event_unregister

    sys.exit(run_event_unregister(_settings(ctx), event_id))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
