"""Data commands: init, export, history."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

from rich.console import Console

from ..audit_log import format_audit_entry
from ..config import Settings
from ..errors import CampusLifeError, PersistenceError
from ..storage.seed import demo_document, load_seed
from .common import _manager, report_error, report_success


def export_filename(today: date | None = None) -> str:
    return f"campus_life_export_{(today or date.today()).isoformat()}.json"


def run_init(
    settings: Settings,
    *,
    seed_path: Path | None = None,
    demo: bool = False,
    force: bool = False,
) -> int:
    console = Console()
    err = Console(stderr=True)

    if settings.data_path.exists() and not force:
        err.print(
            f"Data already exists at {settings.data_path}; pass --force to replace it",
            style="bold red",
            markup=False,
            soft_wrap=True,
        )
        return 1

    try:
        if seed_path is not None:
            seed = load_seed(seed_path)
        elif demo:
            seed = demo_document()
        else:
            seed = None
        doc = _manager(settings).initialize(seed)
    except CampusLifeError as exc:
        return report_error(exc)

    report_success(console, f"Initialized {settings.data_path}")
    console.print(
        f"  {len(doc.users)} users, {len(doc.clubs)} clubs, {len(doc.events)} events, "
        f"{len(doc.memberships)} memberships",
        style="dim",
    )
    return 0


def run_export(settings: Settings, *, output: Path | None = None, to_stdout: bool = False) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        data = mgr.export(mgr.current_user_id())
    except CampusLifeError as exc:
        return report_error(exc)

    serialized = json.dumps(data, indent=2)
    if to_stdout:
        print(serialized)
        return 0

    path = output or Path.cwd() / export_filename()
    try:
        path.write_text(serialized + "\n", encoding="utf-8")
    except OSError as exc:
        return report_error(PersistenceError(f"Could not write export to {path}: {exc}"))

    report_success(console, f"Exported {len(data['users'])} users and {len(data['clubs'])} clubs to {path}")
    return 0


def run_history(settings: Settings, *, last_n: int | None = 20) -> int:
    console = Console()
    mgr = _manager(settings)
    try:
        entries = mgr.history(mgr.current_user_id(), last_n)
    except CampusLifeError as exc:
        return report_error(exc)

    if not entries:
        console.print("No recorded operations.", style="dim")
        return 0

    for entry in entries:
        console.print(format_audit_entry(entry), markup=False, highlight=False)
    return 0
