"""Helpers shared by the command modules."""

from __future__ import annotations

from rich.console import Console

from ..config import Settings
from ..errors import CampusLifeError
from ..manager import CampusManager


def _manager(settings: Settings) -> CampusManager:
    return CampusManager(settings)


def report_error(exc: CampusLifeError) -> int:
    """Print a failed operation on stderr and return the exit code."""
    Console(stderr=True).print(exc.message, style="bold red", markup=False, soft_wrap=True)
    return 1


def report_success(console: Console, message: str) -> None:
    console.print(message, style="green", markup=False, soft_wrap=True)
