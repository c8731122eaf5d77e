"""
Bootstrap and seed documents.

The bootstrap document is what a fresh store starts with: one account per
role, every PIN at the default. The demo seed adds a club with an approved
event, a member and a custom role. Seed files (YAML or JSON) let a campus
start from its own roster.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..document import Document
from ..errors import ValidationError
from ..util import utc_now_iso

DEFAULT_PIN = "0000"


def _avatar(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={name.replace(' ', '+')}&background=random"


def _bootstrap_users() -> list[dict[str, Any]]:
    return [
        {
            "id": "1",
            "name": "Admin User",
            "email": "admin@college.edu",
            "role": "admin",
            "avatar": _avatar("Admin User"),
        },
        {
            "id": "2",
            "name": "John Tech",
            "email": "john@college.edu",
            "role": "coordinator",
            "department": "Computer Science",
            "regNo": "COORD001",
            "avatar": _avatar("John Tech"),
        },
        {
            "id": "3",
            "name": "Mike Student",
            "email": "mike@college.edu",
            "role": "student",
            "department": "Computer Science",
            "regNo": "STU001",
            "avatar": _avatar("Mike Student"),
        },
    ]


def bootstrap_document() -> dict[str, Any]:
    """Default document for a store that has never been written."""
    users = _bootstrap_users()
    return {
        "users": users,
        "clubs": [],
        "events": [],
        "clubMemberships": [],
        "joinRequests": [],
        "customRoles": [],
        "pins": {u["id"]: DEFAULT_PIN for u in users},
    }


def demo_document() -> dict[str, Any]:
    """Bootstrap accounts plus one populated club."""
    now = utc_now_iso()
    doc = bootstrap_document()
    doc["users"][1]["phone"] = "1234567890"
    doc["clubs"] = [
        {
            "id": "1",
            "name": "Tech Innovation Club",
            "description": "Exploring cutting-edge technologies and fostering innovation",
            "coordinatorId": "2",
            "image": "https://images.unsplash.com/photo-1540575467063-178a50c2df87",
            "category": "Technology",
            "createdAt": now,
            "createdBy": "1",
        }
    ]
    doc["events"] = [
        {
            "id": "1",
            "title": "Tech Workshop 2024",
            "description": "Learn about the latest technologies",
            "date": "2024-03-15",
            "time": "14:00",
            "location": "Main Auditorium",
            "clubId": "1",
            "image": "https://images.unsplash.com/photo-1540575467063-178a50c2df87",
            "registeredUsers": ["3"],
            "status": "approved",
        }
    ]
    doc["clubMemberships"] = [
        {"userId": "3", "clubId": "1", "joinedAt": now, "role": "member"},
    ]
    doc["customRoles"] = [
        {
            "id": "1",
            "clubId": "1",
            "name": "Tech Lead",
            "description": "Leads technical projects and mentors team members",
            "createdAt": now,
        }
    ]
    return doc


def load_seed(path: Path) -> dict[str, Any]:
    """
    Load a seed document from YAML (.yml/.yaml) or JSON.

    Raises:
        ValidationError: unreadable file or a top level that is not a mapping
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValidationError(f"Cannot read seed file {path}: {exc}") from exc

    if path.suffix.lower() in {".yml", ".yaml"}:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML in seed file {path}: {exc}") from exc
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON in seed file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValidationError(f"Seed file {path} must contain a mapping at the top level")
    return data


def seed_document(data: dict[str, Any]) -> Document:
    """
    Build a document from seed data without touching storage.

    Raises:
        ValidationError: a record is missing a field or holds an unknown
            role or status
    """
    try:
        return Document.from_dict(data)
    except ValidationError:
        raise
    except (ValueError, KeyError, TypeError) as exc:
        detail = f"missing field {exc}" if isinstance(exc, KeyError) else str(exc)
        raise ValidationError(f"Invalid seed document: {detail}") from exc
