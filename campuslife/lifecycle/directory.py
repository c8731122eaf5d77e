"""User and club records: creation and the few edits the dashboards allow."""

from __future__ import annotations

import re
from urllib.parse import quote_plus

from ..document import Document
from ..errors import ConflictError, ValidationError
from ..models import Club, User, UserRole
from ..util import new_id, utc_now_iso

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Roles an admin may create accounts for; admins are only ever seeded
CREATABLE_ROLES = frozenset({UserRole.COORDINATOR, UserRole.STUDENT})


def default_avatar(name: str) -> str:
    return f"https://ui-avatars.com/api/?name={quote_plus(name)}&background=random"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _check_email(doc: Document, email: str, *, exclude_user_id: str | None = None) -> str:
    clean = email.strip()
    if not EMAIL_RE.match(clean):
        raise ValidationError(f"Invalid email address: {email!r}")
    existing = doc.user_by_email(clean)
    if existing is not None and existing.id != exclude_user_id:
        raise ConflictError("Email already exists")
    return clean


def create_user(
    doc: Document,
    name: str,
    email: str,
    role: UserRole | str,
    *,
    reg_no: str | None = None,
    department: str | None = None,
    phone: str | None = None,
    avatar: str | None = None,
    pin: str = "0000",
) -> User:
    """
    Add a coordinator or student account with the default PIN.

    Raises:
        ValidationError: missing name, bad email, or a role other than
            coordinator/student
        ConflictError: email already in use
    """
    try:
        role = UserRole(role)
    except ValueError as exc:
        raise ValidationError(f"Unknown role: {role}") from exc
    if role not in CREATABLE_ROLES:
        raise ValidationError(f"Cannot create {role.value} accounts")

    clean_name = name.strip()
    if not clean_name:
        raise ValidationError("Name is required")
    clean_email = _check_email(doc, email)

    user = User(
        id=new_id(),
        name=clean_name,
        email=clean_email,
        role=role,
        reg_no=_clean(reg_no),
        department=_clean(department),
        phone=_clean(phone),
        avatar=_clean(avatar) or default_avatar(clean_name),
    )
    doc.users.append(user)
    doc.pins[user.id] = pin
    return user


def update_profile(
    doc: Document,
    user_id: str,
    *,
    name: str | None = None,
    email: str | None = None,
    reg_no: str | None = None,
    department: str | None = None,
    phone: str | None = None,
) -> User:
    """
    Edit profile attributes. The account role never changes.

    PINs are keyed by user id, so changing the email keeps the PIN.
    """
    user = doc.require_user(user_id)
    if name is not None:
        if not name.strip():
            raise ValidationError("Name is required")
        new_name = name.strip()
    else:
        new_name = user.name
    new_email = _check_email(doc, email, exclude_user_id=user.id) if email is not None else user.email

    user.name = new_name
    user.email = new_email
    if reg_no is not None:
        user.reg_no = _clean(reg_no)
    if department is not None:
        user.department = _clean(department)
    if phone is not None:
        user.phone = _clean(phone)
    return user


def create_club(
    doc: Document,
    name: str,
    description: str,
    coordinator_id: str,
    *,
    created_by: str,
    category: str = "",
    image: str = "",
    now: str | None = None,
) -> Club:
    """
    Create a club owned by one coordinator.

    Raises:
        ValidationError: missing name, or the owner is not a coordinator
        NotFoundError: unknown coordinator
        ConflictError: the coordinator already owns a club
    """
    clean_name = name.strip()
    if not clean_name:
        raise ValidationError("Club name is required")

    coordinator = doc.require_user(coordinator_id)
    if coordinator.role != UserRole.COORDINATOR:
        raise ValidationError(f"{coordinator.name} is not a coordinator")
    owned = doc.club_for_coordinator(coordinator_id)
    if owned is not None:
        raise ConflictError(f"{coordinator.name} already coordinates {owned.name}")

    club = Club(
        id=new_id(),
        name=clean_name,
        description=description.strip(),
        coordinator_id=coordinator_id,
        image=image.strip(),
        category=category.strip(),
        created_at=now or utc_now_iso(),
        created_by=created_by,
    )
    doc.clubs.append(club)
    return club


def update_club(doc: Document, club_id: str, *, image: str) -> Club:
    """Replace the club image, the only club field a coordinator edits."""
    club = doc.require_club(club_id)
    club.image = image.strip()
    return club
