"""PIN authentication and PIN changes."""

from __future__ import annotations

import re

from .document import Document
from .errors import AuthenticationError, NotFoundError, ValidationError
from .models import User
from .storage.seed import DEFAULT_PIN

PIN_RE = re.compile(r"^\d{4}$")


def check_pin_format(pin: str) -> str:
    if not PIN_RE.match(pin or ""):
        raise ValidationError("PIN must be exactly 4 digits")
    return pin


def pin_for(doc: Document, user_id: str, default_pin: str = DEFAULT_PIN) -> str:
    """The stored PIN for a user; accounts without an entry use the default."""
    return doc.pins.get(user_id, default_pin)


def authenticate(doc: Document, email: str, pin: str, *, default_pin: str = DEFAULT_PIN) -> User:
    """
    Resolve (email, pin) to a user.

    Raises:
        NotFoundError: no user with this email
        ValidationError: the PIN is not 4 digits
        AuthenticationError: the PIN does not match
    """
    user = doc.user_by_email(email)
    if user is None:
        raise NotFoundError("User not found")
    check_pin_format(pin)
    if pin_for(doc, user.id, default_pin) != pin:
        raise AuthenticationError("Invalid PIN")
    return user


def change_pin(
    doc: Document,
    user_id: str,
    current: str,
    new: str,
    confirm: str,
    *,
    default_pin: str = DEFAULT_PIN,
) -> User:
    """
    Replace a user's PIN.

    Checks run in the order the profile form reports them: confirmation,
    format, then the current PIN.
    """
    user = doc.require_user(user_id)
    if new != confirm:
        raise ValidationError("New PINs do not match")
    check_pin_format(new)
    if pin_for(doc, user.id, default_pin) != current:
        raise AuthenticationError("Current PIN is incorrect")
    doc.pins[user.id] = new
    return user
