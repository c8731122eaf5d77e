"""
Lifecycle engines operating on a working copy of the campus document.

- membership: join requests, role assignment, removal, custom roles
- proposals: event proposal, decision, registration
- directory: user and club records
- cascade: deletes that must reach every dependent collection
"""

from .cascade import RemovalSummary, delete_club, delete_user
from .directory import create_club, create_user, update_club, update_profile
from .membership import (
    change_role,
    create_custom_role,
    delete_custom_role,
    membership_state,
    remove_membership,
    request_join,
    resolve_role,
    respond_to_request,
)
from .proposals import (
    EventDetails,
    decide_event,
    propose_event,
    register_for_event,
    unregister_from_event,
)

__all__ = [
    # Membership
    "request_join",
    "respond_to_request",
    "change_role",
    "remove_membership",
    "resolve_role",
    "membership_state",
    "create_custom_role",
    "delete_custom_role",
    # Events
    "EventDetails",
    "propose_event",
    "decide_event",
    "register_for_event",
    "unregister_from_event",
    # Directory
    "create_user",
    "update_profile",
    "create_club",
    "update_club",
    # Cascades
    "RemovalSummary",
    "delete_user",
    "delete_club",
]
