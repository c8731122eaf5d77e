"""
Domain records stored in the campus document.

Each record serializes to the camelCase JSON shape of the persisted document
(`to_dict`) and is rebuilt from it (`from_dict`). Optional fields that are
unset are omitted from the serialized form.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal


class UserRole(str, Enum):
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    STUDENT = "student"


# Fixed club roles every club offers; custom roles are added per club.
BASE_ROLE_MEMBER = "member"
BASE_ROLE_SECRETARY = "secretary"
BASE_ROLE_TREASURER = "treasurer"
BASE_ROLE_VICE_PRESIDENT = "vice_president"

BASE_ROLES = frozenset({
    BASE_ROLE_MEMBER,
    BASE_ROLE_SECRETARY,
    BASE_ROLE_TREASURER,
    BASE_ROLE_VICE_PRESIDENT,
})

# Display order, most senior first
BASE_ROLE_ORDER = (
    BASE_ROLE_VICE_PRESIDENT,
    BASE_ROLE_SECRETARY,
    BASE_ROLE_TREASURER,
    BASE_ROLE_MEMBER,
)

BASE_ROLE_DESCRIPTIONS = {
    BASE_ROLE_MEMBER: "Regular club member with basic privileges",
    BASE_ROLE_SECRETARY: "Manages club records and communications",
    BASE_ROLE_TREASURER: "Handles club finances and budget",
    BASE_ROLE_VICE_PRESIDENT: "Assists in club leadership and coordination",
}

# Join request lifecycle
REQUEST_PENDING = "pending"
REQUEST_APPROVED = "approved"
REQUEST_REJECTED = "rejected"
REQUEST_STATUSES = frozenset({REQUEST_PENDING, REQUEST_APPROVED, REQUEST_REJECTED})

# Event proposal lifecycle
EVENT_PROPOSED = "proposed"
EVENT_APPROVED = "approved"
EVENT_REJECTED = "rejected"
EVENT_STATUSES = frozenset({EVENT_PROPOSED, EVENT_APPROVED, EVENT_REJECTED})

# Decisions accepted by the lifecycle engines
DECISION_APPROVED = "approved"
DECISION_REJECTED = "rejected"
DECISIONS = frozenset({DECISION_APPROVED, DECISION_REJECTED})


def _optional(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return str(value) if value is not None and value != "" else None


@dataclass(frozen=True)
class RoleRef:
    """
    A club role held by a membership.

    Either one of the fixed base roles (`kind="base"`) or a reference to a
    club's CustomRole by id (`kind="custom"`). `name` is the display label;
    for custom roles it mirrors the CustomRole name at assignment time.
    """

    kind: Literal["base", "custom"]
    name: str
    role_id: str | None = None

    @classmethod
    def base(cls, name: str = BASE_ROLE_MEMBER) -> RoleRef:
        return cls(kind="base", name=name)

    @classmethod
    def custom(cls, role: CustomRole) -> RoleRef:
        return cls(kind="custom", name=role.name, role_id=role.id)

    @property
    def is_custom(self) -> bool:
        return self.kind == "custom"

    def to_fields(self, name_key: str = "role", id_key: str = "customRoleId") -> dict[str, Any]:
        """Serialize as a display name plus, for custom roles, the role id."""
        result: dict[str, Any] = {name_key: self.name}
        if self.is_custom:
            result[id_key] = self.role_id
        return result

    @classmethod
    def from_fields(cls, name: Any, role_id: Any = None) -> RoleRef:
        if role_id:
            return cls(kind="custom", name=str(name or ""), role_id=str(role_id))
        return cls.base(str(name) if name else BASE_ROLE_MEMBER)

    def __str__(self) -> str:
        return self.name


@dataclass
class User:
    id: str
    name: str
    email: str
    role: UserRole
    reg_no: str | None = None
    department: str | None = None
    phone: str | None = None
    avatar: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
        }
        if self.reg_no is not None:
            result["regNo"] = self.reg_no
        if self.department is not None:
            result["department"] = self.department
        if self.phone is not None:
            result["phone"] = self.phone
        if self.avatar is not None:
            result["avatar"] = self.avatar
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            role=UserRole(data.get("role", UserRole.STUDENT.value)),
            reg_no=_optional(data, "regNo"),
            department=_optional(data, "department"),
            phone=_optional(data, "phone"),
            avatar=_optional(data, "avatar"),
        )


@dataclass
class Club:
    id: str
    name: str
    description: str
    coordinator_id: str
    image: str = ""
    category: str = ""
    created_at: str = ""
    created_by: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "coordinatorId": self.coordinator_id,
            "image": self.image,
            "category": self.category,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Club:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            coordinator_id=str(data.get("coordinatorId", "")),
            image=str(data.get("image", "")),
            category=str(data.get("category", "")),
            created_at=str(data.get("createdAt", "")),
            created_by=str(data.get("createdBy", "")),
        )


@dataclass
class ClubMembership:
    """Membership of one user in one club; (user_id, club_id) is unique."""

    user_id: str
    club_id: str
    joined_at: str
    role: RoleRef = field(default_factory=RoleRef.base)

    @property
    def key(self) -> tuple[str, str]:
        return (self.user_id, self.club_id)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "userId": self.user_id,
            "clubId": self.club_id,
            "joinedAt": self.joined_at,
        }
        result.update(self.role.to_fields())
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClubMembership:
        return cls(
            user_id=str(data["userId"]),
            club_id=str(data["clubId"]),
            joined_at=str(data.get("joinedAt", "")),
            role=RoleRef.from_fields(data.get("role"), data.get("customRoleId")),
        )


@dataclass
class JoinRequest:
    id: str
    user_id: str
    club_id: str
    status: str
    requested_at: str
    message: str | None = None
    response_message: str | None = None
    responded_at: str | None = None
    assigned_role: RoleRef | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == REQUEST_PENDING

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "userId": self.user_id,
            "clubId": self.club_id,
            "status": self.status,
            "requestedAt": self.requested_at,
        }
        if self.message is not None:
            result["message"] = self.message
        if self.response_message is not None:
            result["responseMessage"] = self.response_message
        if self.responded_at is not None:
            result["respondedAt"] = self.responded_at
        if self.assigned_role is not None:
            result.update(self.assigned_role.to_fields("assignedRole", "assignedRoleId"))
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JoinRequest:
        status = str(data.get("status", REQUEST_PENDING))
        if status not in REQUEST_STATUSES:
            raise ValueError(f"Invalid join request status: {status}")
        assigned = data.get("assignedRole")
        return cls(
            id=str(data["id"]),
            user_id=str(data["userId"]),
            club_id=str(data["clubId"]),
            status=status,
            requested_at=str(data.get("requestedAt", "")),
            message=_optional(data, "message"),
            response_message=_optional(data, "responseMessage"),
            responded_at=_optional(data, "respondedAt"),
            assigned_role=(
                RoleRef.from_fields(assigned, data.get("assignedRoleId")) if assigned else None
            ),
        )


@dataclass
class Event:
    id: str
    title: str
    description: str
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    location: str
    club_id: str
    image: str = ""
    registered_users: list[str] = field(default_factory=list)
    status: str = EVENT_PROPOSED
    proposed_by: str | None = None
    proposed_at: str | None = None
    approved_at: str | None = None
    rejected_at: str | None = None
    links: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_decided(self) -> bool:
        return self.status != EVENT_PROPOSED

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "clubId": self.club_id,
            "image": self.image,
            "registeredUsers": list(self.registered_users),
            "status": self.status,
        }
        if self.proposed_by is not None:
            result["proposedBy"] = self.proposed_by
        if self.proposed_at is not None:
            result["proposedAt"] = self.proposed_at
        if self.approved_at is not None:
            result["approvedAt"] = self.approved_at
        if self.rejected_at is not None:
            result["rejectedAt"] = self.rejected_at
        if self.links:
            result["links"] = [dict(link) for link in self.links]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        status = str(data.get("status", EVENT_APPROVED))
        if status not in EVENT_STATUSES:
            raise ValueError(f"Invalid event status: {status}")
        registered: list[str] = []
        for user_id in data.get("registeredUsers", []) or []:
            if str(user_id) not in registered:
                registered.append(str(user_id))
        links = [
            {"name": str(link.get("name", "")), "url": str(link.get("url", ""))}
            for link in data.get("links", []) or []
            if isinstance(link, dict) and link.get("url")
        ]
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            date=str(data.get("date", "")),
            time=str(data.get("time", "")),
            location=str(data.get("location", "")),
            club_id=str(data.get("clubId", "")),
            image=str(data.get("image", "")),
            registered_users=registered,
            status=status,
            proposed_by=_optional(data, "proposedBy"),
            proposed_at=_optional(data, "proposedAt"),
            approved_at=_optional(data, "approvedAt"),
            rejected_at=_optional(data, "rejectedAt"),
            links=links,
        )


@dataclass
class CustomRole:
    """A coordinator-defined role label, scoped to one club."""

    id: str
    club_id: str
    name: str
    description: str = ""
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "clubId": self.club_id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CustomRole:
        return cls(
            id=str(data["id"]),
            club_id=str(data.get("clubId", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            created_at=str(data.get("createdAt", "")),
        )
