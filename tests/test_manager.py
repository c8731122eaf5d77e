"""Tests for CampusManager: authorization, transactions, sessions and audit."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path

import pytest

from campuslife.audit_log import read_audit_log
from campuslife.errors import AuthorizationError, ConflictError, PersistenceError, ValidationError
from campuslife.lifecycle import EventDetails
from campuslife.manager import CampusManager
from campuslife.storage import JsonFileGateway, MemoryGateway, demo_document
from campuslife.store import DomainStore
from campuslife.views import AdminDashboard, CoordinatorDashboard, StudentDashboard

from .conftest import ADMIN_ID, CLUB_ID, COORDINATOR_ID, EVENT_ID, STUDENT_ID

DETAILS = EventDetails(title="Demo Day", date="2030-01-10", time="11:00", location="Atrium")


def test_join_approve_workflow(manager: CampusManager) -> None:
    student = manager.signup("Sara Khan", "sara@college.edu", reg_no="STU042")

    request = manager.request_join(student.id, CLUB_ID, "Keen on AI")
    manager.respond_to_request(COORDINATOR_ID, request.id, "approved", "Welcome", "secretary")

    doc = manager.store.snapshot()
    assert [str(m.role) for m in doc.memberships if m.user_id == student.id] == ["secretary"]
    assert doc.pending_request(student.id, CLUB_ID) is None
    assert manager.join_requests(COORDINATOR_ID, CLUB_ID, "pending") == []


def test_unauthorized_mutation_is_not_flushed(manager: CampusManager, gateway: MemoryGateway) -> None:
    student = manager.signup("Sara Khan", "sara@college.edu")
    request = manager.request_join(student.id, CLUB_ID)
    saves = gateway.save_count

    with pytest.raises(AuthorizationError):
        manager.respond_to_request(STUDENT_ID, request.id, "approved")
    with pytest.raises(AuthorizationError):
        manager.respond_to_request(None, request.id, "approved")

    assert gateway.save_count == saves
    assert manager.store.snapshot().join_request(request.id).is_pending


def test_coordinator_cannot_act_on_another_club(manager: CampusManager) -> None:
    nina = manager.create_user(ADMIN_ID, "Nina", "nina@college.edu", "coordinator")
    manager.create_club(ADMIN_ID, "Robotics", "Robots", nina.id)
    event = manager.propose_event(STUDENT_ID, CLUB_ID, DETAILS)

    with pytest.raises(AuthorizationError):
        manager.decide_event(nina.id, event.id, "approved")
    with pytest.raises(AuthorizationError):
        manager.update_club_image(nina.id, CLUB_ID, "https://example.org/x.png")

    decided = manager.decide_event(COORDINATOR_ID, event.id, "approved")
    assert decided.status == "approved"


def test_non_member_cannot_propose(manager: CampusManager) -> None:
    outsider = manager.signup("Omar", "omar@college.edu")

    with pytest.raises(AuthorizationError):
        manager.propose_event(outsider.id, CLUB_ID, DETAILS)


def test_deleting_coordinator_cascades_in_one_save(manager: CampusManager, gateway: MemoryGateway) -> None:
    saves = gateway.save_count

    summary = manager.delete_user(ADMIN_ID, COORDINATOR_ID)

    assert gateway.save_count == saves + 1
    raw = gateway.raw
    assert raw["clubs"] == []
    assert raw["events"] == []
    assert raw["clubMemberships"] == []
    assert raw["customRoles"] == []
    assert summary.clubs == 1

    entries = read_audit_log(manager.settings.home)
    assert entries[-1].operation == "users.delete"
    assert entries[-1].actor == ADMIN_ID
    assert entries[-1].removed.clubs == 1
    assert entries[-1].removed.events == 1


def test_failed_flush_rolls_back(manager: CampusManager, gateway: MemoryGateway) -> None:
    student = manager.signup("Sara Khan", "sara@college.edu")
    audited = len(read_audit_log(manager.settings.home))
    gateway.fail_saves = True

    with pytest.raises(PersistenceError):
        manager.request_join(student.id, CLUB_ID)

    assert manager.store.snapshot().pending_request(student.id, CLUB_ID) is None
    assert len(read_audit_log(manager.settings.home)) == audited
    gateway.fail_saves = False
    assert gateway.load().pending_request(student.id, CLUB_ID) is None


def test_session_follows_login_and_deletion(manager: CampusManager) -> None:
    assert manager.current_user() is None

    user = manager.login("mike@college.edu", "0000")
    assert manager.current_user_id() == user.id == STUDENT_ID

    manager.delete_user(ADMIN_ID, STUDENT_ID)

    assert manager.current_user() is None
    assert manager.session.read() is None


def test_deleted_actor_cannot_act(manager: CampusManager) -> None:
    manager.delete_user(ADMIN_ID, STUDENT_ID)

    with pytest.raises(AuthorizationError):
        manager.register_for_event(STUDENT_ID, EVENT_ID)


def test_pin_change_then_login(manager: CampusManager) -> None:
    manager.change_pin(STUDENT_ID, "0000", "1357", "1357")

    assert manager.login("mike@college.edu", "1357").id == STUDENT_ID
    with pytest.raises(AuthorizationError):
        manager.login("mike@college.edu", "0000")


def test_profile_update_is_self_only(manager: CampusManager) -> None:
    updated = manager.update_profile(STUDENT_ID, department="Mathematics")
    assert updated.department == "Mathematics"

    with pytest.raises(AuthorizationError):
        manager.update_profile(COORDINATOR_ID, STUDENT_ID, phone="000")


def test_event_visibility(manager: CampusManager) -> None:
    proposed = manager.propose_event(STUDENT_ID, CLUB_ID, DETAILS)

    public = manager.events(STUDENT_ID)
    assert [e.id for e in public] == [EVENT_ID]

    full = manager.events(COORDINATOR_ID, CLUB_ID, all_statuses=True)
    assert {e.id for e in full} == {EVENT_ID, proposed.id}

    with pytest.raises(AuthorizationError):
        manager.events(STUDENT_ID, CLUB_ID, all_statuses=True)
    with pytest.raises(ValidationError):
        manager.events(COORDINATOR_ID, all_statuses=True)


def test_registration_through_manager(manager: CampusManager) -> None:
    with pytest.raises(ConflictError):
        manager.register_for_event(STUDENT_ID, EVENT_ID)

    manager.unregister_from_event(STUDENT_ID, EVENT_ID)
    assert manager.store.snapshot().event(EVENT_ID).registered_users == []

    with pytest.raises(AuthorizationError):
        manager.register_for_event(COORDINATOR_ID, EVENT_ID)


def test_custom_roles_through_manager(manager: CampusManager) -> None:
    role = manager.create_custom_role(COORDINATOR_ID, CLUB_ID, "Designer")
    manager.change_role(COORDINATOR_ID, STUDENT_ID, CLUB_ID, "Designer")

    _, reverted = manager.delete_custom_role(COORDINATOR_ID, role.id)

    assert len(reverted) == 1
    assert str(manager.store.snapshot().membership(STUDENT_ID, CLUB_ID).role) == "member"
    with pytest.raises(AuthorizationError):
        manager.create_custom_role(STUDENT_ID, CLUB_ID, "Hacker")


def test_export_and_history_are_admin_only(manager: CampusManager) -> None:
    data = manager.export(ADMIN_ID)
    assert set(data) == {"users", "clubs", "events", "clubMemberships", "joinRequests"}

    with pytest.raises(AuthorizationError):
        manager.export(STUDENT_ID)
    with pytest.raises(AuthorizationError):
        manager.history(COORDINATOR_ID)


def test_dashboard_matches_role(manager: CampusManager) -> None:
    assert isinstance(manager.dashboard(ADMIN_ID), AdminDashboard)
    assert isinstance(manager.dashboard(COORDINATOR_ID), CoordinatorDashboard)
    assert isinstance(manager.dashboard(STUDENT_ID), StudentDashboard)
    with pytest.raises(AuthorizationError):
        manager.dashboard(None)


def test_audit_can_be_disabled(manager: CampusManager) -> None:
    quiet = CampusManager(replace(manager.settings, audit=False), store=manager.store)
    quiet.signup("Sara Khan", "sara@college.edu")

    assert read_audit_log(manager.settings.home) == []


def test_unreadable_data_is_never_overwritten(manager: CampusManager, tmp_path: Path) -> None:
    path = tmp_path / "campus_life_data.json"
    raw = demo_document()
    raw["events"][0]["status"] = "pending"
    raw["clubs"][0]["name"] = "Real Club Data"
    path.write_text(json.dumps(raw), encoding="utf-8")
    before = path.read_text(encoding="utf-8")
    on_disk = CampusManager(manager.settings, store=DomainStore(JsonFileGateway(path)))

    with pytest.raises(PersistenceError, match="could not be read"):
        on_disk.signup("Sara Khan", "sara@college.edu")

    assert path.read_text(encoding="utf-8") == before
    assert len(on_disk.list_clubs(ADMIN_ID)) == 0


def test_audit_write_failure_keeps_saved_change(
    manager: CampusManager, gateway: MemoryGateway, caplog: pytest.LogCaptureFixture
) -> None:
    (manager.settings.home / "audit.log").mkdir(parents=True)

    with caplog.at_level(logging.ERROR, logger="campuslife.manager"):
        student = manager.signup("Sara Khan", "sara@college.edu")

    assert gateway.load().user(student.id) is not None
    assert any("could not append to the audit log" in r.getMessage() for r in caplog.records)
