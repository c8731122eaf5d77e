"""Tests for the persistence gateways, document normalization and seed files."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from campuslife.document import DOCUMENT_KEYS, Document, export_document
from campuslife.errors import PersistenceError, ValidationError
from campuslife.storage import JsonFileGateway, MemoryGateway, bootstrap_document, load_seed, seed_document


def test_missing_file_persists_bootstrap_document(tmp_path: Path) -> None:
    path = tmp_path / "campus_life_data.json"
    gateway = JsonFileGateway(path)

    doc = gateway.load()

    assert path.exists()
    assert not doc.recovered
    assert [u.email for u in doc.users] == ["admin@college.edu", "john@college.edu", "mike@college.edu"]
    assert doc.pins == {"1": "0000", "2": "0000", "3": "0000"}
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert set(stored) == set(DOCUMENT_KEYS)


def test_corrupt_file_falls_back_without_overwriting(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "campus_life_data.json"
    path.write_text("{not json", encoding="utf-8")

    doc = JsonFileGateway(path).load()

    assert len(doc.users) == 3
    assert doc.recovered
    assert path.read_text(encoding="utf-8") == "{not json"
    assert any(r.levelname == "ERROR" for r in caplog.records)


def test_save_normalizes_missing_collections(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    gateway = JsonFileGateway(path)

    doc = gateway.save({"users": []})

    assert doc.clubs == [] and doc.custom_roles == [] and doc.pins == {}
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["clubMemberships"] == []
    assert stored["pins"] == {}
    assert not path.with_suffix(".tmp").exists()


def test_save_failure_raises_persistence_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("", encoding="utf-8")
    gateway = JsonFileGateway(blocker / "data.json")

    with pytest.raises(PersistenceError):
        gateway.save(bootstrap_document())


def test_clear_is_idempotent(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    gateway = JsonFileGateway(path)
    gateway.load()

    gateway.clear()
    gateway.clear()

    assert not path.exists()


def test_memory_gateway_round_trip_and_failure() -> None:
    gateway = MemoryGateway()
    doc = gateway.load()
    assert gateway.save_count == 1

    doc.users[0].name = "Head Admin"
    gateway.save(doc)
    assert gateway.raw["users"][0]["name"] == "Head Admin"

    gateway.fail_saves = True
    with pytest.raises(PersistenceError):
        gateway.save(doc)
    assert gateway.save_count == 2


def test_email_keyed_pins_are_rekeyed_to_user_ids() -> None:
    doc = Document.from_dict(
        {
            "users": [{"id": "9", "name": "Asha", "email": "asha@college.edu", "role": "student"}],
            "pins": {"Asha@college.edu": "1234", "ghost@college.edu": "9999"},
        }
    )

    assert doc.pins == {"9": "1234"}


def test_free_text_role_resolves_to_custom_role() -> None:
    doc = Document.from_dict(
        {
            "users": [{"id": "9", "name": "Asha", "email": "asha@college.edu", "role": "student"}],
            "clubs": [{"id": "c1", "name": "Chess", "description": "", "coordinatorId": "2"}],
            "customRoles": [{"id": "r1", "clubId": "c1", "name": "Tech Lead"}],
            "clubMemberships": [
                {"userId": "9", "clubId": "c1", "joinedAt": "2024-01-01", "role": "tech lead"},
            ],
        }
    )

    role = doc.memberships[0].role
    assert role.is_custom
    assert role.role_id == "r1"
    assert role.name == "Tech Lead"


def test_dangling_custom_role_reference_reverts_to_member() -> None:
    doc = Document.from_dict(
        {
            "clubMemberships": [
                {"userId": "9", "clubId": "c1", "joinedAt": "", "role": "Gone", "customRoleId": "r404"},
            ],
        }
    )

    role = doc.memberships[0].role
    assert not role.is_custom
    assert role.name == "member"


def test_event_without_status_is_approved_and_registrations_deduplicated() -> None:
    doc = Document.from_dict(
        {
            "events": [
                {
                    "id": "e1",
                    "title": "Talk",
                    "date": "2024-05-01",
                    "time": "10:00",
                    "location": "Hall",
                    "clubId": "c1",
                    "registeredUsers": ["3", "3", "4"],
                }
            ]
        }
    )

    event = doc.events[0]
    assert event.status == "approved"
    assert event.registered_users == ["3", "4"]


def test_export_omits_custom_roles_and_pins(doc: Document) -> None:
    data = export_document(doc)

    assert list(data) == ["users", "clubs", "events", "clubMemberships", "joinRequests"]
    assert data["clubs"][0]["name"] == "Tech Innovation Club"


def test_load_seed_yaml_and_json(tmp_path: Path) -> None:
    yaml_path = tmp_path / "seed.yaml"
    yaml_path.write_text(
        "users:\n  - id: '7'\n    name: Dana\n    email: dana@college.edu\n    role: admin\n",
        encoding="utf-8",
    )
    json_path = tmp_path / "seed.json"
    json_path.write_text(json.dumps({"users": [], "clubs": []}), encoding="utf-8")

    assert load_seed(yaml_path)["users"][0]["email"] == "dana@college.edu"
    assert load_seed(json_path) == {"users": [], "clubs": []}


def test_load_seed_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "seed.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_seed(path)


def test_seed_document_rejects_bad_records() -> None:
    raw = bootstrap_document()
    raw["users"][1].pop("id")

    with pytest.raises(ValidationError, match="missing field 'id'"):
        seed_document(raw)

    assert len(seed_document(bootstrap_document()).users) == 3
