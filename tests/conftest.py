"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest

from campuslife.config import Settings
from campuslife.document import Document
from campuslife.manager import CampusManager
from campuslife.storage import MemoryGateway, demo_document
from campuslife.store import DomainStore

# Ids in the demo document
ADMIN_ID = "1"
COORDINATOR_ID = "2"
STUDENT_ID = "3"
CLUB_ID = "1"
EVENT_ID = "1"
CUSTOM_ROLE_ID = "1"


@pytest.fixture
def doc() -> Document:
    """A working copy of the demo document."""
    return Document.from_dict(demo_document())


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(home=tmp_path / "home")


@pytest.fixture
def gateway() -> MemoryGateway:
    return MemoryGateway(demo_document())


@pytest.fixture
def manager(settings: Settings, gateway: MemoryGateway) -> CampusManager:
    """Manager over the in-memory demo document; session and audit live under tmp_path."""
    return CampusManager(settings, store=DomainStore(gateway))
