"""Persistence for the campus document and the CLI login session."""

from .gateway import JsonFileGateway, MemoryGateway, PersistenceGateway
from .seed import DEFAULT_PIN, bootstrap_document, demo_document, load_seed, seed_document
from .session import Session, SessionFile

__all__ = [
    "PersistenceGateway",
    "JsonFileGateway",
    "MemoryGateway",
    "DEFAULT_PIN",
    "bootstrap_document",
    "demo_document",
    "load_seed",
    "seed_document",
    "Session",
    "SessionFile",
]
