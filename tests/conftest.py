"""Shared fixtures for OmniDo store tests."""

import sys
from pathlib import Path

import pytest

# Ensure the package is importable without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from omnido.config import Config
from omnido.manager import EntityStore
from omnido.storage import MemoryStorage


class RecordingStorage(MemoryStorage):
    """MemoryStorage that remembers every write in order."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    def write(self, key, data):
        self.writes.append((key, bytes(data)))
        super().write(key, data)


@pytest.fixture
def storage():
    return RecordingStorage()


@pytest.fixture
def store(storage):
    """Empty store (no seed data) backed by memory"""
    return EntityStore(storage=storage, config=Config(seed_defaults=False))
