"""Testing utilities for RPGForge."""

from .factory import ItemFactory, UserFactory
from .fixtures import app_fixture, memory_app
from .test_client import RecordingSender, SentReply, TestClient

__all__ = [
    "ItemFactory",
    "UserFactory",
    "app_fixture",
    "memory_app",
    "RecordingSender",
    "SentReply",
    "TestClient",
]
