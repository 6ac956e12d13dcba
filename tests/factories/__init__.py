"""Factory Boy model factories for test data generation.

Available factories
-------------------
SnapshotFactory         — Availability API snapshot, 3 days old by default
ArchiveOutcomeFactory   — ArchiveOutcome with status ARCHIVED by default
"""

from __future__ import annotations

from tests.factories.wayback import ArchiveOutcomeFactory, SnapshotFactory

__all__ = [
    "ArchiveOutcomeFactory",
    "SnapshotFactory",
]
