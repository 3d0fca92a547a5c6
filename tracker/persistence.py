"""
Persistence backends and commit hooks for the JSON document store.

The primary file is the store's backend. The backup file is written by a
commit hook after every mutation and wins over the primary on boot, which
lets the data survive hosts whose filesystem is periodically reset.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

logger = logging.getLogger(__name__)


class Persistence(Protocol):
    """Defines what the document store needs from its storage backend."""

    def load(self) -> dict:
        ...

    def save(self, document: dict) -> None:
        ...


class CommitHook(Protocol):
    """Called with the full document after each successful mutation."""

    def __call__(self, document: dict) -> None:
        ...


def read_json(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(path: str, document: dict) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)


@dataclass
class JsonFilePersistence:
    """Whole-document JSON file, rewritten on every save."""

    path: str

    def load(self) -> dict:
        return read_json(self.path)

    def save(self, document: dict) -> None:
        write_json(self.path, document)


@dataclass
class InMemoryPersistence:
    """Test double for the file backend."""

    document: dict = field(default_factory=dict)
    saves: int = 0

    def load(self) -> dict:
        return copy.deepcopy(self.document)

    def save(self, document: dict) -> None:
        self.document = copy.deepcopy(document)
        self.saves += 1


@dataclass
class BackupHook:
    """Mirrors the document to a secondary file after each mutation."""

    path: str

    def __call__(self, document: dict) -> None:
        write_json(self.path, document)
        logger.info(
            "Database backed up at %s", datetime.now(timezone.utc).isoformat()
        )


def restore_from_backup(primary_path: str, backup_path: str) -> bool:
    """
    Overwrite the primary file with the backup, if one exists.

    The backup always wins; nothing is merged. A backup that cannot be parsed
    is logged and ignored, leaving the primary as it was.
    """
    if not os.path.exists(backup_path):
        return False
    try:
        backup = read_json(backup_path)
        write_json(primary_path, backup)
    except (OSError, ValueError):
        logger.exception("Error restoring database from backup %s", backup_path)
        return False
    logger.info("Database restored from backup")
    return True


def ensure_seeded(primary_path: str, backup_path: str, seed: dict) -> bool:
    """Write the seed to both files when the primary file is absent."""
    if os.path.exists(primary_path):
        return False
    write_json(primary_path, seed)
    logger.info("Created database file at %s", primary_path)
    write_json(backup_path, seed)
    return True
