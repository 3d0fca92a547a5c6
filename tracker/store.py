"""
In-memory JSON document store with a pluggable persistence backend.

The document is a dict of collection name -> list of flat records. Every
record is keyed by an ``id`` field; ids are compared as strings because
they arrive as URL path segments.
"""

from __future__ import annotations

import copy
import logging
import threading
import uuid
from typing import Dict, List, Optional

from tracker.persistence import CommitHook, Persistence

logger = logging.getLogger(__name__)

# collection -> {field: target collection}
SOFT_REFERENCES: Dict[str, Dict[str, str]] = {
    "expenses": {"categoryId": "categories", "paidBy": "users"},
    "investments": {"partner": "users"},
    "subsidies": {"partner": "users"},
    "tasks": {"assignedTo": "users"},
}


class StoreError(Exception):
    """Base class for document store failures."""


class CollectionNotFoundError(StoreError):
    def __init__(self, collection: str):
        super().__init__(f"Collection '{collection}' not found")
        self.collection = collection


class RecordNotFoundError(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"No record '{record_id}' in '{collection}'")
        self.collection = collection
        self.record_id = record_id


class DuplicateIdError(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"Insert failed, duplicate id '{record_id}' in '{collection}'")
        self.collection = collection
        self.record_id = record_id


class DanglingReferenceError(StoreError):
    def __init__(self, collection: str, field_name: str, value):
        super().__init__(
            f"'{field_name}' references missing record '{value}' in '{collection}'"
        )
        self.collection = collection
        self.field_name = field_name
        self.value = value


def same_id(left, right) -> bool:
    return str(left) == str(right)


class ReferenceValidator:
    """Checks that soft references on a record resolve to existing records."""

    def __init__(self, references: Optional[Dict[str, Dict[str, str]]] = None):
        self.references = SOFT_REFERENCES if references is None else references

    def check(self, document: dict, collection: str, record: dict) -> None:
        for field_name, target in self.references.get(collection, {}).items():
            value = record.get(field_name)
            if value is None:
                continue
            targets = document.get(target, [])
            if not any(same_id(item.get("id"), value) for item in targets):
                raise DanglingReferenceError(target, field_name, value)


class DocumentStore:
    """
    Holds the whole database in memory and persists it on every mutation.

    After the backend has saved, each commit hook receives a snapshot of the
    document, in registration order, before the mutating call returns.
    """

    def __init__(
        self,
        persistence: Persistence,
        *,
        hooks: Optional[List[CommitHook]] = None,
        validator: Optional[ReferenceValidator] = None,
    ):
        self.persistence = persistence
        self.hooks: List[CommitHook] = list(hooks or [])
        self.validator = validator
        self._lock = threading.RLock()
        self._document: dict = persistence.load()

    def on_mutate(self, hook: CommitHook) -> None:
        self.hooks.append(hook)

    def reload(self) -> None:
        with self._lock:
            self._document = self.persistence.load()

    def snapshot(self) -> dict:
        with self._lock:
            return copy.deepcopy(self._document)

    def collections(self) -> list[str]:
        return [
            name for name, value in self._document.items() if isinstance(value, list)
        ]

    def has_collection(self, name: str) -> bool:
        return isinstance(self._document.get(name), list)

    def find_all(self, collection: str) -> list[dict]:
        with self._lock:
            return copy.deepcopy(self._records(collection))

    def get(self, collection: str, record_id) -> Optional[dict]:
        with self._lock:
            index = self._find(collection, record_id)
            if index is None:
                return None
            return copy.deepcopy(self._records(collection)[index])

    def insert(self, collection: str, record: dict) -> dict:
        with self._lock:
            records = self._records(collection)
            stored = copy.deepcopy(record)
            if stored.get("id") is None:
                stored["id"] = self._next_id(records)
            elif self._find(collection, stored["id"]) is not None:
                raise DuplicateIdError(collection, str(stored["id"]))
            self._validate(collection, stored)
            records.append(stored)
            self._commit()
            logger.debug("Inserted %s/%s", collection, stored["id"])
            return copy.deepcopy(stored)

    def replace(self, collection: str, record_id, record: dict) -> dict:
        with self._lock:
            index = self._require(collection, record_id)
            records = self._records(collection)
            stored = copy.deepcopy(record)
            stored["id"] = records[index]["id"]
            self._validate(collection, stored)
            records[index] = stored
            self._commit()
            logger.debug("Replaced %s/%s", collection, stored["id"])
            return copy.deepcopy(stored)

    def merge(self, collection: str, record_id, patch: dict) -> dict:
        with self._lock:
            index = self._require(collection, record_id)
            records = self._records(collection)
            stored = {**records[index], **copy.deepcopy(patch)}
            stored["id"] = records[index]["id"]
            self._validate(collection, stored)
            records[index] = stored
            self._commit()
            logger.debug("Patched %s/%s", collection, stored["id"])
            return copy.deepcopy(stored)

    def delete(self, collection: str, record_id) -> dict:
        with self._lock:
            index = self._require(collection, record_id)
            removed = self._records(collection).pop(index)
            self._commit()
            logger.debug("Deleted %s/%s", collection, removed.get("id"))
            return removed

    def _records(self, collection: str) -> list:
        records = self._document.get(collection)
        if not isinstance(records, list):
            raise CollectionNotFoundError(collection)
        return records

    def _find(self, collection: str, record_id) -> Optional[int]:
        for index, item in enumerate(self._records(collection)):
            if same_id(item.get("id"), record_id):
                return index
        return None

    def _require(self, collection: str, record_id) -> int:
        index = self._find(collection, record_id)
        if index is None:
            raise RecordNotFoundError(collection, str(record_id))
        return index

    def _validate(self, collection: str, record: dict) -> None:
        if self.validator is not None:
            self.validator.check(self._document, collection, record)

    @staticmethod
    def _next_id(records: list):
        ids = [item.get("id") for item in records]
        if not ids:
            return 1
        if all(isinstance(value, int) and not isinstance(value, bool) for value in ids):
            return max(ids) + 1
        return uuid.uuid4().hex[:8]

    def _commit(self) -> None:
        self.persistence.save(self._document)
        snapshot = copy.deepcopy(self._document)
        for hook in self.hooks:
            hook(snapshot)
