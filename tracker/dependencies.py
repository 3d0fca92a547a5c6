"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from fastapi import FastAPI, Request

from tracker.config import Settings, get_settings
from tracker.persistence import (
    BackupHook,
    JsonFilePersistence,
    ensure_seeded,
    restore_from_backup,
)
from tracker.seed import build_seed_document
from tracker.store import DocumentStore, ReferenceValidator

logger = logging.getLogger(__name__)

_bootstrap_lock = threading.Lock()


def bootstrap_store(settings: Settings) -> DocumentStore:
    """
    Prepare the database files and open the store.

    The backup is restored over the primary first; the seed is written only
    if no primary file exists afterwards.
    """
    restore_from_backup(settings.database_path, settings.database_backup_path)
    ensure_seeded(
        settings.database_path,
        settings.database_backup_path,
        build_seed_document(),
    )
    validator = ReferenceValidator() if settings.validate_references else None
    store = DocumentStore(
        JsonFilePersistence(settings.database_path), validator=validator
    )
    store.on_mutate(BackupHook(settings.database_backup_path))
    logger.info(
        "Loaded %s with collections: %s",
        settings.database_path,
        ", ".join(store.collections()),
    )
    return store


def app_settings(app: FastAPI) -> Settings:
    return getattr(app.state, "settings", None) or get_settings()


def store_for(app: FastAPI) -> DocumentStore:
    """
    Return the app's store, bootstrapping it from the app's settings once.
    """
    store = getattr(app.state, "store", None)
    if store is not None:
        return store
    with _bootstrap_lock:
        store = getattr(app.state, "store", None)
        if store is None:
            store = bootstrap_store(app_settings(app))
            app.state.store = store
    return store


def get_app_settings(request: Request) -> Settings:
    return app_settings(request.app)


def get_store(request: Request) -> DocumentStore:
    return store_for(request.app)
