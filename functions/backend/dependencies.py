"""
Dependency wiring for the Cloud Functions and the FastAPI app.
"""

from __future__ import annotations

import firebase_admin

from backend.config import get_settings
from backend.db import DocumentStore, FirestoreDocumentStore, InMemoryDocumentStore

_document_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """
    Return a singleton document store so the Firestore client is created once
    per process.
    """
    global _document_store
    if _document_store:
        return _document_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _document_store = InMemoryDocumentStore()
    else:
        if not firebase_admin._apps:
            options = None
            if settings.google_cloud_project:
                options = {"projectId": settings.google_cloud_project}
            firebase_admin.initialize_app(options=options)
        _document_store = FirestoreDocumentStore(
            timeout=settings.firestore_timeout_sec
        )
    return _document_store


def reset_document_store() -> None:
    """Drop the cached store so the next call rebuilds it from settings."""
    global _document_store
    _document_store = None
