"""
Document store abstraction over Firestore and an in-memory test implementation.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, Optional, Protocol

from google.api_core import exceptions

from shared.constants import DEFAULT_FIRESTORE_TIMEOUT_SEC
from shared.timestamps import resolve_server_timestamps

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Base class for failures talking to the document store."""

    def __init__(self, path: str, message: str = ""):
        self.path = path
        super().__init__(message or path)


class DocumentNotFoundError(DocumentStoreError):
    pass


class DocumentExistsError(DocumentStoreError):
    pass


class DocumentStoreTimeoutError(DocumentStoreError):
    pass


class DocumentStoreUnavailableError(DocumentStoreError):
    pass


class DocumentStore(Protocol):
    """Interface for document access by slash-separated document path."""

    def get(self, path: str) -> Optional[dict]:
        ...

    def create(self, path: str, data: dict) -> None:
        """Writes a new document, failing if one already exists."""
        ...

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        ...

    def update(self, path: str, fields: dict) -> None:
        """Merges `fields` into an existing document."""
        ...

    def delete(self, path: str) -> None:
        ...

    def now(self) -> datetime:
        ...


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self.clock = clock
        self.documents: Dict[str, dict] = {}

    def now(self) -> datetime:
        return self.clock()

    def get(self, path: str) -> Optional[dict]:
        doc = self.documents.get(path)
        return copy.deepcopy(doc) if doc is not None else None

    def create(self, path: str, data: dict) -> None:
        if path in self.documents:
            raise DocumentExistsError(path, f"Document already exists: {path}")
        self.documents[path] = self._prepare(data)

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        prepared = self._prepare(data)
        if merge and path in self.documents:
            self.documents[path].update(prepared)
        else:
            self.documents[path] = prepared

    def update(self, path: str, fields: dict) -> None:
        if path not in self.documents:
            raise DocumentNotFoundError(path, f"No document to update: {path}")
        self.documents[path].update(self._prepare(fields))

    def delete(self, path: str) -> None:
        self.documents.pop(path, None)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.documents.clear()

    def _prepare(self, data: dict) -> dict:
        return copy.deepcopy(resolve_server_timestamps(data, self.now()))


class FirestoreDocumentStore:
    """Firestore-backed document store.

    Every call is bounded by `timeout` seconds. Errors raised by the client
    are translated into DocumentStoreError subclasses so callers never have to
    know about google.api_core.
    """

    def __init__(self, client=None, timeout: float = DEFAULT_FIRESTORE_TIMEOUT_SEC):
        if client is None:
            from firebase_admin import firestore

            client = firestore.client()
        self.client = client
        self.timeout = timeout

    def now(self) -> datetime:
        return _utc_now()

    def get(self, path: str) -> Optional[dict]:
        with _translate_errors(path):
            snapshot = self.client.document(path).get(timeout=self.timeout)
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def create(self, path: str, data: dict) -> None:
        with _translate_errors(path):
            self.client.document(path).create(data, timeout=self.timeout)

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        with _translate_errors(path):
            self.client.document(path).set(data, merge=merge, timeout=self.timeout)

    def update(self, path: str, fields: dict) -> None:
        with _translate_errors(path):
            self.client.document(path).update(fields, timeout=self.timeout)

    def delete(self, path: str) -> None:
        with _translate_errors(path):
            self.client.document(path).delete(timeout=self.timeout)


@contextmanager
def _translate_errors(path: str) -> Iterator[None]:
    """Maps google.api_core exceptions raised inside the block to store errors."""
    try:
        yield
    except exceptions.NotFound as e:
        raise DocumentNotFoundError(path, str(e)) from e
    except exceptions.AlreadyExists as e:
        raise DocumentExistsError(path, str(e)) from e
    except exceptions.DeadlineExceeded as e:
        logger.warning("Firestore call timed out for %s: %s", path, e)
        raise DocumentStoreTimeoutError(path, str(e)) from e
    except (exceptions.GoogleAPICallError, exceptions.RetryError) as e:
        logger.error("Firestore call failed for %s: %s", path, e)
        raise DocumentStoreUnavailableError(path, str(e)) from e
