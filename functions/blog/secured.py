# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import dataclasses
import logging
from typing import Optional

from backend.db import DocumentStore
from blog import policy
from blog.policy import Identity, PolicyDecision
from shared.firebase_constants import BLOCKED_USERS_COLLECTION
from shared.timestamps import resolve_server_timestamps
from shared.types import Operation

logger = logging.getLogger(__name__)


class PermissionDeniedError(Exception):
    """Raised when the access policy rejects a read or write."""

    def __init__(self, operation: Operation, path: str, decision: PolicyDecision):
        self.operation = operation
        self.path = path
        self.decision = decision
        super().__init__(f"{operation} on {path} denied: {decision.reason}")


class SecuredDocumentClient:
    """
    Document access on behalf of an end user.

    Each call loads the stored document, evaluates the access policy for the
    caller and only then touches the store. `identity` is None for an
    unauthenticated caller.
    """

    def __init__(self, store: DocumentStore, identity: Optional[Identity]):
        self.store = store
        self.identity = identity

    def get(self, path: str) -> Optional[dict]:
        current = self.store.get(path)
        self._check(Operation.GET, path, current=current)
        return current

    def create(self, path: str, data: dict) -> None:
        current = self.store.get(path)
        self._check(Operation.CREATE, path, current=current, proposed=data)
        self.store.create(path, data)

    def set(self, path: str, data: dict, merge: bool = False) -> None:
        current = self.store.get(path)
        if current is None:
            self._check(Operation.CREATE, path, proposed=data)
        else:
            proposed = {**current, **data} if merge else data
            self._check(Operation.UPDATE, path, current=current, proposed=proposed)
        self.store.set(path, data, merge=merge)

    def update(self, path: str, fields: dict) -> None:
        current = self.store.get(path)
        proposed = {**(current or {}), **fields}
        self._check(Operation.UPDATE, path, current=current, proposed=proposed)
        self.store.update(path, fields)

    def delete(self, path: str) -> None:
        current = self.store.get(path)
        self._check(Operation.DELETE, path, current=current)
        self.store.delete(path)

    def _caller(self) -> Optional[Identity]:
        if self.identity is None:
            return None
        blocked = (
            self.store.get(f"{BLOCKED_USERS_COLLECTION}/{self.identity.uid}")
            is not None
        )
        return dataclasses.replace(self.identity, blocked=blocked)

    def _check(
        self,
        operation: Operation,
        path: str,
        current: Optional[dict] = None,
        proposed: Optional[dict] = None,
    ) -> None:
        now = self.store.now()
        if proposed is not None:
            proposed = resolve_server_timestamps(proposed, now)
        decision = policy.evaluate(
            self._caller(),
            operation,
            path,
            current=current,
            proposed=proposed,
            now=now,
        )
        if not decision.allowed:
            uid = self.identity.uid if self.identity else None
            logger.info(f"Denied {operation} on {path} for {uid}: {decision.reason}")
            raise PermissionDeniedError(operation, path, decision)
