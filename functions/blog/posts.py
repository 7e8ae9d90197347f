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

import logging

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from backend.db import (
    DocumentExistsError,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    DocumentStoreTimeoutError,
)
from shared.api import PostOperationError, PostOperationResult
from shared.firebase_constants import DRAFTS_COLLECTION, PUBLISHED_COLLECTION
from shared.types import ErrorCode

logger = logging.getLogger(__name__)


def draft_path(draft_id: str) -> str:
    return f"{DRAFTS_COLLECTION}/{draft_id}"


def published_path(post_id: str) -> str:
    return f"{PUBLISHED_COLLECTION}/{post_id}"


def published_document_from_draft(draft: dict, published_at=SERVER_TIMESTAMP) -> dict:
    """
    Builds the published form of a draft.

    All draft fields are copied except `createdAt`; `publishedAt` and
    `visible` are added.
    """
    post = dict(draft)
    post.pop("createdAt", None)
    post["publishedAt"] = published_at
    post["visible"] = True
    return post


def publish_post(store: DocumentStore, draft_id: str) -> PostOperationResult:
    """
    Copies `drafts/{draft_id}` to `published/{draft_id}`.

    The published document is created, never overwritten: publishing the
    same draft twice fails with ALREADY_EXISTS.
    """
    try:
        draft = store.get(draft_path(draft_id))
        if draft is None:
            return _failure(
                draft_id, ErrorCode.NOT_FOUND, f"Draft {draft_id} was not found."
            )
        store.create(published_path(draft_id), published_document_from_draft(draft))
    except DocumentExistsError:
        return _failure(
            draft_id,
            ErrorCode.ALREADY_EXISTS,
            f"Post {draft_id} has already been published.",
        )
    except DocumentStoreError as e:
        return _store_failure(draft_id, e)

    logger.info(f"Published draft {draft_id}")
    return PostOperationResult(post_id=draft_id)


def soft_delete(store: DocumentStore, post_id: str) -> PostOperationResult:
    """Hides `published/{post_id}` by setting `visible` to False."""
    try:
        store.update(published_path(post_id), {"visible": False})
    except DocumentNotFoundError:
        return _failure(
            post_id, ErrorCode.NOT_FOUND, f"Published post {post_id} was not found."
        )
    except DocumentStoreError as e:
        return _store_failure(post_id, e)

    logger.info(f"Hid published post {post_id}")
    return PostOperationResult(post_id=post_id)


def _failure(post_id: str, code: ErrorCode, message: str) -> PostOperationResult:
    logger.warning(f"Post operation on {post_id} failed with {code}: {message}")
    return PostOperationResult(
        post_id=post_id, error=PostOperationError(code=code, message=message)
    )


def _store_failure(post_id: str, error: DocumentStoreError) -> PostOperationResult:
    if isinstance(error, DocumentStoreTimeoutError):
        code = ErrorCode.DEADLINE_EXCEEDED
        message = "The document store did not respond in time."
    else:
        code = ErrorCode.UNAVAILABLE
        message = "The document store is unavailable."
    logger.error(f"Document store error for {error.path}: {error}")
    return PostOperationResult(
        post_id=post_id, error=PostOperationError(code=code, message=message)
    )
