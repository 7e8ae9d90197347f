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

"""
Access policy for drafts, published posts and comments.

`evaluate` mirrors the predicates in firestore.rules so the rules can be
unit tested, and enforced by SecuredDocumentClient, without a backend.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from shared.constants import COMMENT_EDIT_WINDOW, MAX_TITLE_LENGTH
from shared.firebase_constants import (
    COMMENTS_COLLECTION,
    DRAFTS_COLLECTION,
    PUBLISHED_COLLECTION,
)
from shared.timestamps import to_utc_datetime
from shared.types import Operation

ANONYMOUS_SIGN_IN_PROVIDER = "anonymous"

DRAFT_REQUIRED_FIELDS = frozenset({"title", "authorUID", "createdAt"})
DRAFT_ALLOWED_FIELDS = DRAFT_REQUIRED_FIELDS | {"content"}
DRAFT_IMMUTABLE_FIELDS = ("authorUID", "createdAt")

PUBLISHED_IMMUTABLE_FIELDS = ("authorUID", "publishedAt", "url")

COMMENT_REQUIRED_FIELDS = frozenset({"authorUID", "createdAt", "comment"})
COMMENT_ALLOWED_FIELDS = COMMENT_REQUIRED_FIELDS | {"editedAt"}
COMMENT_IMMUTABLE_FIELDS = ("authorUID", "createdAt")


@dataclass(frozen=True)
class Identity:
    """The signed-in caller, as described by their ID token claims."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = False
    is_moderator: bool = False
    sign_in_provider: Optional[str] = None
    blocked: bool = False

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Identity":
        """Builds an Identity from decoded ID token claims.

        Moderators carry the custom claim `isModerator`; the sign-in provider
        is read from `firebase.sign_in_provider`.
        """
        firebase_claims = claims.get("firebase") or {}
        return cls(
            uid=claims.get("uid") or claims["sub"],
            email=claims.get("email"),
            email_verified=claims.get("email_verified") is True,
            is_moderator=claims.get("isModerator") is True,
            sign_in_provider=firebase_claims.get("sign_in_provider"),
        )

    @property
    def is_anonymous(self) -> bool:
        return self.sign_in_provider == ANONYMOUS_SIGN_IN_PROVIDER


@dataclass(frozen=True)
class PolicyDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOW = PolicyDecision(allowed=True)


def _deny(reason: str) -> PolicyDecision:
    return PolicyDecision(allowed=False, reason=reason)


def evaluate(
    identity: Optional[Identity],
    operation: Operation,
    path: str,
    *,
    current: Optional[dict] = None,
    proposed: Optional[dict] = None,
    now: Optional[datetime] = None,
) -> PolicyDecision:
    """
    Decides whether `identity` may perform `operation` on the document at `path`.

    Args:
        identity: The caller, or None for an unauthenticated request.
        operation: The operation requested.
        path: Slash-separated document path.
        current: The stored document, or None if it does not exist.
        proposed: The document as it would be after a create or update. For
            updates this is the merged document, not just the changed fields.
        now: Request time, used for time-windowed rules.

    Returns:
        A PolicyDecision; denials carry a human readable reason.
    """
    if operation in (Operation.CREATE, Operation.UPDATE) and proposed is None:
        return _deny(f"{operation} on {path} requires the proposed document")

    segments = path.strip("/").split("/")
    if len(segments) == 2 and segments[0] == DRAFTS_COLLECTION:
        return _evaluate_draft(identity, operation, current, proposed)
    if len(segments) == 2 and segments[0] == PUBLISHED_COLLECTION:
        return _evaluate_published(identity, operation, current, proposed)
    if (
        len(segments) == 4
        and segments[0] == PUBLISHED_COLLECTION
        and segments[2] == COMMENTS_COLLECTION
    ):
        return _evaluate_comment(identity, operation, current, proposed, now)
    return _deny(f"No rule allows access to {path}")


def _is_author(identity: Optional[Identity], doc: Optional[dict]) -> bool:
    return identity is not None and doc is not None and doc.get("authorUID") == identity.uid


def _is_moderator(identity: Optional[Identity]) -> bool:
    return identity is not None and identity.is_moderator


def _changed_fields(current: dict, proposed: dict, fields) -> list[str]:
    return [field for field in fields if current.get(field) != proposed.get(field)]


def _check_title(doc: dict) -> Optional[str]:
    title = doc.get("title")
    if not isinstance(title, str):
        return "title must be a string"
    if len(title) >= MAX_TITLE_LENGTH:
        return f"title must be shorter than {MAX_TITLE_LENGTH} characters"
    return None


def _check_fields(doc: dict, required, allowed) -> Optional[str]:
    missing = sorted(required - doc.keys())
    if missing:
        return f"missing required fields: {', '.join(missing)}"
    unknown = sorted(doc.keys() - allowed)
    if unknown:
        return f"unexpected fields: {', '.join(unknown)}"
    return None


def _evaluate_draft(identity, operation, current, proposed) -> PolicyDecision:
    if identity is None:
        return _deny("Drafts require a signed-in user")

    if operation == Operation.GET:
        if _is_author(identity, current) or _is_moderator(identity):
            return ALLOW
        return _deny("Drafts are readable by their author and moderators only")

    if operation == Operation.CREATE:
        if not _is_author(identity, proposed):
            return _deny("authorUID must match the signed-in user")
        problem = _check_fields(
            proposed, DRAFT_REQUIRED_FIELDS, DRAFT_ALLOWED_FIELDS
        ) or _check_title(proposed)
        return _deny(problem) if problem else ALLOW

    if operation == Operation.UPDATE:
        if not _is_author(identity, current):
            return _deny("Drafts can only be updated by their author")
        changed = _changed_fields(current, proposed, DRAFT_IMMUTABLE_FIELDS)
        if changed:
            return _deny(f"immutable fields changed: {', '.join(changed)}")
        problem = _check_fields(
            proposed, DRAFT_REQUIRED_FIELDS, DRAFT_ALLOWED_FIELDS
        ) or _check_title(proposed)
        return _deny(problem) if problem else ALLOW

    if operation == Operation.DELETE:
        if _is_author(identity, current):
            return ALLOW
        return _deny("Drafts can only be deleted by their author")

    return _deny(f"Unsupported operation {operation}")


def _evaluate_published(identity, operation, current, proposed) -> PolicyDecision:
    if operation == Operation.GET:
        return ALLOW

    if operation in (Operation.CREATE, Operation.DELETE):
        return _deny("Published posts are created and deleted by the backend only")

    if operation == Operation.UPDATE:
        if current is None:
            return _deny("Published post does not exist")
        if not (_is_author(identity, current) or _is_moderator(identity)):
            return _deny("Published posts can be updated by their author or a moderator")
        changed = _changed_fields(current, proposed, PUBLISHED_IMMUTABLE_FIELDS)
        if changed:
            return _deny(f"immutable fields changed: {', '.join(changed)}")
        if "title" in proposed:
            problem = _check_title(proposed)
            if problem:
                return _deny(problem)
        if not isinstance(proposed.get("visible", True), bool):
            return _deny("visible must be a boolean")
        return ALLOW

    return _deny(f"Unsupported operation {operation}")


def _evaluate_comment(identity, operation, current, proposed, now) -> PolicyDecision:
    if identity is None:
        return _deny("Comments require a signed-in user")

    if operation == Operation.GET:
        if identity.is_anonymous:
            return _deny("Comments are readable by permanent accounts only")
        return ALLOW

    if operation == Operation.CREATE:
        if not identity.email_verified:
            return _deny("Commenting requires a verified email address")
        if identity.blocked:
            return _deny("User is blocked from commenting")
        if not _is_author(identity, proposed):
            return _deny("authorUID must match the signed-in user")
        problem = _check_fields(proposed, COMMENT_REQUIRED_FIELDS, COMMENT_REQUIRED_FIELDS)
        return _deny(problem) if problem else ALLOW

    if operation == Operation.UPDATE:
        if not _is_author(identity, current):
            return _deny("Comments can only be edited by their author")
        if not within_edit_window(current.get("createdAt"), now):
            return _deny("Comments can only be edited within 1 hour of creation")
        changed = _changed_fields(current, proposed, COMMENT_IMMUTABLE_FIELDS)
        if changed:
            return _deny(f"immutable fields changed: {', '.join(changed)}")
        problem = _check_fields(proposed, COMMENT_REQUIRED_FIELDS, COMMENT_ALLOWED_FIELDS)
        return _deny(problem) if problem else ALLOW

    if operation == Operation.DELETE:
        if _is_author(identity, current) or _is_moderator(identity):
            return ALLOW
        return _deny("Comments can be deleted by their author or a moderator")

    return _deny(f"Unsupported operation {operation}")


def within_edit_window(created_at: Any, now: Optional[datetime]) -> bool:
    """True while `now` is strictly before `created_at` plus the edit window."""
    created = to_utc_datetime(created_at)
    request_time = to_utc_datetime(now)
    if created is None or request_time is None:
        return False
    return request_time < created + COMMENT_EDIT_WINDOW
