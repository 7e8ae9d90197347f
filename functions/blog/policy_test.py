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

import unittest
from datetime import datetime, timedelta, timezone

from blog.policy import Identity, evaluate, within_edit_window
from shared.types import Operation

NOW = datetime(2026, 5, 4, 10, 0, 0, tzinfo=timezone.utc)

AUTHOR = Identity(uid="author", email="alice@example.com")
MODERATOR = Identity(uid="moderator", email="mandy@example.com", is_moderator=True)
EVERYONE = Identity(uid="everyone", email="elliot@example.com")
COMMENTATOR = Identity(
    uid="commentator", email="chase@example.com", email_verified=True
)
ANONYMOUS = Identity(uid="anon", sign_in_provider="anonymous")

DRAFT = {"title": "Make an app", "authorUID": "author", "createdAt": NOW}
PUBLISHED = {
    "title": "Best way to make bagels",
    "authorUID": "author",
    "url": "best-bagels",
    "publishedAt": NOW,
    "visible": True,
}
COMMENT = {"authorUID": "commentator", "createdAt": NOW, "comment": "I love cupcakes."}


class IdentityTest(unittest.TestCase):

    def test_from_claims(self):
        identity = Identity.from_claims(
            {
                "uid": "moderator",
                "email": "mandy@example.com",
                "email_verified": True,
                "isModerator": True,
                "firebase": {"sign_in_provider": "google.com"},
            }
        )
        self.assertEqual(identity.uid, "moderator")
        self.assertTrue(identity.is_moderator)
        self.assertTrue(identity.email_verified)
        self.assertFalse(identity.is_anonymous)

    def test_from_claims_uses_sub_and_defaults(self):
        identity = Identity.from_claims(
            {"sub": "anon", "firebase": {"sign_in_provider": "anonymous"}}
        )
        self.assertEqual(identity.uid, "anon")
        self.assertFalse(identity.is_moderator)
        self.assertFalse(identity.email_verified)
        self.assertTrue(identity.is_anonymous)

    def test_truthy_strings_are_not_claims(self):
        identity = Identity.from_claims({"uid": "x", "isModerator": "true"})
        self.assertFalse(identity.is_moderator)


class DraftPolicyTest(unittest.TestCase):

    def test_author_can_create_with_required_fields(self):
        decision = evaluate(AUTHOR, Operation.CREATE, "drafts/new", proposed=DRAFT)
        self.assertTrue(decision.allowed, decision.reason)

    def test_create_requires_matching_author(self):
        decision = evaluate(EVERYONE, Operation.CREATE, "drafts/new", proposed=DRAFT)
        self.assertFalse(decision.allowed)

    def test_create_requires_title_and_created_at(self):
        decision = evaluate(
            AUTHOR,
            Operation.CREATE,
            "drafts/new",
            proposed={"authorUID": "author", "title": "Make an app"},
        )
        self.assertFalse(decision.allowed)
        self.assertIn("createdAt", decision.reason)

    def test_create_rejects_long_title(self):
        decision = evaluate(
            AUTHOR,
            Operation.CREATE,
            "drafts/new",
            proposed={**DRAFT, "title": "x" * 50},
        )
        self.assertFalse(decision.allowed)

    def test_create_rejects_unknown_fields(self):
        decision = evaluate(
            AUTHOR,
            Operation.CREATE,
            "drafts/new",
            proposed={**DRAFT, "visible": True},
        )
        self.assertFalse(decision.allowed)

    def test_unauthenticated_cannot_create(self):
        decision = evaluate(None, Operation.CREATE, "drafts/new", proposed=DRAFT)
        self.assertFalse(decision.allowed)

    def test_author_can_update_when_immutable_fields_unchanged(self):
        proposed = {**DRAFT, "content": "Apps are great. Let's make one."}
        decision = evaluate(
            AUTHOR, Operation.UPDATE, "drafts/12345", current=DRAFT, proposed=proposed
        )
        self.assertTrue(decision.allowed, decision.reason)

    def test_update_cannot_change_author_or_created_at(self):
        for field, value in (("authorUID", "everyone"), ("createdAt", NOW + timedelta(1))):
            with self.subTest(field=field):
                decision = evaluate(
                    AUTHOR,
                    Operation.UPDATE,
                    "drafts/12345",
                    current=DRAFT,
                    proposed={**DRAFT, field: value},
                )
                self.assertFalse(decision.allowed)
                self.assertIn(field, decision.reason)

    def test_read_by_author_and_moderator_only(self):
        for identity, allowed in (
            (AUTHOR, True),
            (MODERATOR, True),
            (EVERYONE, False),
            (None, False),
        ):
            with self.subTest(identity=identity):
                decision = evaluate(identity, Operation.GET, "drafts/x", current=DRAFT)
                self.assertEqual(decision.allowed, allowed)

    def test_delete_by_author_only(self):
        self.assertTrue(
            evaluate(AUTHOR, Operation.DELETE, "drafts/x", current=DRAFT).allowed
        )
        self.assertFalse(
            evaluate(MODERATOR, Operation.DELETE, "drafts/x", current=DRAFT).allowed
        )


class PublishedPolicyTest(unittest.TestCase):

    def test_anyone_can_read(self):
        for identity in (EVERYONE, ANONYMOUS, None):
            with self.subTest(identity=identity):
                self.assertTrue(
                    evaluate(
                        identity, Operation.GET, "published/12345", current=PUBLISHED
                    ).allowed
                )

    def test_no_one_can_create_or_delete(self):
        for identity in (AUTHOR, MODERATOR):
            with self.subTest(identity=identity):
                self.assertFalse(
                    evaluate(
                        identity,
                        Operation.CREATE,
                        "published/23456",
                        proposed=PUBLISHED,
                    ).allowed
                )
                self.assertFalse(
                    evaluate(
                        identity,
                        Operation.DELETE,
                        "published/12345",
                        current=PUBLISHED,
                    ).allowed
                )

    def test_author_or_moderator_can_update(self):
        proposed = {
            **PUBLISHED,
            "title": "Best way to make cupcakes",
            "content": "Most cupcakes are just okay.",
            "visible": False,
        }
        for identity, allowed in ((AUTHOR, True), (MODERATOR, True), (EVERYONE, False)):
            with self.subTest(identity=identity):
                decision = evaluate(
                    identity,
                    Operation.UPDATE,
                    "published/12345",
                    current=PUBLISHED,
                    proposed=proposed,
                )
                self.assertEqual(decision.allowed, allowed)

    def test_update_cannot_change_published_at_or_url(self):
        for field in ("publishedAt", "url", "authorUID"):
            with self.subTest(field=field):
                decision = evaluate(
                    MODERATOR,
                    Operation.UPDATE,
                    "published/12345",
                    current=PUBLISHED,
                    proposed={**PUBLISHED, field: "changed"},
                )
                self.assertFalse(decision.allowed)

    def test_visible_must_be_boolean(self):
        decision = evaluate(
            AUTHOR,
            Operation.UPDATE,
            "published/12345",
            current=PUBLISHED,
            proposed={**PUBLISHED, "visible": "no"},
        )
        self.assertFalse(decision.allowed)


class CommentPolicyTest(unittest.TestCase):
    path = "published/12345/comments/abcde"

    def test_read_requires_permanent_account(self):
        permanent = Identity(uid="notUsingAnonymousAuth", sign_in_provider="google.com")
        self.assertTrue(evaluate(permanent, Operation.GET, self.path, current=COMMENT).allowed)
        self.assertFalse(evaluate(ANONYMOUS, Operation.GET, self.path, current=COMMENT).allowed)
        self.assertFalse(evaluate(None, Operation.GET, self.path, current=COMMENT).allowed)

    def test_create_requires_verified_email(self):
        self.assertTrue(
            evaluate(COMMENTATOR, Operation.CREATE, self.path, proposed=COMMENT).allowed
        )
        unverified = Identity(uid="commentator", email="chase@example.com")
        self.assertFalse(
            evaluate(unverified, Operation.CREATE, self.path, proposed=COMMENT).allowed
        )

    def test_blocked_user_cannot_create(self):
        blocked = Identity(uid="commentator", email_verified=True, blocked=True)
        decision = evaluate(blocked, Operation.CREATE, self.path, proposed=COMMENT)
        self.assertFalse(decision.allowed)
        self.assertIn("blocked", decision.reason)

    def test_create_requires_matching_author(self):
        other = Identity(uid="other", email_verified=True)
        self.assertFalse(
            evaluate(other, Operation.CREATE, self.path, proposed=COMMENT).allowed
        )

    def test_author_can_edit_within_an_hour(self):
        proposed = {
            **COMMENT,
            "comment": "I really like cupcakes, too!",
            "editedAt": NOW + timedelta(minutes=59),
        }
        decision = evaluate(
            COMMENTATOR,
            Operation.UPDATE,
            self.path,
            current=COMMENT,
            proposed=proposed,
            now=NOW + timedelta(minutes=59),
        )
        self.assertTrue(decision.allowed, decision.reason)

    def test_author_cannot_edit_after_an_hour(self):
        proposed = {**COMMENT, "comment": "Too late."}
        for elapsed in (timedelta(hours=1), timedelta(hours=3)):
            with self.subTest(elapsed=elapsed):
                decision = evaluate(
                    COMMENTATOR,
                    Operation.UPDATE,
                    self.path,
                    current=COMMENT,
                    proposed=proposed,
                    now=NOW + elapsed,
                )
                self.assertFalse(decision.allowed)

    def test_moderator_cannot_edit(self):
        decision = evaluate(
            MODERATOR,
            Operation.UPDATE,
            self.path,
            current=COMMENT,
            proposed={**COMMENT, "comment": "edited"},
            now=NOW,
        )
        self.assertFalse(decision.allowed)

    def test_delete_by_author_or_moderator_at_any_time(self):
        for identity, allowed in ((COMMENTATOR, True), (MODERATOR, True), (EVERYONE, False)):
            with self.subTest(identity=identity):
                decision = evaluate(
                    identity,
                    Operation.DELETE,
                    self.path,
                    current=COMMENT,
                    now=NOW + timedelta(days=30),
                )
                self.assertEqual(decision.allowed, allowed)


class EditWindowTest(unittest.TestCase):

    def test_accepts_epoch_milliseconds(self):
        created_ms = int(NOW.timestamp() * 1000)
        self.assertTrue(within_edit_window(created_ms, NOW + timedelta(minutes=30)))
        self.assertFalse(within_edit_window(created_ms, NOW + timedelta(minutes=61)))

    def test_naive_datetimes_are_utc(self):
        naive = NOW.replace(tzinfo=None)
        self.assertTrue(within_edit_window(naive, NOW))

    def test_missing_created_at(self):
        self.assertFalse(within_edit_window(None, NOW))

    def test_out_of_range_epoch_is_denied(self):
        self.assertFalse(within_edit_window(10**20, NOW))

        decision = evaluate(
            COMMENTATOR,
            Operation.UPDATE,
            "published/12345/comments/abcde",
            current={**COMMENT, "createdAt": 10**20},
            proposed={**COMMENT, "createdAt": 10**20, "comment": "edited"},
            now=NOW,
        )
        self.assertFalse(decision.allowed)


class MissingProposedDocumentTest(unittest.TestCase):

    def test_writes_without_proposed_document_are_denied(self):
        cases = (
            (AUTHOR, Operation.UPDATE, "drafts/12345", DRAFT),
            (MODERATOR, Operation.UPDATE, "published/12345", PUBLISHED),
            (COMMENTATOR, Operation.UPDATE, "published/12345/comments/abcde", COMMENT),
            (AUTHOR, Operation.CREATE, "drafts/new", None),
        )
        for identity, operation, path, current in cases:
            with self.subTest(path=path, operation=operation):
                decision = evaluate(
                    identity, operation, path, current=current, proposed=None, now=NOW
                )
                self.assertFalse(decision.allowed)


class UnknownPathTest(unittest.TestCase):

    def test_unmatched_paths_are_denied(self):
        for path in ("users/author", "blockedUsers/author", "published/1/likes/2"):
            with self.subTest(path=path):
                self.assertFalse(evaluate(MODERATOR, Operation.GET, path).allowed)


if __name__ == "__main__":
    unittest.main()
