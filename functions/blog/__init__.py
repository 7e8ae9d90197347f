"""
Blog post handlers and the access policy for drafts, posts and comments.

The handlers run with backend privilege against a DocumentStore; end-user
reads and writes go through SecuredDocumentClient, which applies the same
rules as firestore.rules.
"""
