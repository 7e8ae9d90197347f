"""
Backend package for the blog functions.

This package provides settings, the document store abstraction over
Firestore, and a FastAPI application exposing publishPost and softDelete so
the handlers can also run as a long-running service.
"""
