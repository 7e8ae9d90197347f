"""
HTTP routes for the blog service.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.db import DocumentStore
from backend.dependencies import get_document_store
from backend.schemas import PublishPostRequest, SoftDeleteRequest, StatusResponse
from blog import posts
from shared.api import PostOperationResult

router = APIRouter()


def _to_response(result: PostOperationResult) -> StatusResponse | JSONResponse:
    if result.ok:
        return StatusResponse()
    return JSONResponse(
        status_code=result.error.http_status, content=result.error.as_dict()
    )


@router.post("/publishPost", response_model=StatusResponse)
def publish_post(
    payload: PublishPostRequest,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Copy a draft into the published collection.
    """
    return _to_response(posts.publish_post(store, payload.draft_id))


@router.post("/softDelete", response_model=StatusResponse)
def soft_delete(
    payload: SoftDeleteRequest,
    store: DocumentStore = Depends(get_document_store),
):
    return _to_response(posts.soft_delete(store, payload.post_id))
