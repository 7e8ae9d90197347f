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

# Cloud functions for the blog backend - publishing and hiding posts.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import json
from dataclasses import asdict
from typing import Callable, Type

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options
from pydantic import BaseModel

# Local application imports
from backend.dependencies import get_document_store
from backend.schemas import (
    PublishPostRequest,
    RequestBodyError,
    SoftDeleteRequest,
    parse_request_body,
)
from blog import posts
from shared.api import PostOperationError, PostOperationResult, StatusResult
from shared.types import ErrorCode

initialize_app()


def _json_response(payload: dict, status: int) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(payload), status=status, mimetype="application/json"
    )


def _error_response(error: PostOperationError) -> https_fn.Response:
    return _json_response(error.as_dict(), error.http_status)


def _handle_post_request(
    req: https_fn.Request,
    request_model: Type[BaseModel],
    operation: Callable[[BaseModel], PostOperationResult],
) -> https_fn.Response:
    """
    Shared request flow: validate the body before touching storage, run the
    operation, and always answer with a JSON response.
    """
    if req.method != "POST":
        return _error_response(
            PostOperationError(
                code=ErrorCode.METHOD_NOT_ALLOWED,
                message=f"Method {req.method} is not allowed; use POST.",
            )
        )

    try:
        payload = parse_request_body(request_model, req.get_data())
    except RequestBodyError as e:
        logger.warn(f"Rejected request body: {e.message}")
        return _error_response(
            PostOperationError(
                code=ErrorCode.INVALID_ARGUMENT, message=e.message, reason=e.reason
            )
        )

    result = operation(payload)
    if not result.ok:
        return _error_response(result.error)
    return _json_response(asdict(StatusResult()), 200)


@https_fn.on_request(memory=options.MemoryOption.MB_256)
def publish_post(req: https_fn.Request) -> https_fn.Response:
    """
    Publishes a draft post. Triggered via a button click by an admin user.

    Expects a JSON body `{"draftID": "..."}`. The draft at `drafts/{draftID}`
    is copied to `published/{draftID}` without its `createdAt` field, with
    `publishedAt` set to the server time and `visible` set to True.
    """
    return _handle_post_request(
        req,
        PublishPostRequest,
        lambda payload: posts.publish_post(get_document_store(), payload.draft_id),
    )


@https_fn.on_request(memory=options.MemoryOption.MB_256)
def soft_delete(req: https_fn.Request) -> https_fn.Response:
    """
    Marks a published post as hidden.

    Expects a JSON body `{"postID": "..."}` and sets `visible` to False on
    `published/{postID}`, leaving the other fields untouched.
    """
    return _handle_post_request(
        req,
        SoftDeleteRequest,
        lambda payload: posts.soft_delete(get_document_store(), payload.post_id),
    )
