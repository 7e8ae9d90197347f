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

from dataclasses import dataclass
from typing import Optional

from shared.types import ErrorCode, HTTP_STATUS_BY_ERROR_CODE


@dataclass
class PostOperationError:
    """Describes why a post operation failed."""

    code: ErrorCode
    message: str
    reason: Optional[str] = None

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_ERROR_CODE.get(self.code, 500)

    def as_dict(self) -> dict:
        error = {"status": str(self.code), "message": self.message}
        if self.reason:
            error["reason"] = str(self.reason)
        return {"error": error}


@dataclass
class PostOperationResult:
    """Outcome of publishing or hiding a post."""

    post_id: str
    error: Optional[PostOperationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class StatusResult:
    """Body returned by the post handlers on success."""

    status: int = 200
