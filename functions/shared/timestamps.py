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

from datetime import datetime, timezone
from typing import Any, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP


def to_utc_datetime(value: Any) -> Optional[datetime]:
    """
    Normalizes a stored timestamp to an aware UTC datetime.

    Accepts datetimes (naive values are taken as UTC, which also covers the
    DatetimeWithNanoseconds values returned by Firestore) and epoch
    milliseconds as written by JavaScript clients with `Date.now()`.
    Returns None for anything else, including out-of-range epoch values.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def resolve_server_timestamps(data: dict, now: datetime) -> dict:
    """Returns a copy of `data` with top-level SERVER_TIMESTAMP values set to `now`."""
    return {
        key: now if value is SERVER_TIMESTAMP else value for key, value in data.items()
    }
