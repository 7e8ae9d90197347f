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

from datetime import timedelta

# Firestore rejects document ids longer than 1500 bytes.
DOCUMENT_ID_MAX_LENGTH = 1500
MAX_TITLE_LENGTH = 50

COMMENT_EDIT_WINDOW = timedelta(hours=1)

DEFAULT_FIRESTORE_TIMEOUT_SEC = 10.0
