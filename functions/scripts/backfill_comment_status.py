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
Backfill the moderation status of fan comments.

Comments written before moderation existed have no `status` field. They were
already public, so they are marked approved. Without the field the store
cannot filter them, and they would be missing from the paged listing.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.cache import revalidate_paths
from backend.dependencies import build_services
from backend.store import ContentStore, NotFound, Query
from shared.constants import ADMIN_PATH, HOME_PATH
from shared.firebase_constants import FAN_COMMENTS_COLLECTION
from shared.types import CommentStatus

logger = logging.getLogger(__name__)


def find_comments_without_status(store: ContentStore) -> List[str]:
    result = store.query(FAN_COMMENTS_COLLECTION, Query())
    if isinstance(result, NotFound):
        logger.info("No %s collection found.", FAN_COMMENTS_COLLECTION)
        return []
    return [doc.id for doc in result if not doc.data.get("status")]


def backfill_comment_status(store: ContentStore, *, dry_run: bool) -> int:
    comment_ids = find_comments_without_status(store)
    if dry_run or not comment_ids:
        return len(comment_ids)

    batch = store.batch()
    for comment_id in comment_ids:
        batch.update(
            FAN_COMMENTS_COLLECTION,
            comment_id,
            {"status": CommentStatus.APPROVED.value},
        )
    batch.commit()
    return len(comment_ids)


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill fan comment status")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report how many comments would be updated without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    services = build_services()

    updated = backfill_comment_status(services.store, dry_run=args.dry_run)
    if not args.dry_run:
        revalidate_paths(services.cache, HOME_PATH, ADMIN_PATH)
    logger.info("Updated %d comments", updated)
    return 0


if __name__ == "__main__":
    sys.exit(main())
