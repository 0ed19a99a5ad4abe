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
Backfill the `order` field of songs uploaded before manual ordering existed.

Unordered songs are appended after the highest existing order, newest first,
which is the order the music list already shows them in.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Tuple

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.cache import revalidate_paths
from backend.dependencies import build_services
from backend.store import ContentStore, NotFound, Query, StoredDocument
from shared.constants import ADMIN_PATH, HOME_PATH
from shared.firebase_constants import MUSIC_COLLECTION

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_at(doc: StoredDocument) -> datetime:
    value = doc.data.get("createdAt")
    if not isinstance(value, datetime):
        return _EPOCH
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def plan_song_order(docs: List[StoredDocument]) -> List[Tuple[str, int]]:
    """Returns (song id, order) for every song that has no order yet."""
    orders = [d.data["order"] for d in docs if isinstance(d.data.get("order"), int)]
    next_order = max(orders) + 1 if orders else 0
    unordered = [d for d in docs if not isinstance(d.data.get("order"), int)]
    unordered.sort(key=_created_at, reverse=True)
    return [(doc.id, next_order + i) for i, doc in enumerate(unordered)]


def backfill_song_order(store: ContentStore, *, dry_run: bool) -> int:
    result = store.query(MUSIC_COLLECTION, Query())
    if isinstance(result, NotFound):
        logger.info("No %s collection found.", MUSIC_COLLECTION)
        return 0

    plan = plan_song_order(result)
    if dry_run or not plan:
        for song_id, order in plan:
            logger.info("Would set %s order=%d", song_id, order)
        return len(plan)

    batch = store.batch()
    for song_id, order in plan:
        batch.update(MUSIC_COLLECTION, song_id, {"order": order})
    batch.commit()
    return len(plan)


def main() -> int:
    parser = argparse.ArgumentParser(description="Backfill song order")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the planned order without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    services = build_services()

    updated = backfill_song_order(services.store, dry_run=args.dry_run)
    if not args.dry_run:
        revalidate_paths(services.cache, HOME_PATH, ADMIN_PATH)
    logger.info("Updated %d songs", updated)
    return 0


if __name__ == "__main__":
    sys.exit(main())
