import unittest
from datetime import datetime, timezone

from backend.store import InMemoryContentStore
from scripts.backfill_comment_status import backfill_comment_status
from scripts.backfill_song_order import backfill_song_order
from shared.firebase_constants import FAN_COMMENTS_COLLECTION, MUSIC_COLLECTION


def _at(day):
    return datetime(2024, 1, day, tzinfo=timezone.utc)


class BackfillCommentStatusTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryContentStore()
        self.store.set(FAN_COMMENTS_COLLECTION, "old", {"name": "Ana", "comment": "Hola"})
        self.store.set(
            FAN_COMMENTS_COLLECTION,
            "new",
            {"name": "Luis", "comment": "Genial", "status": "pending"},
        )

    def test_marks_legacy_comments_approved(self):
        self.assertEqual(backfill_comment_status(self.store, dry_run=False), 1)
        self.assertEqual(self.store.get(FAN_COMMENTS_COLLECTION, "old")["status"], "approved")
        self.assertEqual(self.store.get(FAN_COMMENTS_COLLECTION, "new")["status"], "pending")

    def test_dry_run_writes_nothing(self):
        self.assertEqual(backfill_comment_status(self.store, dry_run=True), 1)
        self.assertNotIn("status", self.store.get(FAN_COMMENTS_COLLECTION, "old"))

    def test_missing_collection(self):
        self.assertEqual(backfill_comment_status(InMemoryContentStore(), dry_run=False), 0)


class BackfillSongOrderTests(unittest.TestCase):
    def test_appends_unordered_songs_newest_first(self):
        store = InMemoryContentStore()
        store.set(MUSIC_COLLECTION, "ordered", {"title": "A", "order": 3, "createdAt": _at(1)})
        store.set(MUSIC_COLLECTION, "older", {"title": "B", "createdAt": _at(2)})
        store.set(MUSIC_COLLECTION, "newer", {"title": "C", "createdAt": _at(5)})

        self.assertEqual(backfill_song_order(store, dry_run=False), 2)
        self.assertEqual(store.get(MUSIC_COLLECTION, "ordered")["order"], 3)
        self.assertEqual(store.get(MUSIC_COLLECTION, "newer")["order"], 4)
        self.assertEqual(store.get(MUSIC_COLLECTION, "older")["order"], 5)

    def test_nothing_to_do(self):
        store = InMemoryContentStore()
        store.set(MUSIC_COLLECTION, "a", {"title": "A", "order": 0})
        self.assertEqual(backfill_song_order(store, dry_run=False), 0)


if __name__ == "__main__":
    unittest.main()
