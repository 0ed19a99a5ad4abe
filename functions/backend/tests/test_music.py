import unittest
from unittest.mock import patch

from backend.actions import music
from backend.config import Settings
from backend.dependencies import Services
from backend.errors import ConfigurationError, ValidationError
from shared.api import SongOrderItem, UploadedFile
from shared.firebase_constants import MUSIC_COLLECTION


def _audio(name="track.mp3"):
    return UploadedFile(filename=name, content_type="audio/mpeg", data=b"ID3audio")


def _cover(name="cover.png"):
    return UploadedFile(filename=name, content_type="image/png", data=b"\x89PNGcover")


class MusicActionTests(unittest.TestCase):
    def setUp(self):
        self.services = Services.in_memory(Settings(_env_file=None))

    def _add(self, title):
        return music.add_song(self.services, title, "Jokers", _audio(), _cover())

    def test_add_song_uploads_files_and_appends_order(self):
        first = self._add("Uno")
        second = self._add("Dos")

        songs = music.list_songs(self.services)
        self.assertEqual([s.id for s in songs], [first, second])
        self.assertEqual([s.order for s in songs], [0, 1])

        song = songs[0]
        self.assertTrue(song.audio_path.startswith("music/audio/"))
        self.assertTrue(song.audio_path.endswith("-track.mp3"))
        self.assertTrue(song.cover_path.startswith("music/covers/"))
        blobs = self.services.blob_store
        self.assertIn(song.audio_path, blobs.public_paths)
        self.assertIn(song.cover_path, blobs.public_paths)
        self.assertEqual(song.audio_url, blobs.public_url(song.audio_path))

    def test_missing_cover_fails_before_any_write(self):
        with self.assertRaisesRegex(ValidationError, "Missing required fields."):
            music.add_song(self.services, "Uno", "Jokers", _audio(), None)
        self.assertEqual(self.services.store.collections, {})
        self.assertEqual(self.services.blob_store.stored_objects, {})

    def test_rejects_unsupported_files(self):
        video = UploadedFile(filename="clip.mp4", content_type="video/mp4", data=b"x")
        with self.assertRaisesRegex(ValidationError, "mp3"):
            music.add_song(self.services, "Uno", "Jokers", video, _cover())
        gif = UploadedFile(filename="c.gif", content_type="image/gif", data=b"x")
        with self.assertRaisesRegex(ValidationError, "webp"):
            music.add_song(self.services, "Uno", "Jokers", _audio(), gif)

    def test_requires_storage_configuration(self):
        self.services.blob_store = None
        with self.assertRaisesRegex(ConfigurationError, "bucket name is not configured"):
            self._add("Uno")
        self.assertEqual(self.services.store.collections, {})

    def test_failed_upload_does_not_roll_back_other_upload(self):
        blobs = self.services.blob_store
        original_save = blobs.save

        def fail_covers(path, data, content_type):
            if path.startswith("music/covers/"):
                raise OSError("bucket unavailable")
            original_save(path, data, content_type)

        with patch.object(blobs, "save", side_effect=fail_covers):
            with self.assertRaises(OSError):
                self._add("Uno")
        self.assertEqual(len(blobs.stored_objects), 1)
        self.assertEqual(music.list_songs(self.services), [])

    def test_reorder_then_list(self):
        a, b, c = self._add("A"), self._add("B"), self._add("C")
        result = music.update_song_order(
            self.services,
            [SongOrderItem(id=c, order=0), SongOrderItem(id=a, order=1), SongOrderItem(id=b, order=2)],
        )
        self.assertTrue(result.success)
        self.assertIsNone(result.error)
        self.assertEqual([s.id for s in music.list_songs(self.services)], [c, a, b])

    def test_reorder_with_unknown_song_reports_failure_and_writes_nothing(self):
        a, b = self._add("A"), self._add("B")
        result = music.update_song_order(
            self.services, [SongOrderItem(id=b, order=0), SongOrderItem(id="gone", order=1)]
        )
        self.assertFalse(result.success)
        self.assertIn("gone", result.error)
        self.assertEqual([s.id for s in music.list_songs(self.services)], [a, b])

    @patch("backend.actions.music.utc_now")
    def test_songs_without_order_follow_newest_first(self, mock_now):
        from datetime import datetime, timezone

        store = self.services.store
        old = store.add(
            MUSIC_COLLECTION,
            {"title": "Old", "artist": "J", "audioUrl": "a", "coverUrl": "c",
             "audioPath": "a", "coverPath": "c",
             "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc)},
        )
        newer = store.add(
            MUSIC_COLLECTION,
            {"title": "Newer", "artist": "J", "audioUrl": "a", "coverUrl": "c",
             "audioPath": "a", "coverPath": "c",
             "createdAt": datetime(2024, 2, 1, tzinfo=timezone.utc)},
        )
        mock_now.return_value = datetime(2025, 1, 1, tzinfo=timezone.utc)
        ordered = self._add("Ordered")

        self.assertEqual(
            [s.id for s in music.list_songs(self.services)], [ordered, newer, old]
        )

    def test_delete_song_removes_files_and_document(self):
        song_id = self._add("Uno")
        song = music.songs(self.services).get(song_id)

        music.delete_song(self.services, song)

        self.assertEqual(music.list_songs(self.services), [])
        self.assertEqual(self.services.blob_store.stored_objects, {})

    def test_delete_song_ignores_blob_failures(self):
        song_id = self._add("Uno")
        song = music.songs(self.services).get(song_id)
        self.services.blob_store.stored_objects.clear()

        with self.assertLogs("backend.storage", level="ERROR") as logs:
            music.delete_song(self.services, song)

        self.assertEqual(len(logs.records), 2)
        self.assertIsNone(music.songs(self.services).get(song_id))

    def test_delete_song_requires_id(self):
        with self.assertRaisesRegex(ValidationError, "Song ID not provided."):
            music.delete_song(self.services, None)
        with self.assertRaisesRegex(ValidationError, "Song ID not provided."):
            music.delete_song_by_id(self.services, "")


if __name__ == "__main__":
    unittest.main()
