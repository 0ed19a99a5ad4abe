import unittest

from backend.actions import galleries
from backend.config import Settings
from backend.dependencies import Services
from backend.errors import ConfigurationError, ValidationError
from shared.api import UploadedFile
from shared.types import MediaType


class YouTubeIdTests(unittest.TestCase):
    def test_extracts_ids(self):
        cases = {
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ": "dQw4w9WgXcQ",
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42": "dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ?si=abc": "dQw4w9WgXcQ",
            "https://www.youtube.com/embed/dQw4w9WgXcQ": "dQw4w9WgXcQ",
            "https://www.youtube.com/v/dQw4w9WgXcQ": "dQw4w9WgXcQ",
        }
        for url, expected in cases.items():
            with self.subTest(url=url):
                self.assertEqual(galleries.youtube_video_id(url), expected)

    def test_rejects_non_youtube_urls(self):
        self.assertIsNone(galleries.youtube_video_id("https://vimeo.com/12345"))
        self.assertIsNone(galleries.youtube_video_id("https://youtu.be/"))


class GalleryActionTests(unittest.TestCase):
    def setUp(self):
        self.services = Services.in_memory(Settings(_env_file=None))

    def test_band_image_upload_goes_to_blob_store(self):
        upload = UploadedFile(filename="live.jpg", content_type="image/jpeg", data=b"jpg")
        item = galleries.upload_band_media(self.services, file=upload)

        self.assertEqual(item.type, MediaType.IMAGE)
        self.assertEqual(item.name, "live.jpg")
        self.assertTrue(item.storage_path.startswith("band-gallery/"))
        self.assertIn(item.storage_path, self.services.blob_store.public_paths)
        self.assertEqual(galleries.list_band_media(self.services)[0].url, item.url)

    def test_band_gallery_revalidates_home_and_admin(self):
        galleries.upload_band_media(self.services, image_url="https://img.example/a.jpg")
        self.assertEqual(self.services.cache.invalidations, ["/", "/admin"])

    def test_band_video_urls(self):
        video = galleries.upload_band_media(
            self.services, video_url="https://youtu.be/dQw4w9WgXcQ"
        )
        self.assertEqual(video.type, MediaType.VIDEO)
        self.assertEqual(video.url, "https://www.youtube.com/embed/dQw4w9WgXcQ")

        facebook = galleries.upload_band_media(
            self.services, video_url="https://www.facebook.com/jokers/videos/123"
        )
        self.assertEqual(facebook.type, MediaType.FACEBOOK)

        with self.assertRaisesRegex(ValidationError, "Invalid YouTube URL provided."):
            galleries.upload_band_media(self.services, video_url="https://vimeo.com/1")

        types = {item.type for item in galleries.list_band_media(self.services)}
        self.assertEqual(types, {MediaType.VIDEO, MediaType.FACEBOOK})

    def test_band_media_requires_input(self):
        with self.assertRaisesRegex(ValidationError, "No image or video URL provided."):
            galleries.upload_band_media(self.services)

    def test_only_images_are_accepted(self):
        pdf = UploadedFile(filename="rider.pdf", content_type="application/pdf", data=b"%PDF")
        with self.assertRaisesRegex(ValidationError, "Only image files are allowed."):
            galleries.add_fan_media(self.services, file=pdf)
        self.assertEqual(self.services.blob_store.stored_objects, {})

    def test_fan_media_url_and_delete(self):
        with self.assertRaisesRegex(ValidationError, "No URL provided."):
            galleries.add_fan_media(self.services)

        item = galleries.add_fan_media(self.services, url="https://img.example/fan.jpg")
        self.assertEqual(item.name, "Fan Image")
        self.assertEqual([m.id for m in galleries.list_fan_media(self.services)], [item.id])

        galleries.delete_fan_media(self.services, item.id)
        self.assertEqual(galleries.list_fan_media(self.services), [])

    def test_delete_removes_backing_blob(self):
        upload = UploadedFile(filename="fan.png", content_type="image/png", data=b"png")
        item = galleries.add_fan_media(self.services, file=upload)

        galleries.delete_fan_media(self.services, item.id)

        self.assertNotIn(item.storage_path, self.services.blob_store.stored_objects)
        self.assertEqual(galleries.list_fan_media(self.services), [])

    def test_delete_requires_id(self):
        with self.assertRaisesRegex(ValidationError, "Item ID not provided."):
            galleries.delete_band_media(self.services, "")

    def test_upload_without_bucket_fails_before_write(self):
        self.services.blob_store = None
        upload = UploadedFile(filename="live.jpg", content_type="image/jpeg", data=b"jpg")
        with self.assertRaises(ConfigurationError):
            galleries.upload_band_media(self.services, file=upload)
        self.assertEqual(self.services.store.collections, {})


if __name__ == "__main__":
    unittest.main()
