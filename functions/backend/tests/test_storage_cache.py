import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError
from botocore.stub import Stubber
from redis import exceptions as redis_exceptions

from backend import pages
from backend.cache import InMemoryPageCache, RedisPageCache, revalidate_paths
from backend.config import Settings
from backend.dependencies import Services, _build_blob_store
from backend.errors import BlobNotFound
from backend.storage import (
    CosBlobStore,
    InMemoryBlobStore,
    build_blob_path,
    delete_quietly,
    upload_file,
)
from shared.api import UploadedFile


class BlobStorageTests(unittest.TestCase):
    def test_build_blob_path_is_timestamp_prefixed(self):
        self.assertEqual(
            build_blob_path("music/audio", "song.mp3", now=1700000000.5),
            "music/audio/1700000000500-song.mp3",
        )
        self.assertEqual(
            build_blob_path("music/covers", "C:\\fakepath\\cover.png", now=1),
            "music/covers/1000-cover.png",
        )

    def test_upload_file_saves_and_publishes(self):
        store = InMemoryBlobStore()
        upload = UploadedFile(filename="a.png", content_type="image/png", data=b"png")

        result = upload_file(store, upload, "band-gallery")

        self.assertEqual(store.stored_objects[result.path], (b"png", "image/png"))
        self.assertIn(result.path, store.public_paths)
        self.assertEqual(result.download_url, store.public_url(result.path))

    def test_delete_missing_blob(self):
        store = InMemoryBlobStore()
        with self.assertRaises(BlobNotFound):
            store.delete("missing")
        with self.assertLogs("backend.storage", level="ERROR"):
            delete_quietly(store, "missing", "audio")
        delete_quietly(store, None, "audio")


class CosBlobStoreTests(unittest.TestCase):
    BUCKET = "band-1250000000"

    def setUp(self):
        self.store = CosBlobStore(
            bucket=self.BUCKET,
            region="ap-guangzhou",
            endpoint="https://cos.ap-guangzhou.myqcloud.com",
            access_key_id="test-id",
            secret_access_key="test-secret",
        )
        self.stubber = Stubber(self.store._client)
        self.stubber.activate()
        self.addCleanup(self.stubber.deactivate)

    def test_upload_file_puts_and_publishes(self):
        upload = UploadedFile(filename="live.png", content_type="image/png", data=b"png")
        path = "band-gallery/1700000000000-live.png"
        with patch("backend.storage.build_blob_path", return_value=path):
            self.stubber.add_response(
                "put_object",
                {},
                {"Bucket": self.BUCKET, "Key": path, "Body": b"png", "ContentType": "image/png"},
            )
            self.stubber.add_response(
                "put_object_acl",
                {},
                {"Bucket": self.BUCKET, "Key": path, "ACL": "public-read"},
            )
            result = upload_file(self.store, upload, "band-gallery")

        self.stubber.assert_no_pending_responses()
        self.assertEqual(result.path, path)
        self.assertEqual(
            result.download_url,
            f"https://{self.BUCKET}.cos.ap-guangzhou.myqcloud.com/{path}",
        )

    def test_delete_existing_object(self):
        params = {"Bucket": self.BUCKET, "Key": "music/audio/1-a.mp3"}
        self.stubber.add_response("head_object", {}, params)
        self.stubber.add_response("delete_object", {}, params)
        self.store.delete("music/audio/1-a.mp3")
        self.stubber.assert_no_pending_responses()

    def test_delete_missing_object(self):
        self.stubber.add_client_error(
            "head_object",
            service_error_code="404",
            http_status_code=404,
            expected_params={"Bucket": self.BUCKET, "Key": "missing"},
        )
        with self.assertRaises(BlobNotFound):
            self.store.delete("missing")

    def test_delete_access_denied_propagates(self):
        self.stubber.add_client_error(
            "head_object",
            service_error_code="AccessDenied",
            http_status_code=403,
            expected_params={"Bucket": self.BUCKET, "Key": "private"},
        )
        with self.assertRaises(ClientError):
            self.store.delete("private")

    def test_cos_settings_select_cos_store(self):
        settings = Settings(
            _env_file=None,
            cos_bucket=self.BUCKET,
            cos_region="ap-guangzhou",
            cos_endpoint="https://cos.ap-guangzhou.myqcloud.com",
            storage_bucket="ignored.appspot.com",
        )
        self.assertIsInstance(_build_blob_store(settings), CosBlobStore)
        self.assertIsNone(_build_blob_store(Settings(_env_file=None)))


class PageCacheTests(unittest.TestCase):
    def test_revalidate_drops_cached_pages(self):
        cache = InMemoryPageCache()
        cache.set("/", {"songs": []}, cache.generation("/"))
        cache.set("/admin", {"songs": []}, cache.generation("/admin"))

        revalidate_paths(cache, "/")

        self.assertIsNone(cache.get("/"))
        self.assertIsNotNone(cache.get("/admin"))
        self.assertEqual(cache.invalidations, ["/"])

    def test_stale_generation_is_not_stored(self):
        cache = InMemoryPageCache()
        generation = cache.generation("/")
        cache.invalidate("/")

        self.assertFalse(cache.set("/", {"bio": "old"}, generation))
        self.assertIsNone(cache.get("/"))
        self.assertTrue(cache.set("/", {"bio": "new"}, cache.generation("/")))

    def test_page_invalidated_while_rebuilding_is_not_cached(self):
        services = Services.in_memory(Settings(_env_file=None))
        builds = []

        def build(current):
            builds.append(1)
            # A content write lands after the data was read.
            revalidate_paths(current.cache, "/")
            return {"bio": "stale"}

        self.assertEqual(pages.cached_page(services, "/", build), {"bio": "stale"})
        self.assertIsNone(services.cache.get("/"))

        pages.cached_page(services, "/", lambda current: {"bio": "fresh"})
        self.assertEqual(services.cache.get("/"), {"bio": "fresh"})
        self.assertEqual(len(builds), 1)

    @patch("backend.cache.redis.Redis")
    def test_redis_cache_round_trip(self, mock_redis):
        client = MagicMock()
        mock_redis.from_url.return_value = client
        pipe = client.pipeline.return_value.__enter__.return_value
        cache = RedisPageCache(url="redis://localhost:6379/0", ttl_seconds=60)

        client.get.return_value = b"3"
        self.assertEqual(cache.generation("/"), 3)
        client.get.assert_called_with("band:page-gen:/")

        pipe.get.return_value = b"3"
        self.assertTrue(cache.set("/", {"bio": "hola"}, 3))
        pipe.watch.assert_called_once_with("band:page-gen:/")
        pipe.set.assert_called_once_with("band:page:/", '{"bio": "hola"}', ex=60)
        pipe.execute.assert_called_once()

        client.get.return_value = b'{"bio": "hola"}'
        self.assertEqual(cache.get("/"), {"bio": "hola"})

    @patch("backend.cache.redis.Redis")
    def test_redis_set_skips_stale_generation(self, mock_redis):
        client = MagicMock()
        mock_redis.from_url.return_value = client
        pipe = client.pipeline.return_value.__enter__.return_value
        cache = RedisPageCache(url="redis://localhost:6379/0")

        pipe.get.return_value = b"4"
        self.assertFalse(cache.set("/", {"bio": "old"}, 3))
        pipe.set.assert_not_called()

        pipe.get.return_value = b"4"
        pipe.execute.side_effect = redis_exceptions.WatchError()
        self.assertFalse(cache.set("/", {"bio": "old"}, 4))

    @patch("backend.cache.redis.Redis")
    def test_redis_invalidate_bumps_generation(self, mock_redis):
        client = MagicMock()
        mock_redis.from_url.return_value = client
        pipe = client.pipeline.return_value.__enter__.return_value
        cache = RedisPageCache(url="redis://localhost:6379/0")

        cache.invalidate("/admin")

        pipe.delete.assert_called_once_with("band:page:/admin")
        pipe.incr.assert_called_once_with("band:page-gen:/admin")
        pipe.execute.assert_called_once()

    @patch("backend.cache.redis.Redis")
    def test_redis_read_failure_is_a_miss(self, mock_redis):
        client = MagicMock()
        client.get.side_effect = redis_exceptions.ConnectionError("down")
        mock_redis.from_url.return_value = client
        cache = RedisPageCache(url="redis://localhost:6379/0")
        self.assertIsNone(cache.get("/"))
        self.assertIsNone(cache.generation("/"))
        self.assertFalse(cache.set("/", {"bio": "hola"}, None))



if __name__ == "__main__":
    unittest.main()
