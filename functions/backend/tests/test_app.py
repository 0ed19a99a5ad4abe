import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from backend.app import create_app
from backend.auth import AdminUser
from backend.config import Settings
from backend.dependencies import Services
from backend.errors import IndexRequired

ADMIN_HEADERS = {"Authorization": "Bearer admin-token"}


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.services = Services.in_memory(Settings(_env_file=None))
        self.services.auth.users_by_token["admin-token"] = AdminUser(
            uid="admin", email="admin@example.com"
        )
        self.client = TestClient(create_app(self.services))

    def test_admin_routes_require_authentication(self):
        response = self.client.post("/api/admin/tour-dates", json={"post_url": "https://fb.com/x"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(self.services.store.collections, {})

    def test_tour_date_flow(self):
        response = self.client.post(
            "/api/admin/tour-dates", json={"post_url": "https://fb.com/x"}, headers=ADMIN_HEADERS
        )
        self.assertEqual(response.status_code, 201)
        date_id = response.json()["id"]

        dates = self.client.get("/api/tour-dates").json()
        self.assertEqual([d["post_url"] for d in dates], ["https://fb.com/x"])

        response = self.client.delete(f"/api/admin/tour-dates/{date_id}", headers=ADMIN_HEADERS)
        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get("/api/tour-dates").json(), [])

    def test_validation_errors_are_400(self):
        response = self.client.post(
            "/api/admin/tour-dates", json={"post_url": ""}, headers=ADMIN_HEADERS
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Post URL is required.")

    def test_missing_cover_file_is_rejected(self):
        response = self.client.post(
            "/api/admin/songs",
            data={"title": "Uno", "artist": "Jokers"},
            files={"audio_file": ("uno.mp3", b"ID3", "audio/mpeg")},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "Missing required fields.")
        self.assertEqual(self.services.blob_store.stored_objects, {})

    def test_song_upload_and_reorder(self):
        ids = []
        for title in ("A", "B", "C"):
            response = self.client.post(
                "/api/admin/songs",
                data={"title": title, "artist": "Jokers"},
                files={
                    "audio_file": (f"{title}.mp3", b"ID3", "audio/mpeg"),
                    "cover_file": (f"{title}.png", b"PNG", "image/png"),
                },
                headers=ADMIN_HEADERS,
            )
            self.assertEqual(response.status_code, 201, response.text)
            ids.append(response.json()["id"])
        a, b, c = ids

        response = self.client.put(
            "/api/admin/songs/order",
            json={"items": [{"id": c, "order": 0}, {"id": a, "order": 1}, {"id": b, "order": 2}]},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(response.json(), {"success": True, "error": None})
        songs = self.client.get("/api/songs").json()
        self.assertEqual([s["id"] for s in songs], [c, a, b])

        response = self.client.delete(f"/api/admin/songs/{a}", headers=ADMIN_HEADERS)
        self.assertEqual(response.status_code, 204)
        response = self.client.delete(f"/api/admin/songs/{a}", headers=ADMIN_HEADERS)
        self.assertEqual(response.status_code, 404)

    def test_comment_moderation(self):
        response = self.client.post(
            "/api/fan-comments", json={"name": "Ana", "comment": "¡Qué concierto!"}
        )
        self.assertEqual(response.status_code, 201)
        comment_id = response.json()["id"]

        public = self.client.get("/api/fan-comments").json()
        self.assertEqual(public, {"items": [], "has_more": False, "next_cursor": None})

        pending = self.client.get(
            "/api/admin/fan-comments", params={"status": "pending"}, headers=ADMIN_HEADERS
        ).json()
        self.assertEqual([c["id"] for c in pending["items"]], [comment_id])

        response = self.client.post(
            "/api/admin/fan-comments/approve", json={"ids": [comment_id]}, headers=ADMIN_HEADERS
        )
        self.assertEqual(response.json(), {"count": 1})

        public = self.client.get("/api/fan-comments").json()
        self.assertEqual([c["status"] for c in public["items"]], ["approved"])

        response = self.client.post(
            "/api/admin/fan-comments/delete", json={"ids": [comment_id]}, headers=ADMIN_HEADERS
        )
        self.assertEqual(response.json(), {"count": 1})

    def test_home_payload_is_cached_until_content_changes(self):
        first = self.client.get("/api/home")
        self.assertEqual(first.status_code, 200)
        self.assertIsNone(first.json()["biography"])
        self.assertIn("/", self.services.cache.entries)

        response = self.client.put(
            "/api/admin/bio", json={"text": "Rock desde 2015."}, headers=ADMIN_HEADERS
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("/", self.services.cache.entries)

        self.assertEqual(self.client.get("/api/home").json()["biography"], "Rock desde 2015.")
        self.assertEqual(self.client.get("/api/bio").json(), {"text": "Rock desde 2015."})

    def test_band_media_video(self):
        response = self.client.post(
            "/api/admin/band-media",
            data={"video_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(response.status_code, 201, response.text)
        self.assertEqual(response.json()["type"], "video")
        self.assertEqual(len(self.client.get("/api/band-media").json()), 1)

    def test_booking(self):
        response = self.client.post(
            "/api/booking",
            json={
                "name": "Laura",
                "email": "laura@example.com",
                "event_type": "Boda",
                "event_date": "2025-09-20",
                "message": "Queremos contrataros para nuestra boda.",
            },
        )
        self.assertEqual(response.json(), {"success": True, "error": None})
        self.assertEqual(len(self.services.mailer.sent), 1)

    @patch("backend.actions.ai.gemini")
    def test_ai_hashtags(self, mock_gemini):
        mock_gemini.call_predict_with_schema.return_value = ["#rock"]
        response = self.client.post(
            "/api/admin/ai/hashtags",
            json={"content_description": "Vídeo del último concierto", "media_type": "video"},
            headers=ADMIN_HEADERS,
        )
        self.assertEqual(
            response.json(), {"success": True, "data": {"hashtags": ["#rock"]}, "error": None}
        )

    def test_index_errors_are_500(self):
        with patch.object(
            self.services.store, "query", side_effect=IndexRequired("create index")
        ):
            response = self.client.get("/api/admin/fan-comments", headers=ADMIN_HEADERS)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["detail"], "create index")


class SessionTests(unittest.TestCase):
    def setUp(self):
        self.services = Services.in_memory(Settings(_env_file=None))
        self.services.auth.users_by_token["id-token"] = AdminUser(uid="admin")
        self.client = TestClient(create_app(self.services), base_url="https://testserver")

    def test_admin_page_redirects_to_login(self):
        response = self.client.get("/admin", follow_redirects=False)
        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/login")

    def test_session_cookie_unlocks_admin_page(self):
        response = self.client.post("/api/session", json={"id_token": "id-token"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("__session", response.cookies)

        response = self.client.get("/admin", follow_redirects=False)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["fan_comments"], [])

        self.client.post("/api/logout")
        response = self.client.get("/admin", follow_redirects=False)
        self.assertEqual(response.status_code, 303)

    def test_admin_page_shows_new_band_media(self):
        self.client.post("/api/session", json={"id_token": "id-token"})
        self.assertEqual(self.client.get("/admin").json()["band_media"], [])

        response = self.client.post(
            "/api/admin/band-media", data={"video_url": "https://youtu.be/abc123"}
        )
        self.assertEqual(response.status_code, 201)

        band_media = self.client.get("/admin").json()["band_media"]
        self.assertEqual(len(band_media), 1)
        self.assertEqual(band_media[0]["url"], "https://www.youtube.com/embed/abc123")

    def test_invalid_id_token(self):
        response = self.client.post("/api/session", json={"id_token": "forged"})
        self.assertEqual(response.status_code, 401)


if __name__ == "__main__":
    unittest.main()
