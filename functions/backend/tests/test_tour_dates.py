import unittest

from backend.actions import tour_dates
from backend.config import Settings
from backend.dependencies import Services
from backend.errors import ValidationError
from shared.firebase_constants import TOUR_DATES_COLLECTION


class TourDateActionTests(unittest.TestCase):
    def setUp(self):
        self.services = Services.in_memory(Settings(_env_file=None))

    def test_add_list_delete(self):
        date_id = tour_dates.add_tour_date(self.services, "https://fb.com/x")

        dates = tour_dates.list_tour_dates(self.services)
        self.assertEqual(len(dates), 1)
        self.assertEqual(dates[0].id, date_id)
        self.assertEqual(dates[0].post_url, "https://fb.com/x")

        tour_dates.delete_tour_date(self.services, date_id)
        self.assertEqual(tour_dates.list_tour_dates(self.services), [])

    def test_list_on_empty_store_returns_empty_list(self):
        self.assertEqual(tour_dates.list_tour_dates(self.services), [])

    def test_writes_revalidate_home_and_admin(self):
        date_id = tour_dates.add_tour_date(self.services, "https://fb.com/x")
        self.assertEqual(self.services.cache.invalidations, ["/", "/admin"])
        tour_dates.delete_tour_date(self.services, date_id)
        self.assertEqual(self.services.cache.invalidations[-2:], ["/", "/admin"])

    def test_post_url_is_required(self):
        with self.assertRaisesRegex(ValidationError, "Post URL is required."):
            tour_dates.add_tour_date(self.services, "  ")
        with self.assertRaisesRegex(ValidationError, "URL válida"):
            tour_dates.add_tour_date(self.services, "not a url")
        self.assertEqual(self.services.store.collections, {})

    def test_delete_requires_id(self):
        with self.assertRaisesRegex(ValidationError, "Date ID not provided."):
            tour_dates.delete_tour_date(self.services, "")

    def test_reads_legacy_structured_dates(self):
        doc_id = self.services.store.add(
            TOUR_DATES_COLLECTION, {"venueUrl": "https://salax.example/event"}
        )
        date = tour_dates.tour_dates(self.services).get(doc_id)
        self.assertEqual(date.post_url, "https://salax.example/event")


if __name__ == "__main__":
    unittest.main()
