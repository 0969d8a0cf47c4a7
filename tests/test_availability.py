import unittest

from hall_booking import (
    AvailabilityChecker,
    AvailabilityQuery,
    BackendError,
    InMemoryReservationStore,
    ReservationStatus,
    TimeWindow,
)
from hall_booking.store import ReservationStore

from .helpers import FixedRandom, make_reservation


class BrokenStore(ReservationStore):
    def list_by_hall_and_date(self, hall_id, date):
        raise RuntimeError("connection refused: db.internal:5432")

    def insert(self, reservation):
        raise RuntimeError("connection refused: db.internal:5432")


class TestAvailabilityChecker(unittest.TestCase):
    def setUp(self) -> None:
        reservations = [
            make_reservation("r1", "14:00", "15:00"),
            make_reservation("r2", "10:00", "12:00"),
            make_reservation("r3", "12:00", "13:00", status=ReservationStatus.PENDING),
            make_reservation("r4", "11:00", "12:00", hall_id="h_2"),
            make_reservation("r5", "11:00", "12:00", date="2025-06-02"),
        ]
        self.store = InMemoryReservationStore({row.id: row for row in reservations})
        self.checker = AvailabilityChecker(self.store)

    def test_lists_confirmed_conflicts_sorted_by_start(self) -> None:
        result = self.checker.check(AvailabilityQuery("h_1", "2025-06-01", "11:00", "14:30"))

        self.assertFalse(result.available)
        self.assertEqual(result.conflicts, (TimeWindow("10:00", "12:00"), TimeWindow("14:00", "15:00")))
        self.assertFalse(result.demo)

    def test_pending_reservations_do_not_block(self) -> None:
        result = self.checker.check(AvailabilityQuery("h_1", "2025-06-01", "12:00", "13:00"))

        self.assertTrue(result.available)
        self.assertEqual(result.conflicts, ())

    def test_adjacent_window_is_available(self) -> None:
        result = self.checker.check(AvailabilityQuery("h_1", "2025-06-01", "15:00", "16:00"))

        self.assertTrue(result.available)

    def test_other_halls_and_dates_are_ignored(self) -> None:
        result = self.checker.check(AvailabilityQuery("h_2", "2025-06-01", "09:00", "10:30"))

        self.assertTrue(result.available)

    def test_repeated_checks_are_identical(self) -> None:
        query = AvailabilityQuery("h_1", "2025-06-01", "09:00", "10:30")

        first = self.checker.check(query)
        second = self.checker.check(query)

        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), {"available": False, "conflicts": [{"startTime": "10:00", "endTime": "12:00"}]})

    def test_store_failure_surfaces_as_backend_error(self) -> None:
        checker = AvailabilityChecker(BrokenStore())

        with self.assertLogs("hall_booking.availability", level="ERROR"):
            with self.assertRaises(BackendError) as context:
                checker.check(AvailabilityQuery("h_1", "2025-06-01", "09:00", "10:00"))

        self.assertNotIn("db.internal", context.exception.message)


class TestDemoAvailability(unittest.TestCase):
    def test_demo_conflict_is_labelled(self) -> None:
        checker = AvailabilityChecker(None, rng=FixedRandom(0.1))

        result = checker.check(AvailabilityQuery("h_1", "2025-06-01", "09:00", "10:00"))

        self.assertTrue(checker.demo_mode)
        self.assertFalse(result.available)
        self.assertEqual(result.conflicts, (TimeWindow("10:00", "12:00"),))
        payload = result.to_dict()
        self.assertTrue(payload["demo"])
        self.assertTrue(payload["note"])

    def test_demo_available_is_labelled(self) -> None:
        checker = AvailabilityChecker(None, rng=FixedRandom(0.9))

        result = checker.check(AvailabilityQuery("h_1", "2025-06-01", "09:00", "10:00"))

        self.assertTrue(result.available)
        self.assertTrue(result.demo)
        self.assertIsNotNone(result.note)

    def test_authoritative_results_carry_no_demo_fields(self) -> None:
        checker = AvailabilityChecker(InMemoryReservationStore())

        payload = checker.check(AvailabilityQuery("h_1", "2025-06-01", "09:00", "10:00")).to_dict()

        self.assertNotIn("demo", payload)
        self.assertNotIn("note", payload)


if __name__ == "__main__":
    unittest.main()
