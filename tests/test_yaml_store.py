import tempfile
import unittest
from decimal import Decimal
from pathlib import Path
from unittest import mock

from hall_booking import (
    DEMO_HALLS,
    ConflictError,
    ReservationStatus,
    ReservationStorageError,
    ReservationYamlRepository,
)

from .helpers import make_reservation


class TestReservationYamlRepository(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        self.data_dir = Path(self._temp_dir.name) / "data"
        self.repo = ReservationYamlRepository(self.data_dir)

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def test_creates_empty_files(self) -> None:
        for name in ("halls.yaml", "reservations.yaml", "reservation_events.yaml"):
            self.assertTrue((self.data_dir / name).exists())
        self.assertEqual(self.repo.get_reservations(), [])
        self.assertEqual(self.repo.list_halls(), [])

    def test_insert_persists_across_instances(self) -> None:
        reservation = make_reservation("r1", "10:00", "12:00")
        self.repo.insert(reservation)

        reopened = ReservationYamlRepository(self.data_dir)
        rows = reopened.list_by_hall_and_date("h_1", "2025-06-01")

        self.assertEqual(rows, [reservation])
        self.assertEqual(rows[0].total_amount, Decimal("100.00"))
        self.assertEqual(reopened.list_by_hall_and_date("h_1", "2025-06-02"), [])

    def test_insert_rejects_overlapping_confirmed_row(self) -> None:
        self.repo.insert(make_reservation("r1", "10:00", "12:00"))

        with self.assertRaises(ConflictError):
            self.repo.insert(make_reservation("r2", "11:30", "13:00"))

        self.assertEqual([row.id for row in self.repo.get_reservations()], ["r1"])
        event_types = [event["event_type"] for event in self.repo.get_events()]
        self.assertEqual(event_types, ["RESERVATION_CREATED", "RESERVATION_REJECTED"])

    def test_pending_rows_do_not_block_and_are_not_blocked(self) -> None:
        self.repo.insert(make_reservation("r1", "10:00", "12:00", status=ReservationStatus.PENDING))
        self.repo.insert(make_reservation("r2", "10:00", "12:00"))
        self.repo.insert(make_reservation("r3", "11:00", "12:00", status=ReservationStatus.PENDING))

        statuses = [row.status for row in self.repo.get_reservations()]
        self.assertEqual(
            statuses,
            [ReservationStatus.PENDING, ReservationStatus.CONFIRMED, ReservationStatus.PENDING],
        )

    def test_seed_and_lookup_halls(self) -> None:
        self.repo.seed_halls(DEMO_HALLS)

        hall = self.repo.get_hall("h_2")

        self.assertIsNotNone(hall)
        self.assertEqual(hall.price_per_hour, Decimal("300"))
        self.assertEqual(hall.amenities, ("Chandeliers", "Dance floor", "Catering area"))
        self.assertIsNone(self.repo.get_hall("h_404"))
        self.assertEqual(self.repo.get_events()[-1]["event_type"], "HALLS_SEEDED")

    def test_seed_without_overwrite_keeps_existing_halls(self) -> None:
        self.repo.seed_halls(DEMO_HALLS[:1])
        self.repo.seed_halls(DEMO_HALLS, overwrite=False)

        self.assertEqual([hall.id for hall in self.repo.list_halls()], ["h_1", "h_2"])

    def test_corrupted_reservations_file_raises(self) -> None:
        self.repo.reservations_file.write_text("hall_id: h_1\n", encoding="utf-8")

        with self.assertRaises(ReservationStorageError):
            self.repo.list_by_hall_and_date("h_1", "2025-06-01")
        with self.assertRaises(ReservationStorageError):
            self.repo.insert(make_reservation("r1", "10:00", "12:00"))

        self.assertEqual(self.repo.reservations_file.read_text(encoding="utf-8"), "hall_id: h_1\n")

    def test_corrupted_event_log_is_backed_up_and_reset(self) -> None:
        self.repo.log_file.write_text("event_type: broken\n", encoding="utf-8")

        self.repo.insert(make_reservation("r1", "10:00", "12:00"))

        event_types = [event["event_type"] for event in self.repo.get_events()]
        self.assertEqual(event_types, ["YAML_RECOVERED", "RESERVATION_CREATED"])
        backups = list(self.data_dir.glob("reservation_events.corrupt.*.yaml"))
        self.assertEqual(len(backups), 1)

    def test_skips_rows_that_are_not_mappings(self) -> None:
        self.repo.insert(make_reservation("r1", "10:00", "12:00"))
        content = self.repo.reservations_file.read_text(encoding="utf-8")
        self.repo.reservations_file.write_text(content + "- just a string\n", encoding="utf-8")

        self.assertEqual([row.id for row in self.repo.get_reservations()], ["r1"])
        self.assertEqual(self.repo.get_events()[-1]["event_type"], "YAML_ROW_SKIPPED")

    def test_stray_event_log_row_is_dropped_without_failing_insert(self) -> None:
        self.repo.log_file.write_text("- stray line\n", encoding="utf-8")

        stored = self.repo.insert(make_reservation("r1", "10:00", "12:00"))

        self.assertEqual(stored.id, "r1")
        self.assertEqual([row.id for row in self.repo.get_reservations()], ["r1"])
        event_types = [event["event_type"] for event in self.repo.get_events()]
        self.assertEqual(event_types, ["RESERVATION_CREATED"])

    def test_stray_event_log_row_does_not_break_seeding(self) -> None:
        self.repo.log_file.write_text("- stray line\n", encoding="utf-8")

        self.repo.seed_halls(DEMO_HALLS)

        self.assertEqual([hall.id for hall in self.repo.list_halls()], ["h_1", "h_2"])
        self.assertEqual([event["event_type"] for event in self.repo.get_events()], ["HALLS_SEEDED"])

    def test_unwritable_event_log_keeps_committed_reservation(self) -> None:
        self.repo.log_file.unlink()
        self.repo.log_file.mkdir()

        with self.assertLogs("hall_booking.yaml_store", level="ERROR") as captured:
            stored = self.repo.insert(make_reservation("r1", "10:00", "12:00"))

        self.assertEqual(stored.id, "r1")
        self.assertEqual([row.id for row in self.repo.get_reservations()], ["r1"])
        self.assertIn("RESERVATION_CREATED", "\n".join(captured.output))

    def test_failed_backup_is_not_reported_as_backup_file(self) -> None:
        self.repo.log_file.write_text("event_type: broken\n", encoding="utf-8")

        with mock.patch("hall_booking.yaml_store.shutil.copy2", side_effect=OSError("disk full")):
            with self.assertLogs("hall_booking.yaml_store", level="WARNING"):
                events = self.repo.get_events()

        self.assertEqual(events[0]["event_type"], "YAML_RECOVERED")
        self.assertIsNone(events[0]["payload"]["backup"])
        self.assertEqual(list(self.data_dir.glob("reservation_events.corrupt.*.yaml")), [])


if __name__ == "__main__":
    unittest.main()
