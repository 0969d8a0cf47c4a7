from __future__ import annotations

from datetime import datetime
from pathlib import Path
from threading import RLock
from typing import Any, Iterable
import logging
import shutil

import yaml

from .errors import ConflictError, ReservationStorageError
from .models import Hall, Reservation
from .store import HallCatalog, ReservationStore, blocking_conflicts

logger = logging.getLogger(__name__)


class ReservationYamlRepository(HallCatalog, ReservationStore):
    """YAML-file backed hall catalog and reservation store.

    Writes go through a temporary file and an atomic replace, so a failed
    write never leaves a half-written reservations file behind.
    """

    def __init__(self, base_dir: str | Path = "data") -> None:
        self.base_dir = Path(base_dir)
        self.halls_file = self.base_dir / "halls.yaml"
        self.reservations_file = self.base_dir / "reservations.yaml"
        self.log_file = self.base_dir / "reservation_events.yaml"
        self._lock = RLock()
        self._ensure_files()

    def _ensure_files(self) -> None:
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            for path in (self.halls_file, self.reservations_file, self.log_file):
                if not path.exists():
                    path.write_text("[]\n", encoding="utf-8")
        except OSError as error:
            raise ReservationStorageError(f"Failed to initialise data directory: {self.base_dir}") from error

    def _read_yaml_list(self, path: Path) -> list[dict[str, Any]]:
        try:
            payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            path.write_text("[]\n", encoding="utf-8")
            return []
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as error:
            return self._handle_unreadable(path, error)

        if payload is None:
            return []
        if not isinstance(payload, list):
            return self._handle_unreadable(path, ValueError("top-level YAML is not a list"))

        sanitized: list[dict[str, Any]] = []
        # Stray rows in the event log itself are dropped without an event.
        for index, row in enumerate(payload):
            if isinstance(row, dict):
                sanitized.append(row)
            elif path != self.log_file:
                self._audit(
                    "YAML_ROW_SKIPPED",
                    {
                        "file": str(path.name),
                        "index": index,
                        "reason": "row is not a mapping",
                    },
                )
        return sanitized

    def _write_yaml_list(self, path: Path, rows: list[dict[str, Any]]) -> None:
        temp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            temp_path.write_text(yaml.safe_dump(rows, allow_unicode=True, sort_keys=False), encoding="utf-8")
            temp_path.replace(path)
        except OSError as error:
            raise ReservationStorageError(f"Failed to write YAML file: {path}") from error
        finally:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)

    def _handle_unreadable(self, path: Path, error: Exception) -> list[dict[str, Any]]:
        # Hall and reservation files are never reset, only the event log.
        if path != self.log_file:
            raise ReservationStorageError(f"Failed to read YAML file: {path.name}") from error

        timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
        backup_path: Path | None = path.with_name(f"{path.stem}.corrupt.{timestamp}{path.suffix}")
        try:
            shutil.copy2(path, backup_path)
        except OSError:
            logger.warning("Could not back up %s before resetting it", path, exc_info=True)
            backup_path = None

        recovered = [
            {
                "event_time": datetime.now().isoformat(timespec="seconds"),
                "event_type": "YAML_RECOVERED",
                "payload": {
                    "file": str(path.name),
                    "backup": backup_path.name if backup_path is not None else None,
                    "reason": str(error),
                },
            }
        ]
        self._write_yaml_list(path, recovered)
        return recovered

    def _log_event(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        timestamp = (event_time or datetime.now()).isoformat(timespec="seconds")
        events = self._read_yaml_list(self.log_file)
        events.append({"event_time": timestamp, "event_type": event_type, "payload": payload})
        self._write_yaml_list(self.log_file, events)

    def _audit(self, event_type: str, payload: dict[str, Any], event_time: datetime | None = None) -> None:
        """Append an event whose data write is already committed; storage errors are only logged."""
        try:
            self._log_event(event_type, payload, event_time)
        except ReservationStorageError:
            logger.exception("Failed to record %s event in %s", event_type, self.log_file)

    def get_events(self) -> list[dict[str, Any]]:
        with self._lock:
            return self._read_yaml_list(self.log_file)

    def get_hall(self, hall_id: str) -> Hall | None:
        for hall in self.list_halls():
            if hall.id == hall_id:
                return hall
        return None

    def list_halls(self) -> list[Hall]:
        with self._lock:
            rows = self._read_yaml_list(self.halls_file)
        return [Hall.from_dict(row) for row in rows]

    def seed_halls(self, halls: Iterable[Hall], overwrite: bool = True) -> list[Hall]:
        seeded = list(halls)
        with self._lock:
            rows = [] if overwrite else self._read_yaml_list(self.halls_file)
            known = {str(row.get("id")) for row in rows}
            rows.extend(hall.to_dict() for hall in seeded if hall.id not in known)
            self._write_yaml_list(self.halls_file, rows)
            self._audit(
                "HALLS_SEEDED",
                {
                    "count": len(seeded),
                    "hall_ids": [hall.id for hall in seeded],
                    "overwrite": overwrite,
                },
            )
        return seeded

    def get_reservations(self) -> list[Reservation]:
        with self._lock:
            rows = self._read_yaml_list(self.reservations_file)
        return [Reservation.from_dict(row) for row in rows]

    def list_by_hall_and_date(self, hall_id: str, date: str) -> list[Reservation]:
        return [row for row in self.get_reservations() if row.hall_id == hall_id and row.date == date]

    def insert(self, reservation: Reservation) -> Reservation:
        with self._lock:
            rows = self._read_yaml_list(self.reservations_file)
            same_slot = [
                Reservation.from_dict(row)
                for row in rows
                if row.get("hall_id") == reservation.hall_id and row.get("date") == reservation.date
            ]
            conflicts = blocking_conflicts(reservation, same_slot)
            if conflicts:
                self._audit(
                    "RESERVATION_REJECTED",
                    {
                        "hall_id": reservation.hall_id,
                        "date": reservation.date,
                        "start_time": reservation.start_time,
                        "end_time": reservation.end_time,
                        "conflicts": [window.to_dict() for window in conflicts],
                    },
                )
                raise ConflictError(conflicts)

            rows.append(reservation.to_dict())
            self._write_yaml_list(self.reservations_file, rows)
            self._audit(
                "RESERVATION_CREATED",
                {
                    "reservation_id": reservation.id,
                    "hall_id": reservation.hall_id,
                    "date": reservation.date,
                    "start_time": reservation.start_time,
                    "end_time": reservation.end_time,
                    "total_amount": str(reservation.total_amount),
                    "caller": reservation.caller,
                },
                reservation.created_at,
            )
        return reservation
