from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EmployeeRecord


class RecordRepository(Protocol):
    """Append-only record store. "last*" queries are newest first, month queries oldest first."""

    def insert(self, record: EmployeeRecord) -> None:
        raise NotImplementedError

    def delete(self, record_id: str) -> bool:
        raise NotImplementedError

    def delete_all(self, employee_id: str) -> int:
        raise NotImplementedError

    def get_by_id(self, record_id: str) -> Optional[EmployeeRecord]:
        raise NotImplementedError

    def get_all(self, employee_id: Optional[str] = None) -> Sequence[EmployeeRecord]:
        raise NotImplementedError

    def get_today_records(self, employee_id: str, today: date) -> Sequence[EmployeeRecord]:
        raise NotImplementedError

    def get_last_record(self, employee_id: str) -> Optional[EmployeeRecord]:
        raise NotImplementedError

    def get_last_clock_in(self, employee_id: str) -> Optional[EmployeeRecord]:
        raise NotImplementedError

    def get_last_clock_out(self, employee_id: str) -> Optional[EmployeeRecord]:
        raise NotImplementedError

    def get_records_in_month(self, employee_id: str, year: int, month: int) -> Sequence[EmployeeRecord]:
        raise NotImplementedError

    def get_months_with_records(self, employee_id: str) -> Sequence[tuple[int, int]]:
        """Distinct (year, month) pairs, newest first."""

        raise NotImplementedError

    def count(self, employee_id: str) -> int:
        raise NotImplementedError
