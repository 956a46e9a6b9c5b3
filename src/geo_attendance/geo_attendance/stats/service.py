from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from typing import Any, Optional

from ..common.datetime_utils import weekdays_in_month
from ..core.exceptions import ValidationError
from ..records.model import EmployeeRecord
from ..records.repository import RecordRepository
from .calculator.base import WorkDurationCalculator
from .calculator.paired_calculator import PairedIntervalCalculator


@dataclass(frozen=True)
class AvailableMonth:
    year: int
    month: int
    month_name: str

    def to_dict(self) -> dict[str, Any]:
        return {"year": self.year, "month": self.month, "monthName": self.month_name}


@dataclass(frozen=True)
class MonthlyStats:
    year: int
    month: int
    total_working_days: int
    days_clocked_in: int
    attendance_rate: float
    total_hours: float
    records: list[EmployeeRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "totalWorkingDays": self.total_working_days,
            "daysClockedIn": self.days_clocked_in,
            "attendanceRate": self.attendance_rate,
            "totalHours": self.total_hours,
            "records": [r.to_dict() for r in self.records],
        }


class MonthlyStatsService:
    """Aggregates are recomputed from the record log on every read."""

    def __init__(
        self,
        records: RecordRepository,
        *,
        calculator: Optional[WorkDurationCalculator] = None,
    ):
        self._records = records
        self._calculator = calculator or PairedIntervalCalculator()

    def get_monthly_stats(self, employee_id: str, year: int, month: int) -> MonthlyStats:
        if not 1 <= int(month) <= 12:
            raise ValidationError("Month must be between 1 and 12")

        records = list(self._records.get_records_in_month(employee_id, year, month))
        working_days = weekdays_in_month(year, month)
        days_clocked_in = len({r.timestamp.date() for r in records})
        rate = (days_clocked_in / working_days) * 100 if working_days > 0 else 0.0

        # Open sessions earn no credit here; today's live figure comes from the attendance service.
        worked = self._calculator.worked(records)

        return MonthlyStats(
            year=year,
            month=month,
            total_working_days=working_days,
            days_clocked_in=days_clocked_in,
            attendance_rate=round(rate, 2),
            total_hours=round(worked.total_seconds() / 3600, 2),
            records=records,
        )

    def get_available_months(self, employee_id: str) -> list[AvailableMonth]:
        return [
            AvailableMonth(year=y, month=m, month_name=calendar.month_name[m])
            for y, m in self._records.get_months_with_records(employee_id)
        ]

    def get_all_monthly_stats(self, employee_id: str) -> list[MonthlyStats]:
        return [self.get_monthly_stats(employee_id, m.year, m.month) for m in self.get_available_months(employee_id)]
