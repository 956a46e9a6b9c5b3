from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ...records.model import EmployeeRecord


class WorkDurationCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked time)."""

    @abstractmethod
    def intervals(
        self, records: Sequence[EmployeeRecord], *, open_until: Optional[datetime] = None
    ) -> list[tuple[datetime, datetime]]:
        raise NotImplementedError

    def worked(self, records: Sequence[EmployeeRecord], *, open_until: Optional[datetime] = None) -> timedelta:
        total = timedelta()
        for start, end in self.intervals(records, open_until=open_until):
            total += end - start
        return total
