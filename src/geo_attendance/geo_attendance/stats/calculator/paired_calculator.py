from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...core.enums import ClockType
from ...records.model import EmployeeRecord
from .base import WorkDurationCalculator

_log = logging.getLogger(__name__)


class PairedIntervalCalculator(WorkDurationCalculator):
    """Standard rule: each OUT closes the most recent IN.

    A second IN before an OUT restarts the session. An OUT with no open IN
    contributes nothing. A trailing IN counts up to ``open_until`` when given.
    """

    def intervals(
        self, records: Sequence[EmployeeRecord], *, open_until: Optional[datetime] = None
    ) -> list[tuple[datetime, datetime]]:
        result: list[tuple[datetime, datetime]] = []
        start: Optional[datetime] = None

        for r in sorted(records, key=lambda rec: rec.timestamp):
            if r.clock_type == ClockType.IN:
                start = r.timestamp
            elif start is not None:
                if r.timestamp > start:
                    result.append((start, r.timestamp))
                start = None
            else:
                _log.debug("Orphan clock-out ignored: %s", r.id)

        if start is not None and open_until is not None and open_until > start:
            result.append((start, open_until))
        return result
