"""Location source boundary.

The OS location API is an external collaborator. ``LocationSource`` is the
interface the engine consumes; ``PushLocationSource`` implements it on top
of fixes and errors pushed in by the device (HTTP) or a test harness.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_LOCATION_MAX_AGE_SECONDS, DEFAULT_LOCATION_TIMEOUT_SECONDS
from ..core.enums import LocationErrorKind
from ..geo.distance import distance_meters
from ..geo.model import LocationSample

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchConfig:
    distance_filter_meters: float
    poll_interval_ms: int
    fastest_interval_ms: int
    desired_accuracy: str


@dataclass(frozen=True)
class LocationError:
    kind: LocationErrorKind
    message: str


_ERROR_MESSAGES = {
    1: (LocationErrorKind.PERMISSION_DENIED, "Location permission denied"),
    2: (LocationErrorKind.UNAVAILABLE, "Location unavailable. Please check your GPS"),
    3: (LocationErrorKind.TIMEOUT, "Location request timed out"),
}


def classify_location_error(code: Optional[int], message: Optional[str] = None) -> LocationError:
    """Map a platform error code onto a user-displayable category."""
    if code in _ERROR_MESSAGES:
        kind, text = _ERROR_MESSAGES[code]
        return LocationError(kind=kind, message=text)
    return LocationError(kind=LocationErrorKind.UNKNOWN, message=message or "Unknown location error")


SampleCallback = Callable[[LocationSample], None]
ErrorCallback = Callable[[LocationError], None]


class Subscription(Protocol):
    def cancel(self) -> None:
        ...


class LocationSource(Protocol):
    async def get_current_location(self) -> Optional[LocationSample]:
        """Single fix; ``None`` when no fix could be obtained in time."""
        raise NotImplementedError

    def watch(self, config: WatchConfig, on_sample: SampleCallback, on_error: ErrorCallback) -> Subscription:
        raise NotImplementedError


class _Watch:
    def __init__(self, owner: "PushLocationSource", config: WatchConfig, on_sample: SampleCallback, on_error: ErrorCallback):
        self._owner = owner
        self.config = config
        self.on_sample = on_sample
        self.on_error = on_error
        self.last_delivered: Optional[LocationSample] = None
        self.active = True

    def accepts(self, sample: LocationSample) -> bool:
        last = self.last_delivered
        if last is None:
            return True
        elapsed_ms = (sample.captured_at - last.captured_at).total_seconds() * 1000
        if elapsed_ms < self.config.fastest_interval_ms:
            return False
        moved = distance_meters(last.latitude, last.longitude, sample.latitude, sample.longitude)
        if moved < self.config.distance_filter_meters:
            return False
        return True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._owner._remove(self)


class PushLocationSource:
    """Location source fed by ``push``/``report_error``.

    Must be driven from the event loop thread (use the runtime to hop threads).
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_LOCATION_TIMEOUT_SECONDS,
        maximum_age_seconds: float = DEFAULT_LOCATION_MAX_AGE_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._timeout = float(timeout_seconds)
        self._max_age = float(maximum_age_seconds)
        self._clock = clock
        self._latest: Optional[LocationSample] = None
        self._watches: list[_Watch] = []
        self._waiters: list[asyncio.Future] = []

    @property
    def latest(self) -> Optional[LocationSample]:
        return self._latest

    @property
    def watch_count(self) -> int:
        return len(self._watches)

    async def get_current_location(self) -> Optional[LocationSample]:
        latest = self._latest
        if latest is not None and (self._clock() - latest.captured_at).total_seconds() <= self._max_age:
            return latest

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        try:
            return await asyncio.wait_for(waiter, timeout=self._timeout)
        except asyncio.TimeoutError:
            _log.warning("No location fix within %.1fs", self._timeout)
            return None
        finally:
            if waiter in self._waiters:
                self._waiters.remove(waiter)

    def watch(self, config: WatchConfig, on_sample: SampleCallback, on_error: ErrorCallback) -> Subscription:
        w = _Watch(self, config, on_sample, on_error)
        self._watches.append(w)
        _log.debug(
            "Watch started: filter=%sm interval=%sms fastest=%sms accuracy=%s",
            config.distance_filter_meters,
            config.poll_interval_ms,
            config.fastest_interval_ms,
            config.desired_accuracy,
        )
        return w

    def push(self, sample: LocationSample) -> None:
        self._latest = sample

        for waiter in list(self._waiters):
            if not waiter.done():
                waiter.set_result(sample)

        for w in list(self._watches):
            if not w.active or not w.accepts(sample):
                continue
            w.last_delivered = sample
            try:
                w.on_sample(sample)
            except Exception:
                _log.exception("Error in location watch callback")

    def report_error(self, code: Optional[int], message: Optional[str] = None) -> LocationError:
        error = classify_location_error(code, message)
        _log.warning("Location error: %s (%s)", error.message, error.kind.value)

        for waiter in list(self._waiters):
            if not waiter.done():
                waiter.set_result(None)

        for w in list(self._watches):
            try:
                w.on_error(error)
            except Exception:
                _log.exception("Error in location error callback")
        return error

    def _remove(self, w: _Watch) -> None:
        if w in self._watches:
            self._watches.remove(w)
