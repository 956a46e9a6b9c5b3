from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable, Optional, Union

from ..attendance.service import AttendanceService
from ..common.datetime_utils import now_local
from ..common.events import EventChannel
from ..core.enums import Platform, PowerMode
from ..geo.evaluator import LocationStatus, location_status
from ..geo.model import LocationSample
from ..settings.service import SettingsService
from .dwell import GeofenceEvent, TimerScheduler, ZoneTransitionMachine
from .location_source import LocationError, LocationSource, Subscription
from .power import resolve_location_config

_log = logging.getLogger(__name__)

MonitorError = Union[LocationError, Exception]


class GeofenceMonitor:
    """Owns the watch subscription and the transition machine.

    All methods must run on the event loop thread. Without an injected
    scheduler, dwell timers run on the running loop.
    """

    def __init__(
        self,
        source: LocationSource,
        settings: SettingsService,
        attendance: AttendanceService,
        *,
        platform: Platform,
        scheduler: Optional[TimerScheduler] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._source = source
        self._settings = settings
        self._attendance = attendance
        self._platform = platform
        self._scheduler = scheduler
        self._clock = clock

        self._subscription: Optional[Subscription] = None
        self._machine: Optional[ZoneTransitionMachine] = None
        self._last_sample: Optional[LocationSample] = None
        self._tasks: set[asyncio.Task] = set()

        self.samples: EventChannel[LocationSample] = EventChannel("location sample")
        self.errors: EventChannel[MonitorError] = EventChannel("monitor error")

    @property
    def is_running(self) -> bool:
        return self._subscription is not None

    @property
    def last_location(self) -> Optional[LocationSample]:
        return self._last_sample

    @property
    def machine(self) -> Optional[ZoneTransitionMachine]:
        return self._machine

    def start(self) -> None:
        if self._subscription is not None:
            return

        mode = self._settings.get_power_mode()
        zones = self._settings.get_zones()
        app_settings = self._settings.get_app_settings()
        config = resolve_location_config(mode, self._last_sample, zones)

        self._machine = ZoneTransitionMachine(
            dwell_seconds=app_settings.dwell_time_seconds,
            scheduler=self._scheduler or asyncio.get_running_loop(),
            clock=self._clock,
        )
        self._machine.events.subscribe(self._on_transition)
        self._machine.reset(zones)

        self._subscription = self._source.watch(config.watch_config(self._platform), self._on_sample, self._on_error)
        _log.info(
            "Geofence monitoring started: mode=%s zones=%d filter=%sm interval=%sms",
            mode.value,
            len(zones),
            config.distance_filter_meters,
            config.poll_interval_ms,
        )

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        if self._machine is not None:
            self._machine.stop()
            self._machine.events.clear()
            self._machine = None
        _log.info("Geofence monitoring stopped")

    def set_power_mode(self, mode: PowerMode | str) -> PowerMode:
        """Persist the mode; a running watch restarts and zone states reset."""
        value = self._settings.set_power_mode(mode)
        if self.is_running:
            self.stop()
            self.start()
        return value

    def location_status(self) -> LocationStatus:
        return location_status(self._last_sample, self._settings.get_zones())

    async def drain(self) -> None:
        """Wait for in-flight transition handlers."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_sample(self, sample: LocationSample) -> None:
        self._last_sample = sample
        self.samples.emit(sample)

        if self._machine is None:
            return
        self._machine.sync_zones(self._settings.get_zones())
        self._machine.process(sample)

    def _on_error(self, error: LocationError) -> None:
        _log.warning("Location watch error: %s", error.message)
        self.errors.emit(error)

    def _on_transition(self, event: GeofenceEvent) -> None:
        task = asyncio.get_running_loop().create_task(self._attendance.handle_zone_transition(event))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _log.error("Geofence transition handling failed: %s", exc, exc_info=exc)
            self.errors.emit(exc)
