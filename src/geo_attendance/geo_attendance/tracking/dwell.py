"""Per-zone transition machine.

Turns raw containment into debounced entry/exit events:

    OUTSIDE --contained--> PENDING_ENTRY --dwell elapsed, still contained--> INSIDE
    PENDING_ENTRY --not contained--> OUTSIDE          (timer cancelled)
    INSIDE --not contained--> OUTSIDE                 (exit emitted at once)

Entries wait for a dwell period because GPS spikes across a boundary are
common; exits are immediate because a stale "clocked in" is the worse error.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Protocol, Sequence

from ..common.datetime_utils import now_local
from ..common.events import EventChannel
from ..core.enums import TransitionType, ZoneState
from ..geo.evaluator import enabled_zones, is_inside_zone
from ..geo.model import LocationSample, OfficeZone

_log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerScheduler(Protocol):
    """Anything with ``call_later``; an asyncio event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[..., object], *args: object) -> TimerHandle:
        ...


@dataclass(frozen=True)
class GeofenceEvent:
    type: TransitionType
    zone: OfficeZone
    timestamp: datetime
    position: LocationSample


@dataclass
class ZoneTrack:
    """Geofence state of one zone; owns that zone's dwell timer."""

    zone: OfficeZone
    state: ZoneState = ZoneState.OUTSIDE
    pending_entry_since: Optional[datetime] = None
    timer: Optional[TimerHandle] = field(default=None, repr=False)

    @property
    def is_inside(self) -> bool:
        return self.state == ZoneState.INSIDE

    def dispose_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class ZoneTransitionMachine:
    def __init__(
        self,
        *,
        dwell_seconds: float,
        scheduler: TimerScheduler,
        clock: Callable[[], datetime] = now_local,
    ):
        self._dwell_seconds = float(dwell_seconds)
        self._scheduler = scheduler
        self._clock = clock
        self._tracks: dict[str, ZoneTrack] = {}
        self._latest: Optional[LocationSample] = None
        self.events: EventChannel[GeofenceEvent] = EventChannel("geofence event")

    @property
    def dwell_seconds(self) -> float:
        return self._dwell_seconds

    def state_of(self, zone_id: str) -> Optional[ZoneState]:
        track = self._tracks.get(zone_id)
        return track.state if track else None

    def tracks(self) -> list[ZoneTrack]:
        return list(self._tracks.values())

    def reset(self, zones: Sequence[OfficeZone]) -> None:
        """Drop all state and start every enabled zone OUTSIDE."""
        self.stop()
        for zone in enabled_zones(zones):
            self._tracks[zone.id] = ZoneTrack(zone=zone)

    def sync_zones(self, zones: Sequence[OfficeZone]) -> None:
        """Follow zone edits without disturbing zones that did not change."""
        wanted = {z.id: z for z in enabled_zones(zones)}

        for zone_id in list(self._tracks):
            track = self._tracks[zone_id]
            if wanted.get(zone_id) != track.zone:
                track.dispose_timer()
                del self._tracks[zone_id]

        for zone_id, zone in wanted.items():
            if zone_id not in self._tracks:
                self._tracks[zone_id] = ZoneTrack(zone=zone)

    def stop(self) -> None:
        for track in self._tracks.values():
            track.dispose_timer()
        self._tracks.clear()
        self._latest = None

    def process(self, sample: LocationSample) -> None:
        self._latest = sample

        for track in list(self._tracks.values()):
            contained = is_inside_zone(sample, track.zone)

            if track.state == ZoneState.OUTSIDE:
                if contained:
                    self._start_pending(track, sample)
            elif track.state == ZoneState.PENDING_ENTRY:
                if contained:
                    self._start_pending(track, sample)
                else:
                    _log.debug("Pending entry abandoned: zone=%s", track.zone.id)
                    track.dispose_timer()
                    track.state = ZoneState.OUTSIDE
                    track.pending_entry_since = None
            elif not contained:
                track.dispose_timer()
                track.state = ZoneState.OUTSIDE
                track.pending_entry_since = None
                self._emit(TransitionType.EXIT, track, sample)

    def _start_pending(self, track: ZoneTrack, sample: LocationSample) -> None:
        track.dispose_timer()
        track.state = ZoneState.PENDING_ENTRY
        track.pending_entry_since = sample.captured_at
        track.timer = self._scheduler.call_later(self._dwell_seconds, self._on_dwell_elapsed, track)
        _log.debug("Dwell timer started: zone=%s dwell=%ss", track.zone.id, self._dwell_seconds)

    def _on_dwell_elapsed(self, track: ZoneTrack) -> None:
        if self._tracks.get(track.zone.id) is not track or track.state != ZoneState.PENDING_ENTRY:
            return
        track.timer = None
        track.pending_entry_since = None

        latest = self._latest
        if latest is not None and is_inside_zone(latest, track.zone):
            track.state = ZoneState.INSIDE
            self._emit(TransitionType.ENTRY, track, latest)
        else:
            track.state = ZoneState.OUTSIDE

    def _emit(self, kind: TransitionType, track: ZoneTrack, position: LocationSample) -> None:
        event = GeofenceEvent(type=kind, zone=track.zone, timestamp=self._clock(), position=position)
        _log.info("Geofence %s: zone=%s (%s)", kind.value, track.zone.id, track.zone.name)
        self.events.emit(event)
