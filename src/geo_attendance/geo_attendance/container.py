from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.factory import ClockPolicyFactory
from .attendance.service import AttendanceService
from .common.datetime_utils import now_local
from .core.constants import (
    DEFAULT_APP_VERSION,
    DEFAULT_DEBOUNCE_MINUTES,
    DEFAULT_DWELL_TIME_SECONDS,
    DEFAULT_LOCATION_MAX_AGE_SECONDS,
    DEFAULT_LOCATION_TIMEOUT_SECONDS,
    DEFAULT_MAX_ACCURACY_METERS,
    DEFAULT_POWER_MODE,
)
from .core.enums import Platform, PowerMode
from .database.connection import DBConfig, DatabaseConnection
from .records.model import DeviceInfo
from .records.mysql_record_repository import MySQLRecordRepository
from .records.repository import RecordRepository
from .runtime import EngineRuntime
from .settings.model import AppSettings
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .stats.calculator.paired_calculator import PairedIntervalCalculator
from .stats.service import MonthlyStatsService
from .tracking.dwell import TimerScheduler
from .tracking.location_source import PushLocationSource
from .tracking.monitor import GeofenceMonitor


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    records_repo: RecordRepository
    settings_repo: SettingsRepository

    runtime: EngineRuntime
    location_source: PushLocationSource
    device: DeviceInfo

    settings_service: SettingsService
    attendance_service: AttendanceService
    stats_service: MonthlyStatsService
    monitor: GeofenceMonitor

    clock: Callable[[], datetime] = now_local
    auto_start_tracking: bool = False


def _setting(settings: Any, name: str, default: Any) -> Any:
    return getattr(settings, name, default) if settings is not None else default


def assemble_container(
    *,
    records_repo: RecordRepository,
    settings_repo: SettingsRepository,
    settings: Any = None,
    conn: Optional[DatabaseConnection] = None,
    runtime: Optional[EngineRuntime] = None,
    scheduler: Optional[TimerScheduler] = None,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services over any repositories (MySQL in production, in-memory fakes in tests)."""
    defaults = AppSettings(
        debounce_minutes=float(_setting(settings, "DEBOUNCE_MINUTES", DEFAULT_DEBOUNCE_MINUTES)),
        dwell_time_seconds=float(_setting(settings, "DWELL_TIME_SECONDS", DEFAULT_DWELL_TIME_SECONDS)),
        max_accuracy_meters=float(_setting(settings, "MAX_ACCURACY_METERS", DEFAULT_MAX_ACCURACY_METERS)),
        power_mode=PowerMode(_setting(settings, "DEFAULT_POWER_MODE", DEFAULT_POWER_MODE)),
    )
    device = DeviceInfo(
        platform=Platform(str(_setting(settings, "DEVICE_PLATFORM", Platform.ANDROID.value)).lower()),
        app_version=str(_setting(settings, "APP_VERSION", DEFAULT_APP_VERSION)),
    )

    location_source = PushLocationSource(
        timeout_seconds=float(_setting(settings, "LOCATION_TIMEOUT_SECONDS", DEFAULT_LOCATION_TIMEOUT_SECONDS)),
        maximum_age_seconds=float(_setting(settings, "LOCATION_MAX_AGE_SECONDS", DEFAULT_LOCATION_MAX_AGE_SECONDS)),
        clock=clock,
    )

    settings_service = SettingsService(settings_repo, defaults=defaults)
    calculator = PairedIntervalCalculator()
    attendance_service = AttendanceService(
        records_repo,
        settings_service,
        location_source,
        device=device,
        policy_factory=ClockPolicyFactory(),
        calculator=calculator,
        clock=clock,
    )
    stats_service = MonthlyStatsService(records_repo, calculator=calculator)
    monitor = GeofenceMonitor(
        location_source,
        settings_service,
        attendance_service,
        platform=device.platform,
        scheduler=scheduler,
        clock=clock,
    )

    return Container(
        conn=conn,
        records_repo=records_repo,
        settings_repo=settings_repo,
        runtime=runtime or EngineRuntime(),
        location_source=location_source,
        device=device,
        settings_service=settings_service,
        attendance_service=attendance_service,
        stats_service=stats_service,
        monitor=monitor,
        clock=clock,
        auto_start_tracking=bool(_setting(settings, "AUTO_START_TRACKING", False)),
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return assemble_container(
        records_repo=MySQLRecordRepository(conn),
        settings_repo=MySQLSettingsRepository(conn),
        settings=settings,
        conn=conn,
    )
