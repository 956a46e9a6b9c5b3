"""Geo Attendance package.

Feature modules (geo, tracking, attendance, records, stats, settings) with a
thin Flask controller layer over service/repository layers. The geofence
engine itself runs on an asyncio loop owned by ``runtime.EngineRuntime``.
"""

__version__ = "1.0.0"
