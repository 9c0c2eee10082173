"""Network-corrected clock."""

from tvgate.clock.time_sync import (
    DEFAULT_NTP_SERVERS,
    OffsetCell,
    SyncResult,
    TimeSyncEngine,
    candidate_servers,
    query_ntp_millis,
)

__all__ = [
    "DEFAULT_NTP_SERVERS",
    "OffsetCell",
    "SyncResult",
    "TimeSyncEngine",
    "candidate_servers",
    "query_ntp_millis",
]
