from .snapshot_service import SnapshotRunService, RunResult
from .report_service import ReportService

__all__ = [
    "SnapshotRunService",
    "RunResult",
    "ReportService"
]
