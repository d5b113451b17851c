from typing import List, Optional

from snapops.schemas.snapshot import ReportEntry, RunSummary, SnapshotStatus, NOT_APPLICABLE


class OutcomeAggregator:
    """Append-only collection of report entries for one run, in processing order."""

    def __init__(self, ticket_reference: str):
        self.ticket_reference = ticket_reference.strip()
        self.entries: List[ReportEntry] = []

    def record(self, vm_identifier: str, status: SnapshotStatus,
               account_context_id: str = NOT_APPLICABLE,
               disk_name: str = NOT_APPLICABLE,
               snapshot_name: str = NOT_APPLICABLE,
               error_message: Optional[str] = None) -> ReportEntry:
        entry = ReportEntry(
            account_context_id=account_context_id,
            vm_identifier=vm_identifier,
            disk_name=disk_name,
            snapshot_name=snapshot_name,
            status=status,
            error_message=error_message,
            ticket_reference=self.ticket_reference
        )
        self.entries.append(entry)
        return entry

    def record_not_found(self, vm_identifier: str) -> ReportEntry:
        return self.record(vm_identifier, SnapshotStatus.NOT_FOUND,
                           error_message="VM not found in any subscription")

    def summary(self) -> RunSummary:
        summary = RunSummary()
        for entry in self.entries:
            if entry.status is SnapshotStatus.SUCCESS:
                summary.success += 1
            elif entry.status is SnapshotStatus.FAILED:
                summary.failed += 1
            elif entry.status is SnapshotStatus.NOT_FOUND:
                summary.not_found += 1
            else:
                summary.skipped += 1
        return summary
