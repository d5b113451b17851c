import logging
from dataclasses import dataclass
from typing import List, Optional

from snapops.core.config import settings, Settings
from snapops.schemas.snapshot import (
    AccountContext, DiskDescriptor, ReportEntry, RunSummary, ResolvedVM, SnapshotRequest,
    SnapshotStatus, NamingPolicy, LocatorPolicy
)
from snapops.services.context_enumerator import enumerate_contexts
from snapops.services.vm_locator import VMLocator, VMFound
from snapops.services.disk_collector import resolve_vm
from snapops.services.name_composer import compose, exceeds_limit
from snapops.services.snapshot_executor import SnapshotExecutor, SnapshotCreated, SnapshotFailed
from snapops.services.outcome_aggregator import OutcomeAggregator

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    entries: List[ReportEntry]
    summary: RunSummary


class SnapshotRunService:
    """Runs discovery, naming, snapshot creation and reporting for a list of VMs.

    Strictly sequential: one VM at a time, one subscription at a time, one
    disk at a time. Only authentication and subscription enumeration can
    abort a run; every other failure becomes a report entry.
    """

    def __init__(self, azure_client, config: Optional[Settings] = None,
                 naming_policy: Optional[NamingPolicy] = None,
                 locator_policy: Optional[LocatorPolicy] = None,
                 max_length: Optional[int] = None,
                 incremental: Optional[bool] = None,
                 target_resource_group: Optional[str] = None):
        config = config or settings
        self.azure_client = azure_client
        self.naming_policy = NamingPolicy(naming_policy or config.SNAPSHOT_NAMING_POLICY)
        self.locator_policy = LocatorPolicy(locator_policy or config.VM_LOCATOR_POLICY)
        self.max_length = config.SNAPSHOT_NAME_MAX_LENGTH if max_length is None else max_length
        if self.max_length < 1:
            raise ValueError(f"Snapshot name maximum length must be at least 1, got {self.max_length}")
        self.incremental = config.SNAPSHOT_INCREMENTAL if incremental is None else incremental
        self.target_resource_group = target_resource_group or config.SNAPSHOT_TARGET_RESOURCE_GROUP
        self.executor = SnapshotExecutor(azure_client, incremental=self.incremental)

    def prepare(self) -> List[AccountContext]:
        """Authenticate and enumerate subscriptions. Raises RunAborted subclasses."""
        self.azure_client.authenticate()
        return enumerate_contexts(self.azure_client)

    def run(self, vm_names: List[str], ticket_reference: str,
            contexts: Optional[List[AccountContext]] = None) -> RunResult:
        vm_names = [name.strip() for name in vm_names if name and name.strip()]
        if contexts is None:
            contexts = self.prepare()

        aggregator = OutcomeAggregator(ticket_reference)
        locator = VMLocator(self.azure_client, contexts, policy=self.locator_policy)

        logger.info(f"Starting snapshot run for {len(vm_names)} VMs across {len(contexts)} subscriptions "
                    f"(ticket={aggregator.ticket_reference}, naming={self.naming_policy.value}, "
                    f"locator={self.locator_policy.value})")

        for vm_name in vm_names:
            self._process_vm(vm_name, locator, aggregator)

        summary = aggregator.summary()
        logger.info(f"Snapshot run finished: {summary.as_rows()}")
        return RunResult(entries=aggregator.entries, summary=summary)

    def _process_vm(self, vm_name: str, locator: VMLocator, aggregator: OutcomeAggregator):
        found = False
        for outcome in locator.search(vm_name):
            if isinstance(outcome, VMFound):
                found = True
                resolved = resolve_vm(vm_name, outcome.context, outcome.vm)
                self._process_resolved_vm(resolved, aggregator)

        if not found:
            logger.warning(f"VM '{vm_name}' not found in any subscription")
            aggregator.record_not_found(vm_name)

    def _process_resolved_vm(self, resolved: ResolvedVM, aggregator: OutcomeAggregator):
        if not resolved.resource_group:
            aggregator.record(resolved.identifier, SnapshotStatus.SKIPPED,
                              account_context_id=resolved.context.id,
                              error_message="VM resource group could not be determined")
            return

        if not resolved.disks:
            logger.warning(f"VM '{resolved.identifier}' has no named disks in subscription {resolved.context.id}")
            aggregator.record(resolved.identifier, SnapshotStatus.SKIPPED,
                              account_context_id=resolved.context.id,
                              error_message="VM has no disks to snapshot")
            return

        for disk in resolved.disks:
            request = self._build_request(resolved, disk, aggregator.ticket_reference)
            tags = {
                "TicketReference": aggregator.ticket_reference,
                "SourceVM": resolved.identifier,
                "SourceDisk": disk.name,
            }
            outcome = self.executor.execute(request, disk.name, resolved.resource_group, tags=tags)

            if isinstance(outcome, SnapshotCreated):
                logger.info(f"Created snapshot '{request.composed_name}' for {disk.role.value} disk '{disk.name}'")
                aggregator.record(resolved.identifier, SnapshotStatus.SUCCESS,
                                  account_context_id=resolved.context.id,
                                  disk_name=disk.name,
                                  snapshot_name=request.composed_name)
            elif isinstance(outcome, SnapshotFailed):
                aggregator.record(resolved.identifier, SnapshotStatus.FAILED,
                                  account_context_id=resolved.context.id,
                                  disk_name=disk.name,
                                  snapshot_name=request.composed_name,
                                  error_message=outcome.reason)

    def _build_request(self, resolved: ResolvedVM, disk: DiskDescriptor, ticket_reference: str) -> SnapshotRequest:
        composed_name = compose(resolved.identifier, disk.name, ticket_reference,
                                max_length=self.max_length, policy=self.naming_policy)
        if exceeds_limit(composed_name, self.max_length):
            logger.warning(f"Snapshot name '{composed_name}' is {len(composed_name)} characters, "
                           f"over the configured maximum of {self.max_length}")
        return SnapshotRequest(
            composed_name=composed_name,
            source_disk_reference=disk.source_disk_reference,
            location=resolved.location,
            target_resource_group=self.target_resource_group or resolved.resource_group
        )
