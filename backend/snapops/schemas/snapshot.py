from pydantic import BaseModel, Field, ConfigDict
from typing import List, Dict, Optional
from datetime import datetime, timezone
from enum import Enum

NOT_APPLICABLE = "N/A"


class DiskRole(str, Enum):
    OS = "OS"
    DATA = "Data"


class SnapshotStatus(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    NOT_FOUND = "NotFound"
    SKIPPED = "Skipped"


class NamingPolicy(str, Enum):
    BASE_ONLY = "base_only"
    VM_DISK_COMBINED = "vm_disk_combined"


class LocatorPolicy(str, Enum):
    FIRST_MATCH = "first_match"
    EXHAUSTIVE = "exhaustive"


# Domain models
class AccountContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Azure subscription ID")
    display_name: Optional[str] = Field(None, description="Subscription display name")


class DiskDescriptor(BaseModel):
    name: str
    source_disk_reference: Optional[str] = Field(None, description="Managed disk resource ID")
    role: DiskRole


class ResolvedVM(BaseModel):
    identifier: str
    context: AccountContext
    resource_group: Optional[str] = None
    location: Optional[str] = None
    disks: List[DiskDescriptor] = Field(default_factory=list)


class SnapshotRequest(BaseModel):
    composed_name: str
    source_disk_reference: Optional[str] = None
    location: Optional[str] = None
    target_resource_group: str


class ReportEntry(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    account_context_id: str = NOT_APPLICABLE
    vm_identifier: str
    disk_name: str = NOT_APPLICABLE
    snapshot_name: str = NOT_APPLICABLE
    status: SnapshotStatus
    error_message: Optional[str] = None
    ticket_reference: str


class RunSummary(BaseModel):
    success: int = 0
    failed: int = 0
    not_found: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.success + self.failed + self.not_found + self.skipped

    def as_rows(self) -> Dict[str, int]:
        """Rows for the printed summary. Skipped only appears when it happened."""
        rows = {
            SnapshotStatus.SUCCESS.value: self.success,
            SnapshotStatus.FAILED.value: self.failed,
            SnapshotStatus.NOT_FOUND.value: self.not_found,
        }
        if self.skipped:
            rows[SnapshotStatus.SKIPPED.value] = self.skipped
        return rows


# API schemas
class SnapshotRunRequest(BaseModel):
    vm_names: List[str] = Field(..., min_length=1, description="VM names to snapshot")
    ticket_reference: str = Field(..., min_length=1, description="Change or incident reference")
    naming_policy: Optional[NamingPolicy] = None
    locator_policy: Optional[LocatorPolicy] = None
    max_length: Optional[int] = Field(None, ge=1)
    incremental: Optional[bool] = None
    save_report: bool = False
    upload_report: bool = False


class SnapshotRunResponse(BaseModel):
    entries: List[ReportEntry]
    summary: RunSummary
    report_path: Optional[str] = None
    report_url: Optional[str] = None


class Subscription(BaseModel):
    id: str
    display_name: Optional[str] = None


class SubscriptionList(BaseModel):
    subscriptions: List[Subscription]
