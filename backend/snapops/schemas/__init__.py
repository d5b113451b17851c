from .snapshot import (
    AccountContext, DiskDescriptor, ResolvedVM, SnapshotRequest,
    ReportEntry, RunSummary,
    SnapshotRunRequest, SnapshotRunResponse, Subscription, SubscriptionList,
    DiskRole, SnapshotStatus, NamingPolicy, LocatorPolicy, NOT_APPLICABLE
)

__all__ = [
    # Domain models
    "AccountContext",
    "DiskDescriptor",
    "ResolvedVM",
    "SnapshotRequest",
    "ReportEntry",
    "RunSummary",

    # API schemas
    "SnapshotRunRequest",
    "SnapshotRunResponse",
    "Subscription",
    "SubscriptionList",

    # Enums
    "DiskRole",
    "SnapshotStatus",
    "NamingPolicy",
    "LocatorPolicy",
    "NOT_APPLICABLE"
]
