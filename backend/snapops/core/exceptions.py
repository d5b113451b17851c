"""
Exception hierarchy for snapshot runs.

Fatal errors derive from RunAborted and stop the run before any report is
written; each carries the process exit code the CLI returns for it.
Everything else is recovered inside the step that raised it.
"""


class SnapOpsError(Exception):
    """Base class for all snapops errors."""
    pass


class RunAborted(SnapOpsError):
    """Fatal condition: the run stops and no report is produced."""
    exit_code = 1


class VMListMissing(RunAborted):
    """The VM list file is missing, unreadable or holds no VM names."""
    exit_code = 3


class AuthenticationFailed(RunAborted):
    """No usable Azure credential could be obtained."""
    exit_code = 4


class NoValidContexts(RunAborted):
    """The session can see no subscription with a well-formed id."""
    exit_code = 5


class ContextActivationError(SnapOpsError):
    """A subscription could not be switched into. Skipped for the current VM."""

    def __init__(self, subscription_id: str, message: str):
        self.subscription_id = subscription_id
        super().__init__(f"Cannot activate subscription {subscription_id}: {message}")


class ContextEnumerationFailed(RunAborted):
    """Azure refused or failed to list the subscriptions for this session."""
    exit_code = 6
