"""
Snapshot name composition.

Names are a pure function of their inputs: no randomness, no counters and
no lookup of names already taken. Two policies exist and a run uses one:

* ``vm_disk_combined``: ``{vm}_{disk}`` truncated to leave room for
  ``_{ticket}``. The final name is not clamped again, so a ticket at least
  as long as the limit yields a name over the limit.
* ``base_only``: ``{disk}`` truncated the same way, and the full name is
  clamped to the limit as a last step.
"""
from snapops.schemas.snapshot import NamingPolicy

DEFAULT_MAX_LENGTH = 82


def compose(vm_identifier: str, disk_name: str, ticket_reference: str,
            max_length: int = DEFAULT_MAX_LENGTH,
            policy: NamingPolicy = NamingPolicy.VM_DISK_COMBINED) -> str:
    policy = NamingPolicy(policy)
    ticket = ticket_reference.strip()

    if policy is NamingPolicy.BASE_ONLY:
        base = disk_name.strip()
    else:
        base = f"{vm_identifier}_{disk_name}".strip()

    available = max(0, max_length - (len(ticket) + 1))
    composed = f"{base[:available]}_{ticket}"

    if policy is NamingPolicy.BASE_ONLY:
        composed = composed[:max_length]
    return composed


def exceeds_limit(composed_name: str, max_length: int) -> bool:
    return len(composed_name) > max_length
