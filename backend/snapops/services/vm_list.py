import logging
from typing import List

from snapops.core.exceptions import VMListMissing

logger = logging.getLogger(__name__)


def parse_vm_list(text: str) -> List[str]:
    """One VM name per line. Surrounding whitespace is trimmed, blank lines ignored, duplicates kept."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def read_vm_list(path: str) -> List[str]:
    if not path:
        raise VMListMissing("No VM list file given")
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            vm_names = parse_vm_list(f.read())
    except OSError as e:
        logger.error(f"Cannot read VM list {path}: {e}")
        raise VMListMissing(f"Cannot read VM list {path}: {e}") from e

    if not vm_names:
        raise VMListMissing(f"VM list {path} contains no VM names")

    logger.info(f"Loaded {len(vm_names)} VM names from {path}")
    return vm_names
