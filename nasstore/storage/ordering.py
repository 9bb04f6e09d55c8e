"""
Ordering of /dev/disk/by-id names.

A disk usually owns several by-id links (ata-*, wwn-*, scsi-*, nvme-*, ...).
Mount units and UI labels reference the first one after sorting, so the
order has to be stable across reboots and enclosure reordering.
"""
import os
import re
from typing import Iterable, List, Tuple

# Prefix -> rank, anything else ranks last
BY_ID_PREFIX_RANKS = (
    ('ata-', 0),
    ('wwn-', 1),
    ('scsi-', 2),
)
UNRANKED = len(BY_ID_PREFIX_RANKS)

_DIGITS = re.compile(r'(\d+)')


def natural_key(value: str) -> Tuple:
    """
    Key for natural order comparison ("ata-2" < "ata-10").

    Text chunks sit at even positions and numeric chunks at odd positions,
    so two keys always compare chunk types pairwise. The raw string is the
    final tie-breaker ("ata-02" vs "ata-2") to keep the order total.
    """
    chunks = _DIGITS.split(value)
    parts = tuple(int(chunk) if i % 2 else chunk for i, chunk in enumerate(chunks))
    return parts, value


def by_id_rank(name: str) -> int:
    """Prefix class of a by-id name: ata- 0, wwn- 1, scsi- 2, other 3."""
    basename = os.path.basename(name)
    for prefix, rank in BY_ID_PREFIX_RANKS:
        if basename.startswith(prefix):
            return rank
    return UNRANKED


def by_id_priority(name: str) -> Tuple:
    """
    Sort key for a by-id name or path.

    Args:
        name: by-id basename or full /dev/disk/by-id/... path

    Returns:
        tuple: (rank, natural key of the basename)
    """
    basename = os.path.basename(name)
    return by_id_rank(basename), natural_key(basename)


def sort_by_id_names(names: Iterable[str]) -> List[str]:
    """Return names sorted by by-id priority, best first."""
    return sorted(names, key=by_id_priority)
