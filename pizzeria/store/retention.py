"""
Bounded-history retention for stored recommendations.

Only the ``max_rows`` most recent rows are kept, except that the first
``fixed_rows`` identifiers (the seed rows) are never evicted, even when that
leaves more than ``max_rows`` rows in the table.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetentionPolicy:
    max_rows: int = 500
    fixed_rows: int = 100

    @property
    def enabled(self) -> bool:
        """A non-positive maximum disables trimming altogether."""
        return self.max_rows > 0


def find_evictable_ids(
    ids_newest_first: Sequence[int],
    policy: RetentionPolicy,
) -> list[int]:
    """Return the ids to delete so that ``policy`` holds.

    Parameters
    ----------
    ids_newest_first : Sequence[int]
        Every stored id, ordered from most to least recent.
    policy : RetentionPolicy
        Retention rules to apply.

    Returns
    -------
    list[int]
        Ids that are outside the newest ``max_rows`` and above ``fixed_rows``.
    """
    if not policy.enabled:
        return []

    newest = set(ids_newest_first[: policy.max_rows])
    evictable = [
        row_id
        for row_id in ids_newest_first
        if row_id not in newest and row_id > policy.fixed_rows
    ]
    if evictable:
        logger.debug(
            "[retention] Evicting %d rows (max=%d, fixed=%d)",
            len(evictable), policy.max_rows, policy.fixed_rows,
        )
    return evictable
