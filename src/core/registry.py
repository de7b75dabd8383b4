"""Group activation registry (core domain)."""

from __future__ import annotations

import logging

LOGGER = logging.getLogger(__name__)


class GroupRegistry:
    """Tracks which groups are opted into scanning.

    Entries are created on the first explicit call for a group and live for
    the process lifetime; a group vanishing from the chat list keeps its entry.
    """

    def __init__(self) -> None:
        self._groups: dict[str, bool] = {}

    def set_active(self, group_id: str, active: bool) -> None:
        previous = self._groups.get(group_id)
        self._groups[group_id] = bool(active)
        if previous != bool(active):
            LOGGER.info(
                "Group %s %s (%s active)",
                group_id,
                "activated" if active else "deactivated",
                len(self.list_active()),
            )

    def is_active(self, group_id: str) -> bool:
        return self._groups.get(group_id, False)

    def list_active(self) -> frozenset[str]:
        return frozenset(group_id for group_id, active in self._groups.items() if active)
