"""Groups tab: chat list with activation toggles."""

from __future__ import annotations

from typing import Any, Optional

from textual import on, work
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

from core.errors import TransportUnavailableError
from core.models import GroupSummary
from core.service import MarketplaceService


class GroupsTab(Container):
    """Lists group chats and toggles whether they are scanned."""

    def __init__(self, service: MarketplaceService, group_aliases: dict[str, str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service
        self._group_aliases = group_aliases
        self._groups: dict[str, GroupSummary] = {}
        self._current_row_key: Optional[str] = None

    def compose(self):
        with Vertical(id="groups-panel"):
            yield DataTable(id="groups-table", cursor_type="row")
            with Horizontal(classes="actions"):
                yield Button("Toggle active", id="toggle-group", variant="success")
                yield Button("Refresh", id="refresh-groups")
            yield Static("", id="groups-output", classes="output")

    def on_mount(self) -> None:
        table = self.query_one("#groups-table", DataTable)
        table.add_column("active", key="active", width=8)
        table.add_column("group", key="group", width=32)
        table.add_column("alias", key="alias", width=18)
        table.add_column("members", key="members", width=9)
        table.add_column("listings", key="listings", width=9)
        table.add_column("last activity", key="last_activity", width=18)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self.refresh_groups()

    @work(exclusive=True, group="groups")
    async def refresh_groups(self) -> None:
        try:
            groups = await self._service.list_groups()
        except TransportUnavailableError as exc:
            self._set_output(str(exc))
            return
        self._groups = {group.group_id: group for group in groups}
        table = self.query_one("#groups-table", DataTable)
        table.clear()
        for group in groups:
            last_activity = group.last_activity.astimezone().strftime("%Y-%m-%d %H:%M") if group.last_activity else ""
            table.add_row(
                "yes" if group.is_active else "no",
                group.name,
                self._group_aliases.get(group.group_id, ""),
                str(group.member_count),
                str(group.items_found),
                last_activity,
                key=group.group_id,
            )
        active = sum(1 for group in groups if group.is_active)
        self._set_output(f"{len(groups)} groups, {active} active")

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._current_row_key = event.row_key.value if event.row_key else None

    @on(Button.Pressed, "#toggle-group")
    def _on_toggle(self) -> None:
        group = self._groups.get(self._current_row_key or "")
        if group is None:
            self._set_output("Select a group first.")
            return
        self._service.activate_group(group.group_id, not group.is_active)
        self.refresh_groups()

    @on(Button.Pressed, "#refresh-groups")
    def _on_refresh(self) -> None:
        self.refresh_groups()

    def _set_output(self, message: str) -> None:
        self.query_one("#groups-output", Static).update(message)
