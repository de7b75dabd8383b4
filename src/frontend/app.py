"""Textual dashboard running in the watcher's event loop."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Center, Container, Horizontal, Vertical
from textual.widgets import ContentSwitcher, Footer, Static, Tab, Tabs

from core.service import MarketplaceService

from .constants import LOCAL_REFRESH_SECONDS, TELEGRAM_BLUE
from .tabs.groups import GroupsTab
from .tabs.listings import ActiveListingsTab, SoldListingsTab, WindowTab


class DashboardApp(App):
    """Groups, live listings, sold listings and the scan window."""

    BINDINGS = [
        ("r", "refresh", "Refresh"),
        ("f", "force_resync", "Force resync"),
        ("q", "quit", "Quit"),
    ]

    CSS = """
    Screen {
        background: #0f1a21;
        color: #e8eef5;
    }

    #header {
        height: 4;
        padding: 0 4;
        border-bottom: solid #2a3a46;
    }

    #header-right {
        content-align: right top;
        text-align: right;
    }

    .subtle {
        color: #c6d2dd;
    }

    #tabs-bar {
        height: 4;
        padding: 0 4;
        align: center middle;
    }

    .actions {
        height: 3;
    }

    .output {
        height: 1;
        color: #c6d2dd;
    }
    """

    def __init__(self, service: MarketplaceService, group_aliases: dict[str, str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service
        self._group_aliases = group_aliases

    def compose(self) -> ComposeResult:
        with Container(id="header"):
            with Horizontal():
                with Vertical():
                    yield Static(self._title_text(), id="title")
                    yield Static("listings from your Telegram groups", classes="subtle")
                with Vertical(id="header-right"):
                    yield Static("", id="header-status", classes="subtle")

        with Container(id="tabs-bar"):
            with Center():
                yield Tabs(
                    Tab("Groups", id="groups"),
                    Tab("Listings", id="listings"),
                    Tab("Sold", id="sold"),
                    Tab("14 days", id="window"),
                    id="tabs",
                )

        with ContentSwitcher(id="content", initial="groups"):
            yield GroupsTab(self._service, self._group_aliases, id="groups")
            yield ActiveListingsTab(self._service, self._group_aliases, id="listings")
            yield SoldListingsTab(self._service, self._group_aliases, id="sold")
            yield WindowTab(self._service, self._group_aliases, id="window")
        yield Footer()

    def on_mount(self) -> None:
        self._refresh_status()
        self.set_interval(LOCAL_REFRESH_SECONDS, self._refresh_local)

    def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if event.tab.id:
            self.query_one("#content", ContentSwitcher).current = event.tab.id

    def action_refresh(self) -> None:
        current = self.query_one("#content", ContentSwitcher).current
        if current == "groups":
            self.query_one(GroupsTab).refresh_groups()
        elif current == "window":
            self.query_one(WindowTab).reload()
        else:
            self._refresh_local()

    def action_force_resync(self) -> None:
        self.query_one(WindowTab).force_resync()

    def _refresh_local(self) -> None:
        # Store-backed views are cheap; the window tab only reloads on demand.
        self.query_one(ActiveListingsTab).reload()
        self.query_one(SoldListingsTab).reload()
        self._refresh_status()

    def _refresh_status(self) -> None:
        status = self._service.connection_status()
        parts = ["session: connected" if status.is_connected else "session: offline"]
        if status.last_sync:
            parts.append(f"last sync: {status.last_sync.astimezone().strftime('%H:%M:%S')}")
        self.query_one("#header-status", Static).update("\n".join(parts))

    @staticmethod
    def _title_text() -> Text:
        return Text.assemble(
            ("FPV", TELEGRAM_BLUE),
            ("SCOPE > Dashboard", "bold"),
        )
