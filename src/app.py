"""Application entry point for the fpvscope watcher."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, Optional

from art import tprint
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from telethon import TelegramClient, events

import settings
from adapters.notification_formatting import format_group_label, format_time_posted
from adapters.telegram_bot_notifier import TelegramBotNotifier
from adapters.telegram_mapper import build_message
from adapters.telegram_notifier import TelegramSavedMessagesNotifier
from adapters.telegram_transport import TelegramTransport
from client import build_client
from core.listing_store import ListingStore
from core.models import GroupSummary, Listing
from core.ports import NotifierPort
from core.processor import ListingProcessor
from core.registry import GroupRegistry
from core.scanner import WindowedScanner
from core.service import MarketplaceService
from get_session import authorize

NAME = "FPVSCOPE"
FONT = "tarty-1"

LOGGER = logging.getLogger(__name__)


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str, datefmt: Optional[str] = None) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self._secrets = [secret for secret in secrets if secret]

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = config.get("redact", {}) if config else {}
    if not redact_cfg.get("enabled", False):
        return []
    values = [os.getenv(name) for name in redact_cfg.get("patterns", [])]
    # Longest first so a secret containing another is masked whole.
    return sorted({value for value in values if value}, key=len, reverse=True)


def _configure_logging(console: bool = True) -> None:
    """Configure handlers from the logging section of config.json.

    ``console`` is False under the dashboard, where stderr output would
    corrupt the terminal UI.
    """

    config = settings.LOGGING or {}
    if not config.get("enabled", False):
        return

    load_dotenv()
    level_name = str(config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = _RedactingFormatter(
        _collect_redaction_values(config),
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers: list[logging.Handler] = []

    if console and config.get("console", True):
        handlers.append(logging.StreamHandler())

    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        path = file_cfg.get("path", "logs/fpvscope.log")
        if not os.path.isabs(path):
            path = os.path.join(settings.PROJECT_ROOT, path)
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
                backupCount=int(file_cfg.get("backup_count", 5)),
                encoding="utf-8",
            )
        )

    if not handlers:
        return

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


def _build_notifier(client: TelegramClient) -> Optional[NotifierPort]:
    """Select the notification adapter configured in config.json."""

    method = settings.NOTIFICATION_METHOD
    if method == "off":
        return None
    if method == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise RuntimeError("BOT_API is required when notification_method=bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(
            bot_token=bot_token,
            chat_id=str(settings.BOT_CHAT_ID),
            group_aliases=settings.GROUP_ALIASES,
        )
    if method == "saved_messages":
        return TelegramSavedMessagesNotifier(client, settings.GROUP_ALIASES)
    raise RuntimeError("notification_method must be 'off', 'saved_messages' or 'bot'")


def build_service(client: TelegramClient) -> tuple[MarketplaceService, ListingStore]:
    """Wire the core components around a connected client."""

    transport = TelegramTransport(client, media_dir=settings.MEDIA_DIR)
    registry = GroupRegistry()
    for group_id in sorted(settings.ACTIVE_GROUPS):
        registry.set_active(group_id, True)

    store = ListingStore(settings.LIFECYCLE)
    notifier = _build_notifier(client)
    LOGGER.info("Selected notification method - %s", settings.NOTIFICATION_METHOD)
    processor = ListingProcessor(
        registry=registry,
        store=store,
        resolver=transport,
        notifier=notifier,
        notify_sold=settings.NOTIFY_SOLD,
    )
    scanner = WindowedScanner(
        transport=transport,
        registry=registry,
        processor=processor,
        config=settings.SCAN,
    )
    service = MarketplaceService(
        transport=transport,
        registry=registry,
        store=store,
        processor=processor,
        scanner=scanner,
    )
    return service, store


async def _connect() -> TelegramClient:
    client = build_client()
    await client.connect()
    await authorize(client)
    return client


async def _startup_scan(service: MarketplaceService) -> None:
    try:
        listings = await service.get_windowed_listings()
    except Exception:
        LOGGER.exception("Startup window scan failed")
        return
    LOGGER.info("Startup window scan found %s listings", len(listings))


async def _watch(dashboard: bool) -> None:
    client = await _connect()
    service, store = build_service(client)

    # Single handler keeps Telethon integration minimal and defers all gating
    # to the core processor for consistency and testability.
    @client.on(events.NewMessage(incoming=True))
    async def handler(event) -> None:
        try:
            await service.handle_incoming_message(build_message(event.message))
        except Exception:
            LOGGER.exception("Error while processing message")

    # The startup scan runs alongside live ingestion rather than before it.
    startup = asyncio.create_task(_startup_scan(service)) if settings.SCAN_ON_STARTUP else None

    try:
        if dashboard:
            from frontend.app import DashboardApp

            await DashboardApp(service, settings.GROUP_ALIASES).run_async()
        else:
            LOGGER.info("Client connected. Listening for incoming messages...")
            await client.run_until_disconnected()
    finally:
        if startup is not None and not startup.done():
            startup.cancel()
        store.close()
        await client.disconnect()


def _render_listings(console: Console, title: str, listings: Iterable[Listing]) -> None:
    table = Table(title=title)
    for column in ("posted", "title", "price", "location", "category", "seller", "group", "sold"):
        table.add_column(column)
    for listing in listings:
        table.add_row(
            format_time_posted(listing),
            listing.title,
            listing.price,
            listing.location,
            listing.category.value,
            listing.seller,
            format_group_label(listing.group_id, settings.GROUP_ALIASES),
            "yes" if listing.is_sold else "",
        )
    console.print(table)


def _render_groups(console: Console, groups: Iterable[GroupSummary]) -> None:
    table = Table(title="Groups")
    for column in ("active", "group_key", "name", "members", "listings"):
        table.add_column(column)
    for group in groups:
        table.add_row(
            "yes" if group.is_active else "no",
            group.group_id,
            group.name,
            str(group.member_count),
            str(group.items_found),
        )
    console.print(table)


async def _scan_once() -> None:
    client = await _connect()
    service, store = build_service(client)
    try:
        listings = await service.get_windowed_listings()
        window = settings.SCAN.window_days
        _render_listings(Console(), f"Listings from the last {window} days", listings)
    finally:
        store.close()
        await client.disconnect()


async def _list_groups() -> None:
    client = await _connect()
    service, store = build_service(client)
    try:
        _render_groups(Console(), await service.list_groups())
    finally:
        store.close()
        await client.disconnect()


async def _login() -> None:
    client = await _connect()
    await client.disconnect()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="fpvscope")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the watcher")
    subparsers.add_parser("dashboard", help="Start the watcher with the terminal dashboard")
    subparsers.add_parser("scan", help="Run one windowed scan and print the listings")
    subparsers.add_parser("groups", help="List group chats with their activation state")
    subparsers.add_parser("login", help="Pair the Telegram session (QR code or phone)")

    args = parser.parse_args(argv)
    _print_banner()
    _configure_logging(console=args.command != "dashboard")

    if args.command == "dashboard":
        asyncio.run(_watch(dashboard=True))
    elif args.command == "scan":
        asyncio.run(_scan_once())
    elif args.command == "groups":
        asyncio.run(_list_groups())
    elif args.command == "login":
        asyncio.run(_login())
    else:
        asyncio.run(_watch(dashboard=False))


if __name__ == "__main__":
    main()
