from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from core.categories import Category
from core.models import Chat, ChatMessage, Listing, SenderInfo, listing_id_for

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_message(
    text: str,
    *,
    group_id: str = "@fpv_sa",
    message_id: int = 1,
    date: Optional[datetime] = None,
    is_group: bool = True,
    has_media: bool = False,
    reply_to_msg_id: Optional[int] = None,
) -> ChatMessage:
    return ChatMessage(
        group_id=group_id,
        message_id=message_id,
        date=date or NOW,
        text=text,
        is_group=is_group,
        has_media=has_media,
        reply_to_msg_id=reply_to_msg_id,
    )


class FakeResolver:
    def __init__(
        self,
        sender: Optional[SenderInfo] = None,
        media: Optional[str] = "media/photo.jpg",
        fail_sender: bool = False,
        fail_media: bool = False,
    ) -> None:
        self.sender = sender or SenderInfo(display_name="Pilot Pete", handle="@pete")
        self.media = media
        self.fail_sender = fail_sender
        self.fail_media = fail_media
        self.messages: dict[tuple[str, int], ChatMessage] = {}
        self.sender_calls = 0
        self.media_calls = 0

    def remember(self, *messages: ChatMessage) -> None:
        for message in messages:
            self.messages[(message.group_id, message.message_id)] = message

    async def resolve_quoted(self, message: ChatMessage) -> Optional[ChatMessage]:
        if message.reply_to_msg_id is None:
            return None
        return self.messages.get((message.group_id, message.reply_to_msg_id))

    async def resolve_sender(self, message: ChatMessage) -> SenderInfo:
        self.sender_calls += 1
        if self.fail_sender:
            raise RuntimeError("sender lookup failed")
        return self.sender

    async def resolve_media(self, message: ChatMessage) -> Optional[str]:
        self.media_calls += 1
        if self.fail_media:
            raise RuntimeError("download failed")
        return self.media


class FakeTransport(FakeResolver):
    def __init__(self, chats: Optional[list[Chat]] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.connected = True
        self.chats = chats or []
        self.history: dict[str, list[ChatMessage]] = {}
        self.failing_groups: set[str] = set()
        self.fetch_calls: list[tuple[str, int]] = []
        self.list_calls = 0

    def add_history(self, group_id: str, *messages: ChatMessage) -> None:
        self.history.setdefault(group_id, []).extend(messages)
        self.remember(*messages)

    def is_connected(self) -> bool:
        return self.connected

    async def list_chats(self) -> list[Chat]:
        self.list_calls += 1
        return list(self.chats)

    async def fetch_messages(self, group_id: str, limit: int) -> list[ChatMessage]:
        self.fetch_calls.append((group_id, limit))
        if group_id in self.failing_groups:
            raise ConnectionError(f"cannot read {group_id}")
        # Newest first, like Telegram history.
        messages = sorted(self.history.get(group_id, []), key=lambda m: m.date, reverse=True)
        return messages[:limit]


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send(self, event: str, listing) -> None:
        self.sent.append((event, listing.id))


def make_listing(message_id: int = 1, group_id: str = "@fpv_sa", title: str = "Tinyhawk 3") -> Listing:
    return Listing(
        id=listing_id_for(group_id, message_id),
        message_id=message_id,
        group_id=group_id,
        title=title,
        description=title,
        price="R2000",
        location="Unknown",
        category=Category.COMPLETE_SETUP,
        seller="Pilot Pete",
        time_posted=NOW,
    )


class FakeClock:
    def __init__(self, value: float = 1000.0) -> None:
        self.value = value

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds
