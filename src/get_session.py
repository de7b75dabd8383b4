"""Interactive session pairing for the Telegram user account.

Supports QR-code login (scan from the Telegram mobile app) and phone-code
login. Nothing here is needed once a .session file exists.
"""

from __future__ import annotations

import asyncio
from getpass import getpass
import logging
import os

import qrcode
from telethon import TelegramClient, errors

LOGGER = logging.getLogger(__name__)

QR_TIMEOUT_SECONDS = 120
QR_ATTEMPTS = 3


def _print_qr(url: str) -> None:
    qr = qrcode.QRCode(border=1)
    qr.add_data(url)
    qr.make(fit=True)
    qr.print_ascii(invert=True)


def _resolve_2fa_password() -> str:
    return os.getenv("2FA") or getpass("2FA password: ")


async def _authorize_with_qr(client: TelegramClient) -> None:
    qr_login = await client.qr_login()
    for attempt in range(1, QR_ATTEMPTS + 1):
        print("Scan this code in Telegram > Settings > Devices > Link Desktop Device")
        _print_qr(qr_login.url)
        try:
            await qr_login.wait(timeout=QR_TIMEOUT_SECONDS)
            return
        except asyncio.TimeoutError:
            if attempt == QR_ATTEMPTS:
                raise
            LOGGER.info("QR code expired, generating a new one (%s/%s)", attempt + 1, QR_ATTEMPTS)
            await qr_login.recreate()


async def _authorize_with_phone(client: TelegramClient) -> None:
    phone = os.getenv("PHONE") or input("Phone number (international format): ").strip()
    await client.send_code_request(phone)
    code = input("Login code: ").strip()
    await client.sign_in(phone=phone, code=code)


def _pick_login_method() -> str:
    method = (os.getenv("LOGIN_METHOD") or "").strip().lower()
    if method in {"qr", "phone"}:
        return method
    choices = {"1": "qr", "2": "phone"}
    while True:
        print("")
        print("Login methods:")
        print("[1] QR code")
        print("[2] Phone code")
        print("[3] Exit")
        choice = input("fpvscope > ").strip()
        if choice in choices:
            return choices[choice]
        if choice == "3":
            raise SystemExit(0)
        print("Invalid option. Please choose 1, 2, or 3.")


async def authorize(client: TelegramClient) -> None:
    """Log the connected client in unless the session is already authorized."""

    if await client.is_user_authorized():
        return

    method = _pick_login_method()
    try:
        if method == "phone":
            await _authorize_with_phone(client)
        else:
            await _authorize_with_qr(client)
    except errors.SessionPasswordNeededError:
        await client.sign_in(password=_resolve_2fa_password())

    me = await client.get_me()
    LOGGER.info("Logged in as %s", getattr(me, "first_name", None) or getattr(me, "username", "unknown"))
