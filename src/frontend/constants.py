"""Shared constants for the Textual UI."""

from __future__ import annotations

TELEGRAM_BLUE = "#2AABEE"

# How long the window tab waits on a scan before showing a timeout.
WINDOW_SCAN_TIMEOUT_SECONDS = 300.0

# Store-backed tabs re-read the in-memory store on this interval.
LOCAL_REFRESH_SECONDS = 5.0
