"""Core domain package for fpvscope.

Core contains listing detection, extraction, lifecycle and scan caching logic
without any Telegram or UI-specific code, keeping the business logic portable.
"""
