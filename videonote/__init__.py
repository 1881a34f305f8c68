"""Telegram bot converting user videos into round video notes."""

__version__ = "0.1.0"
