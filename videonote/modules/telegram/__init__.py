"""Telegram adapters: Bot API client, notices, update routing and transports."""
