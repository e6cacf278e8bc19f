"""Telegram bot command and message handler modules."""

from __future__ import annotations

from .commands import build_command_handlers, build_message_handler

__all__ = ["build_command_handlers", "build_message_handler"]
