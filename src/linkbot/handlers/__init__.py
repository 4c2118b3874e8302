"""Telegram-facing helpers for LinkBot.

  - message_sender: safe plain-text sending and the copy/edit calls used to
    re-emit a rewritten message or album
"""
