"""Anchor: scripture-based guidance from a chat-completion provider."""
