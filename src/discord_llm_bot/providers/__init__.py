"""Messaging platform providers.

- DiscordProvider: Discord REST API (v10) over httpx

Directory Structure:
- common/: Shared HTTP helpers
"""

from .discord import DiscordProvider

__all__ = ["DiscordProvider"]
