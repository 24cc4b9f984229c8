"""Shared helpers for provider implementations."""

from .async_http import AsyncHTTPProviderMixin

__all__ = ["AsyncHTTPProviderMixin"]
