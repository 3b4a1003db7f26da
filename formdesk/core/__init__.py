"""Core: settings, constants, lifespan, exception handlers and rate limiter."""

from formdesk.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
