"""Configuration package export.

    from registry_reports.config import Settings, get_settings
"""

from __future__ import annotations

from .settings import Environment, Settings, get_settings

__all__ = ["Environment", "Settings", "get_settings"]
