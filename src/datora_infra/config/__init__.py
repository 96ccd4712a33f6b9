"""Configuration management for datora-infra.

Usage:
    >>> from datora_infra.config import get_settings
    >>> settings = get_settings()
    >>> settings.audit_request_index
    'datora-http-request'
"""

from datora_infra.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
