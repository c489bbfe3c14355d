"""Exceptions raised by configuration and credential code.

Upstream failures are not exceptions here; they travel as UpstreamResult values.
"""
from typing import List, Optional


class ConfigurationError(Exception):
    """Required configuration is absent or unusable (maps to HTTP 500)."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = list(missing or [])
