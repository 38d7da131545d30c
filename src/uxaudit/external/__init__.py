"""Clients for third-party services."""

from uxaudit.external.pagespeed import PageSpeedClient

__all__ = ["PageSpeedClient"]
