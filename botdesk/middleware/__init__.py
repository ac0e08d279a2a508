"""
Middleware Components

Provides request-level admission control in front of resource-creating routes.
"""

from botdesk.middleware.quota import check_quota

__all__ = ["check_quota"]
