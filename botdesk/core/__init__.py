"""
Core Utilities

Modules:
    - exceptions: Domain exceptions and HTTP helpers
"""

from botdesk.core import exceptions

__all__ = ["exceptions"]
