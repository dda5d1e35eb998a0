"""API routes package"""

from . import notify, health

__all__ = ["notify", "health"]
