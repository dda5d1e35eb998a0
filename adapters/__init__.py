"""
Adapters package - External service connections.
"""

from adapters import messaging_adapter

__all__ = [
    "messaging_adapter",
]
