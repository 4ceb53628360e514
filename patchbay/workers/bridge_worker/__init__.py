"""
Bridge Worker module - vendor calls relayed by the browser extension
"""

from .bridge_adapter import BridgeAdapter

__all__ = ["BridgeAdapter"]
