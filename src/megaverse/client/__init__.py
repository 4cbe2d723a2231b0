"""
megaverse.client - HTTP implementation of the remote-call interface.
"""

from megaverse.client.api import MegaverseClient

__all__ = ["MegaverseClient"]
