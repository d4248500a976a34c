"""
apibridge Configuration

Environment-driven settings and credential models.
"""

from .schemas import BridgeSettings, Credentials
from .settings import get_settings

__all__ = [
    "BridgeSettings",
    "Credentials",
    "get_settings",
]
