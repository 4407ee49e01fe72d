"""
API module for the campaign assistant
"""

from .connection_manager import ConnectionManager
from .websocket_handler import (
    handle_preview_step,
    handle_save_campaign,
    process_user_message,
    services,
    websocket_endpoint,
)

__all__ = [
    "ConnectionManager",
    "handle_preview_step",
    "handle_save_campaign",
    "process_user_message",
    "services",
    "websocket_endpoint",
]
