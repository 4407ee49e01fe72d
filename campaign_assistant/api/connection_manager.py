"""
WebSocket connection manager for handling multiple client connections
"""

import logging
from typing import Dict, Optional

from fastapi import WebSocket

from ..session import ConversationSession

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections and the conversation each client is having"""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}
        # Handshake data per client: names, recent searches, collateral, user and project ids
        self.client_contexts: Dict[str, dict] = {}
        self.sessions: Dict[str, ConversationSession] = {}

    async def connect(self, client_id: str, websocket: WebSocket):
        """
        Accept and register a new WebSocket connection

        Args:
            client_id: Unique identifier for the client
            websocket: WebSocket connection instance
        """
        await websocket.accept()
        self.active_connections[client_id] = websocket
        logger.info(f"Client {client_id} connected")

    def disconnect(self, client_id: str):
        """Remove a client connection along with its context and session"""
        self.active_connections.pop(client_id, None)
        self.client_contexts.pop(client_id, None)
        self.sessions.pop(client_id, None)
        logger.info(f"Client {client_id} disconnected")

    async def send_message(self, client_id: str, message: dict):
        if client_id in self.active_connections:
            await self.active_connections[client_id].send_json(message)

    def is_connected(self, client_id: str) -> bool:
        return client_id in self.active_connections

    def set_context(self, client_id: str, context: dict):
        self.client_contexts[client_id] = context
        logger.info(f"Context stored for client {client_id}: {context.get('company_name') or 'Unknown company'}")

    def get_context(self, client_id: str) -> dict:
        return self.client_contexts.get(client_id, {})

    def set_session(self, client_id: str, session: ConversationSession):
        self.sessions[client_id] = session

    def get_session(self, client_id: str) -> Optional[ConversationSession]:
        return self.sessions.get(client_id)
