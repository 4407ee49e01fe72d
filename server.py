"""
FastAPI server for the Campaign Assistant with WebSocket support
"""

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from campaign_assistant.api import websocket_endpoint as handle_websocket
from campaign_assistant.utils import setup_logging

setup_logging()

app = FastAPI(title="Campaign Assistant API")

# CORS middleware for the React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    return {"message": "Campaign Assistant API", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.websocket("/ws/{client_id}")
async def websocket_endpoint(websocket: WebSocket, client_id: str):
    """
    WebSocket endpoint for the campaign creation conversation
    """
    await handle_websocket(websocket, client_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("server:app", host="0.0.0.0", port=8000, reload=True)
