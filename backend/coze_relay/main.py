"""
FastAPI application entry point
"""
import logging
from pathlib import Path
from dotenv import load_dotenv

logging.basicConfig(level=logging.INFO)
logging.getLogger("relay").setLevel(logging.INFO)
logging.getLogger("coze").setLevel(logging.INFO)

# Load environment variables FIRST, before any other imports
# Explicitly look for .env in the backend directory (parent of coze_relay/)
backend_dir = Path(__file__).parent.parent
env_path = backend_dir / ".env"
load_dotenv(dotenv_path=env_path)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from coze_relay.config import cors_allow_origins
from coze_relay.routes import chat


app = FastAPI(
    title="Coze Chat Relay API",
    description="Relays chat messages to a Coze bot and returns its answer",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat.router, tags=["chat"])


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "service": "Coze Chat Relay API",
        "version": "1.0.0",
        "endpoints": {
            "health": "/health",
            "chat": "/chat (POST)",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "coze-chat-relay"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("coze_relay.main:app", host="0.0.0.0", port=8000, reload=True)
