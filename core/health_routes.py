"""
Service status endpoints.
"""

from datetime import datetime, timezone

from messages_router import get_message_store

from .app_state import app


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "messages": len(get_message_store().read_all()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
