"""
Client capability endpoint.
"""

from config import config
from services.capabilities import capabilities_document

from .app_state import app


@app.get("/api/capabilities")
async def get_capabilities():
    """Which UI features are enabled, with their limits"""
    return capabilities_document(config.STORAGE)
