"""
Help document endpoint.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import HTTPException
from fastapi.responses import HTMLResponse

from config import config
from services.render_cache import RenderCache, render_preformatted

from .app_state import app

logger = logging.getLogger(__name__)

_help_cache: Optional[RenderCache] = None


def get_help_cache() -> RenderCache:
    """Resolve the shared cache, rebuilding it when the configured file changes."""
    global _help_cache
    help_path = Path(config.HELP_FILE)
    if _help_cache is None or _help_cache.source_path != help_path:
        _help_cache = RenderCache(help_path, render_preformatted)
    return _help_cache


@app.get("/api/help", response_class=HTMLResponse)
async def get_help():
    """Rendered help document for the client's help button"""
    cache = get_help_cache()
    try:
        return HTMLResponse(cache.get())
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Help document not found") from exc
    except OSError as exc:
        logger.error("Unable to read help document %s: %s", cache.source_path, exc)
        raise HTTPException(status_code=500, detail="Unable to read help document") from exc
