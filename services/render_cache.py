"""Render-once cache for a source file, refreshed when the file changes."""

from __future__ import annotations

import html
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedRender:
    content: str
    source_version: int


class RenderCache:
    """Cache the rendered form of one file, keyed on its modification time.

    Each instance owns its ``(content, source_version)`` pair; callers hold
    the instance explicitly. The renderer (for example a markdown-to-HTML
    function) is injected and receives the raw file text.
    """

    def __init__(self, source_path: Path, render: Callable[[str], str]) -> None:
        self.source_path = Path(source_path)
        self._render = render
        self._cached: Optional[CachedRender] = None
        self._lock = threading.Lock()

    @property
    def cached(self) -> Optional[CachedRender]:
        return self._cached

    def get(self) -> str:
        """Return rendered content, re-rendering when the source changed on disk.

        Raises OSError when the source file cannot be read.
        """
        version = self.source_path.stat().st_mtime_ns
        with self._lock:
            if self._cached is not None and self._cached.source_version == version:
                return self._cached.content
            text = self.source_path.read_text(encoding="utf-8")
            content = self._render(text)
            self._cached = CachedRender(content=content, source_version=version)
            logger.info("Rendered %s (version %s)", self.source_path, version)
            return content

    def invalidate(self) -> None:
        with self._lock:
            self._cached = None


def render_preformatted(text: str) -> str:
    """HTML-escape plain text and wrap it in a ``<pre>`` block."""
    return f"<pre>{html.escape(text)}</pre>"
