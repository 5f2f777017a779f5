"""
Tests for services/render_cache.py.
"""

import os
from unittest.mock import Mock

import pytest

from services.render_cache import RenderCache, render_preformatted


@pytest.fixture
def source(tmp_path):
    path = tmp_path / "README.md"
    path.write_text("# Title", encoding="utf-8")
    return path


def _bump_mtime(path, seconds=10):
    stat = path.stat()
    os.utime(path, ns=(stat.st_atime_ns, stat.st_mtime_ns + seconds * 1_000_000_000))


class TestRenderCache:

    def test_renders_once_while_unchanged(self, source):
        render = Mock(side_effect=lambda text: f"<h1>{text[2:]}</h1>")
        cache = RenderCache(source, render)

        assert cache.get() == "<h1>Title</h1>"
        assert cache.get() == "<h1>Title</h1>"
        assert render.call_count == 1
        assert cache.cached.source_version == source.stat().st_mtime_ns

    def test_rerenders_after_change(self, source):
        """
        Given: A cached render
        When: The source file is rewritten with a newer mtime
        Then: get() returns the new rendering
        """
        cache = RenderCache(source, str.upper)
        assert cache.get() == "# TITLE"

        source.write_text("# Other", encoding="utf-8")
        _bump_mtime(source)

        assert cache.get() == "# OTHER"

    def test_invalidate(self, source):
        render = Mock(return_value="html")
        cache = RenderCache(source, render)
        cache.get()
        cache.invalidate()
        assert cache.cached is None
        cache.get()
        assert render.call_count == 2

    def test_missing_source_raises(self, tmp_path):
        cache = RenderCache(tmp_path / "missing.md", str.upper)
        with pytest.raises(OSError):
            cache.get()


class TestRenderPreformatted:

    def test_escapes_markup(self):
        assert render_preformatted('<a href="x">1 & 2</a>') == "<pre>&lt;a href=&quot;x&quot;&gt;1 &amp; 2&lt;/a&gt;</pre>"

    def test_keeps_line_breaks(self):
        assert render_preformatted("one\ntwo") == "<pre>one\ntwo</pre>"
