"""
Tests for the filesystem timestamp and content collaborators.
"""

import os
import pytest

from deck_workspace.core.sync.sources import ContentRevisionSource, FileSystemSource


class TestFileSystemSource:
    """Test filesystem-backed timestamps and content"""

    @pytest.fixture
    def source(self):
        return FileSystemSource()

    @pytest.mark.asyncio
    async def test_fetch_timestamp(self, source, tmp_path):
        slide = tmp_path / "a.svg"
        slide.write_text("<svg/>")
        os.utime(slide, (1000.0, 1000.0))

        assert await source.fetch_timestamp(slide) == 1000.0

    @pytest.mark.asyncio
    async def test_fetch_timestamp_missing_file(self, source, tmp_path):
        with pytest.raises(FileNotFoundError):
            await source.fetch_timestamp(tmp_path / "missing.svg")

    @pytest.mark.asyncio
    async def test_fetch_content(self, source, tmp_path):
        slide = tmp_path / "a.svg"
        slide.write_text("<svg><text>Hello</text></svg>", encoding="utf-8")

        assert await source.fetch_content(str(slide)) == "<svg><text>Hello</text></svg>"

    @pytest.mark.asyncio
    async def test_fetch_content_missing_file(self, source, tmp_path):
        with pytest.raises(FileNotFoundError):
            await source.fetch_content(tmp_path / "missing.svg")


class TestContentRevisionSource:
    """Test content-digest revisions"""

    @pytest.mark.asyncio
    async def test_revision_increments_on_content_change(self, tmp_path):
        source = ContentRevisionSource()
        slide = tmp_path / "a.svg"
        slide.write_text("<svg/>")
        os.utime(slide, (1000.0, 1000.0))

        assert await source.fetch_timestamp(slide) == 1.0
        assert await source.fetch_timestamp(slide) == 1.0

        slide.write_text("<svg><rect/></svg>")
        os.utime(slide, (2000.0, 2000.0))

        assert await source.fetch_timestamp(slide) == 2.0

    @pytest.mark.asyncio
    async def test_edit_keeping_mtime_and_size_is_detected(self, tmp_path):
        """Storage with unreliable mtimes: same size, same mtime, new content"""
        source = ContentRevisionSource()
        slide = tmp_path / "a.svg"
        slide.write_text("<svg>AAAA</svg>")
        os.utime(slide, (1000.0, 1000.0))
        assert await source.fetch_timestamp(slide) == 1.0

        slide.write_text("<svg>BBBB</svg>")
        os.utime(slide, (1000.0, 1000.0))

        assert slide.stat().st_size == len("<svg>AAAA</svg>")
        assert await source.fetch_timestamp(slide) == 2.0

    @pytest.mark.asyncio
    async def test_touch_without_content_change(self, tmp_path):
        """A new modification time with identical content is not a new revision"""
        source = ContentRevisionSource()
        slide = tmp_path / "a.svg"
        slide.write_text("<svg/>")
        os.utime(slide, (1000.0, 1000.0))
        await source.fetch_timestamp(slide)

        os.utime(slide, (3000.0, 3000.0))

        assert await source.fetch_timestamp(slide) == 1.0

    @pytest.mark.asyncio
    async def test_hash_matches_content(self, tmp_path):
        source = ContentRevisionSource()
        first = tmp_path / "a.svg"
        second = tmp_path / "b.svg"
        first.write_text("<svg/>")
        second.write_text("<svg/>")

        assert await source.compute_file_hash(first) == await source.compute_file_hash(second)

    @pytest.mark.asyncio
    async def test_forget_restarts_revisions(self, tmp_path):
        source = ContentRevisionSource()
        slide = tmp_path / "a.svg"
        slide.write_text("<svg/>")
        await source.fetch_timestamp(slide)
        slide.write_text("<svg><g/></svg>")
        os.utime(slide, (5000.0, 5000.0))
        assert await source.fetch_timestamp(slide) == 2.0

        source.forget(slide)

        assert await source.fetch_timestamp(slide) == 1.0

    @pytest.mark.asyncio
    async def test_missing_file_raises(self, tmp_path):
        source = ContentRevisionSource()

        with pytest.raises(FileNotFoundError):
            await source.fetch_timestamp(tmp_path / "missing.svg")
