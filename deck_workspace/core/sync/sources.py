"""
Filesystem collaborators for the poller and the coordinator.

``FileSystemSource`` reads modification times and slide content from disk.
``ContentRevisionSource`` is a fallback change signal for storage that cannot
provide a reliable modification time: it hashes file contents and turns each
new digest into a higher revision number, so the poller's strictly-greater
comparison keeps working.
"""

import asyncio
import hashlib
import logging
from pathlib import Path
from typing import Dict, Union

import aiofiles

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileSystemSource:
    """Timestamp and content access backed by the local filesystem"""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    async def fetch_timestamp(self, path: PathLike) -> float:
        """
        Get the modification time of a file.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be stat'ed
        """
        stat = await asyncio.to_thread(Path(path).stat)
        return stat.st_mtime

    async def fetch_content(self, path: PathLike) -> str:
        """
        Read a slide document as text.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
            UnicodeDecodeError: If the file is not valid text
        """
        async with aiofiles.open(path, 'r', encoding=self.encoding) as f:
            return await f.read()


class ContentRevisionSource:
    """
    Change signal derived from content digests.

    Each path gets a revision counter starting at 1. Whenever the SHA-256
    digest of the file differs from the previously seen one the counter is
    incremented. The file is read on every call: modification time and size
    are not trusted, so an edit that keeps both unchanged is still detected.
    """

    CHUNK_SIZE = 8192

    def __init__(self):
        self._digests: Dict[str, str] = {}
        self._revisions: Dict[str, int] = {}

    async def compute_file_hash(self, path: PathLike) -> str:
        """
        Compute SHA256 hash of file content.

        Raises:
            FileNotFoundError: If the file does not exist
            OSError: If the file cannot be read
        """
        hasher = hashlib.sha256()
        async with aiofiles.open(path, 'rb') as f:
            while chunk := await f.read(self.CHUNK_SIZE):
                hasher.update(chunk)
        return hasher.hexdigest()

    async def fetch_timestamp(self, path: PathLike) -> float:
        """Revision number of the file's current content"""
        file_key = str(path)
        digest = await self.compute_file_hash(path)

        previous = self._digests.get(file_key)
        if previous is None:
            self._revisions[file_key] = 1
        elif previous != digest:
            self._revisions[file_key] += 1
            logger.debug(f"Content of {file_key} changed (revision {self._revisions[file_key]})")

        self._digests[file_key] = digest
        return float(self._revisions[file_key])

    def forget(self, path: PathLike) -> None:
        """Drop cached state for a path"""
        file_key = str(path)
        self._digests.pop(file_key, None)
        self._revisions.pop(file_key, None)
