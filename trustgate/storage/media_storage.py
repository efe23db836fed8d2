"""
Media Storage
-------------
Stores uploaded KYC media and returns a URL the web client can retrieve it from.

The service only depends on the MediaStorage contract; LocalMediaStorage
writes under a directory that the application serves as static files.
"""

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath
from uuid import uuid4

from loguru import logger
from starlette.concurrency import run_in_threadpool


class MediaStorage(ABC):
    @abstractmethod
    async def save(self, folder: str, filename: str, content: bytes) -> str:
        """Persist the content and return its public URL."""

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Remove media previously returned by save(). Unknown URLs are ignored."""


class LocalMediaStorage(MediaStorage):
    """Filesystem-backed media storage."""

    def __init__(self, root: str, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    async def save(self, folder: str, filename: str, content: bytes) -> str:
        # Only the extension of the client-supplied name is kept
        suffix = PurePosixPath(filename or "").suffix.lower()[:10]
        stored_name = f"{uuid4().hex}{suffix}"
        target_dir = self.root / folder
        target = target_dir / stored_name

        def _write() -> None:
            target_dir.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await run_in_threadpool(_write)
        logger.info(f"Stored media {folder}/{stored_name} ({len(content)} bytes)")
        return f"{self.base_url}/{folder}/{stored_name}"

    async def delete(self, url: str) -> None:
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return
        relative = PurePosixPath(url[len(prefix):])
        if ".." in relative.parts:
            return
        target = self.root.joinpath(*relative.parts)

        await run_in_threadpool(target.unlink, missing_ok=True)
        logger.info(f"Removed media {relative}")
