from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator

logger = logging.getLogger(__name__)


class DownloadSink:
    """Write streamed documents into a directory under their server-provided names."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def destination(self, filename: str) -> Path:
        # Server names are trusted for the name only, never for the directory.
        name = Path(filename).name
        if not name or name in {".", ".."}:
            raise ValueError(f"Unusable document filename {filename!r}")
        return self.directory / name

    async def save(self, chunks: AsyncIterator[bytes], filename: str) -> Path:
        dest = self.destination(filename)
        self.directory.mkdir(parents=True, exist_ok=True)
        size = 0
        try:
            with dest.open("wb") as fh:
                async for chunk in chunks:
                    fh.write(chunk)
                    size += len(chunk)
        except Exception:
            dest.unlink(missing_ok=True)
            raise
        logger.info("Downloaded %s (%d bytes)", dest, size)
        return dest
