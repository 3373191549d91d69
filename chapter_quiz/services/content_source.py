import asyncio
import json
from pathlib import Path
from typing import Any

import aiohttp

INDEX_NAME = "chapters.json"
CHAPTERS_DIR = "chapters"


class ContentSource:
    """Where chapter definitions come from: an index plus one resource per chapter file."""

    async def fetch_index(self) -> Any:
        """Return the decoded index (expected: list of chapter-file identifiers)."""
        raise NotImplementedError

    async def fetch_chapter(self, identifier: str) -> Any:
        """Return the decoded chapter file for an identifier."""
        raise NotImplementedError


class DirectoryContentSource(ContentSource):
    """Reads `chapters.json` and `chapters/<id>` from a local directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    async def _read_json(self, path: Path) -> Any:
        text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        return json.loads(text)

    async def fetch_index(self) -> Any:
        return await self._read_json(self.root / INDEX_NAME)

    async def fetch_chapter(self, identifier: str) -> Any:
        path = (self.root / CHAPTERS_DIR / identifier).resolve()
        if not path.is_relative_to((self.root / CHAPTERS_DIR).resolve()):
            raise ValueError(f"identifier escapes the chapters directory: {identifier}")
        return await self._read_json(path)


class HttpContentSource(ContentSource):
    """Fetches `chapters.json` and `chapters/<id>` relative to a base URL."""

    def __init__(self, base_url: str, timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _get_json(self, url: str) -> Any:
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url) as response:
                response.raise_for_status()
                # chapter files are often served as text/plain
                return await response.json(content_type=None)

    async def fetch_index(self) -> Any:
        return await self._get_json(f"{self.base_url}/{INDEX_NAME}")

    async def fetch_chapter(self, identifier: str) -> Any:
        return await self._get_json(f"{self.base_url}/{CHAPTERS_DIR}/{identifier}")
