"""
Resolve a Markdown source descriptor into raw text.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import os
from pathlib import Path
from typing import Optional

import httpx

from .console import ConsoleLog
from .errors import SourceUnavailable
from .models import FileSource, InlineSource, SourceDescriptor, UrlSource


class SourceLoader:
    """Loads Markdown from a file, a URL or inline text. One attempt, no retries."""

    def __init__(self, log: Optional[ConsoleLog] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.log = log or ConsoleLog()
        self._transport = transport

    async def load(self, descriptor: SourceDescriptor) -> str:
        if isinstance(descriptor, FileSource):
            return self._read_file(descriptor)
        if isinstance(descriptor, UrlSource):
            return await self._fetch(descriptor)
        if isinstance(descriptor, InlineSource):
            self.log.debug(f"Using inline Markdown ({len(descriptor.text)} chars)")
            return descriptor.text
        raise SourceUnavailable(f"Unsupported source descriptor: {descriptor!r}")

    def _read_file(self, descriptor: FileSource) -> str:
        cwd = os.getcwd()
        md_file = Path(cwd, descriptor.path).resolve()
        if not md_file.is_file():
            raise SourceUnavailable(f"Markdown file not found: {md_file} (cwd={cwd})")
        try:
            with open(md_file, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceUnavailable(f"Cannot read Markdown file {md_file}: {e}") from e
        self.log.debug(f"Read {len(content)} chars from {md_file}")
        return content

    async def _fetch(self, descriptor: UrlSource) -> str:
        self.log.info(f"Fetching Markdown from {descriptor.url}")
        try:
            async with httpx.AsyncClient(transport=self._transport, follow_redirects=True) as client:
                response = await client.get(descriptor.url)
        except httpx.HTTPError as e:
            raise SourceUnavailable(f"Failed to fetch Markdown from {descriptor.url}: {e}") from e
        if not response.is_success:
            raise SourceUnavailable(
                f"Failed to fetch Markdown from {descriptor.url}: {response.status_code} {response.reason_phrase}"
            )
        return response.text
