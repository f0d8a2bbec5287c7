"""
Drive headless Chromium to turn an HTML document into a screenshot and a PDF.

Page-load quiescence: the document is loaded with ``wait_until="load"``, then
the engine waits until no more than ``max_inflight`` requests have been in
flight for ``idle_ms`` continuously. The whole load is bounded by
``timeout_ms``. Pages that keep long-polling or streaming connections open
reach quiescence as long as they hold at most ``max_inflight`` of them.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Callable, Dict, Optional, Union

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from .config import DEFAULT_TIMEOUT_MS
from .console import ConsoleLog
from .errors import ArtifactWriteFailure, RenderFailure
from .models import ArtifactSet

DEFAULT_MAX_INFLIGHT = 2
DEFAULT_IDLE_MS = 500

CHROMIUM_ARGS = [
    '--disable-dev-shm-usage',  # Use /tmp instead of /dev/shm (prevents OOM crashes)
    '--disable-gpu',             # No GPU in headless mode
    '--no-sandbox',              # Required in some environments
    '--disable-setuid-sandbox',
]

Sink = Callable[[Path, Union[bytes, str]], Any]


@asynccontextmanager
async def chromium_session() -> AsyncIterator[Any]:
    """Launch a headless Chromium browser and always close it on exit."""
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=True, args=CHROMIUM_ARGS)
        try:
            yield browser
        finally:
            await browser.close()


@dataclass(frozen=True)
class RenderOutputs:
    png_path: Path
    pdf_path: Path
    png_size: int
    pdf_size: int


class NetworkQuiescence:
    """Tracks in-flight page requests and waits for a quiet network."""

    def __init__(self, page: Any, max_inflight: int = DEFAULT_MAX_INFLIGHT, idle_ms: int = DEFAULT_IDLE_MS):
        self.max_inflight = max_inflight
        self.idle_ms = idle_ms
        self.inflight = 0
        self._changed = asyncio.Event()
        page.on("request", self._on_request)
        page.on("requestfinished", self._on_request_done)
        page.on("requestfailed", self._on_request_done)

    def _on_request(self, request: Any) -> None:
        self.inflight += 1
        self._changed.set()

    def _on_request_done(self, request: Any) -> None:
        self.inflight = max(0, self.inflight - 1)
        self._changed.set()

    async def wait(self) -> None:
        """Return once at most ``max_inflight`` requests stayed open for ``idle_ms``."""
        while True:
            self._changed.clear()
            if self.inflight <= self.max_inflight:
                try:
                    await asyncio.wait_for(self._changed.wait(), self.idle_ms / 1000)
                except asyncio.TimeoutError:
                    return
            else:
                await self._changed.wait()


class RenderEngine:
    """Loads HTML into a scoped browser session and writes PNG then PDF through ``sink``."""

    def __init__(self, margins: Optional[Dict[str, str]] = None, timeout_ms: int = DEFAULT_TIMEOUT_MS,
                 session_factory: Optional[Callable[[], Any]] = None, max_inflight: int = DEFAULT_MAX_INFLIGHT,
                 idle_ms: int = DEFAULT_IDLE_MS, log: Optional[ConsoleLog] = None):
        self.margins = margins or {'top': '12mm', 'right': '12mm', 'bottom': '12mm', 'left': '12mm'}
        self.timeout_ms = timeout_ms
        self.session_factory = session_factory or chromium_session
        self.max_inflight = max_inflight
        self.idle_ms = idle_ms
        self.log = log or ConsoleLog()

    async def render(self, html: str, targets: ArtifactSet, sink: Sink) -> RenderOutputs:
        """Render ``html``; raises RenderFailure after the session has been closed."""
        self.log.info("Launching headless Chromium...")
        try:
            async with self.session_factory() as browser:
                page = await browser.new_page()
                await self._load(page, html)

                self.log.debug("Page content set. Taking screenshot...")
                png = await page.screenshot(full_page=True)
                sink(targets.png_path, png)
                self.log.info(f"Saved screenshot to {targets.png_path}")

                self.log.debug(f"Generating PDF with margins: {self.margins}")
                pdf = await page.pdf(
                    format='A4',
                    print_background=True,
                    margin=dict(self.margins),
                )
                sink(targets.pdf_path, pdf)
                self.log.info(f"Saved PDF to {targets.pdf_path}")
        except PlaywrightTimeoutError as e:
            raise RenderFailure(f"Timed out after {self.timeout_ms}ms loading content: {e}") from e
        except PlaywrightError as e:
            raise RenderFailure(f"Browser error: {e}") from e
        except (RenderFailure, ArtifactWriteFailure):
            raise
        except Exception as e:
            raise RenderFailure(f"Render step failed: {type(e).__name__}: {e}") from e

        return RenderOutputs(
            png_path=targets.png_path,
            pdf_path=targets.pdf_path,
            png_size=len(png),
            pdf_size=len(pdf),
        )

    async def _load(self, page: Any, html: str) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout_ms / 1000
        page.set_default_timeout(self.timeout_ms)
        quiescence = NetworkQuiescence(page, self.max_inflight, self.idle_ms)

        await page.set_content(html, wait_until="load", timeout=self.timeout_ms)
        remaining = max(0.0, deadline - loop.time())
        try:
            await asyncio.wait_for(quiescence.wait(), remaining)
        except asyncio.TimeoutError:
            raise RenderFailure(
                f"Timed out after {self.timeout_ms}ms waiting for network quiescence "
                f"({quiescence.inflight} requests still in flight)"
            )
