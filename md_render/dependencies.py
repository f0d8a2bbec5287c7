"""
Preflight checks for the external pieces the pipeline cannot install itself.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

from pathlib import Path
from typing import Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from .console import ConsoleLog


def chromium_executable() -> Optional[Path]:
    """Return Playwright's Chromium executable if it is installed."""
    with sync_playwright() as p:
        executable = Path(p.chromium.executable_path)
    return executable if executable.exists() else None


def check_dependencies(log: Optional[ConsoleLog] = None) -> bool:
    """Warn when Chromium is missing. Never fatal: a render failure still produces error.txt."""
    log = log or ConsoleLog()
    try:
        executable = chromium_executable()
    except PlaywrightError as e:
        log.warning(f"Could not query Playwright browsers: {e}")
        return False

    if executable is None:
        log.warning("Playwright Chromium is not installed; rendering will fail.")
        log.warning("Run: playwright install chromium")
        return False

    log.debug(f"Chromium is available at {executable}")
    return True
