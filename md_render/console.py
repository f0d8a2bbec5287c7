"""
Colour-tagged console logging shared by the pipeline components.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import threading

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ConsoleLog:
    """Prefixed, coloured console output ([DEBUG]/[INFO]/[WARNING]/[ERROR]/[OK])."""

    def __init__(self, debug: bool = False):
        self.debug_enabled = debug
        self._lock = threading.Lock()

    def debug(self, message: str) -> None:
        """Log debug message with color (only if debug mode is enabled)."""
        if self.debug_enabled:
            with self._lock:
                print(f"{Fore.CYAN}[DEBUG]{Style.RESET_ALL} {message}")

    def info(self, message: str) -> None:
        """Log info message with color."""
        with self._lock:
            print(f"{Fore.GREEN}[INFO]{Style.RESET_ALL} {message}")

    def warning(self, message: str) -> None:
        """Log warning message with color."""
        with self._lock:
            print(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} {message}")

    def error(self, message: str) -> None:
        """Log error message with color."""
        with self._lock:
            print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")

    def success(self, message: str) -> None:
        """Log success message with color."""
        with self._lock:
            print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {message}")
