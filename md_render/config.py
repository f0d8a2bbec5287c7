"""
Configuration resolution for the render pipeline.

Values are resolved once, in order: CLI overrides, environment variables,
built-in defaults. The result is frozen into a PipelineConfig that is passed
explicitly to every component.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import os
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .models import InlineSource, SourceDescriptor, FileSource, parse_source

DEFAULT_SOURCE = "README.md"
DEFAULT_OUTPUT_DIR = "out"
DEFAULT_MARGINS = "12mm"
DEFAULT_TIMEOUT_MS = 60_000

_MARGIN_RE = re.compile(r'^(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*(cm|in|mm|pt|px)?$')


def _validate_margin(margin_str: str) -> str:
    """Validate and normalize a single margin value."""
    match = _MARGIN_RE.match(margin_str.strip())
    if not match:
        raise ValueError(f"Invalid margin format: '{margin_str}'. Use format like '1in', '2.5cm', '10mm', etc.")

    value_str, unit = match.groups()
    value = float(value_str)

    # Set default unit to 'in' if not specified
    if not unit:
        unit = 'in'

    # Convert to inches for validation
    if unit == 'cm':
        value_inches = value / 2.54
    elif unit == 'mm':
        value_inches = value / 25.4
    elif unit == 'pt':
        value_inches = value / 72
    elif unit == 'px':
        value_inches = value / 96  # Assuming 96 DPI
    else:  # 'in'
        value_inches = value

    if value_inches < 0:
        raise ValueError(f"Margin cannot be negative: '{margin_str}'. Minimum value is 0.")
    elif value_inches > 3:
        raise ValueError(f"Margin too large: '{margin_str}'. Maximum value is 3 inches (7.62cm).")

    return f"{value:g}{unit}"


def parse_margins(page_margins: str) -> Dict[str, str]:
    """Parse a CSS-style margin string (1, 2 or 4 values) into per-side margins."""
    margin_parts = page_margins.split()

    if len(margin_parts) == 1:
        margin = _validate_margin(margin_parts[0])
        return {'top': margin, 'right': margin, 'bottom': margin, 'left': margin}
    elif len(margin_parts) == 2:
        vertical = _validate_margin(margin_parts[0])
        horizontal = _validate_margin(margin_parts[1])
        return {'top': vertical, 'right': horizontal, 'bottom': vertical, 'left': horizontal}
    elif len(margin_parts) == 4:
        return {
            'top': _validate_margin(margin_parts[0]),
            'right': _validate_margin(margin_parts[1]),
            'bottom': _validate_margin(margin_parts[2]),
            'left': _validate_margin(margin_parts[3])
        }
    else:
        raise ValueError(f"Invalid margin format: '{page_margins}'. Use 1, 2, or 4 values.")


def _env_flag(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PipelineConfig:
    """Everything one pipeline run needs, resolved up front."""

    source: SourceDescriptor
    output_dir: str = DEFAULT_OUTPUT_DIR
    margins: Optional[Dict[str, str]] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    print_endpoint: Optional[str] = None
    printer_name: Optional[str] = None
    print_token: Optional[str] = None
    debug: bool = False
    show_progress: bool = True

    def page_margins(self) -> Dict[str, str]:
        return dict(self.margins) if self.margins else parse_margins(DEFAULT_MARGINS)


class Config:
    """Resolves pipeline settings from CLI overrides, then the environment, then defaults."""

    def __init__(self, cli_config: Optional[Dict[str, Any]] = None, environ: Optional[Mapping[str, str]] = None):
        self.cli_config = {k: v for k, v in (cli_config or {}).items() if v is not None}
        self.environ = os.environ if environ is None else environ

    def _get(self, cli_key: str, env_key: Optional[str], default: Any = None) -> Any:
        if cli_key in self.cli_config:
            return self.cli_config[cli_key]
        if env_key and self.environ.get(env_key):
            return self.environ[env_key]
        return default

    def get_source(self) -> SourceDescriptor:
        """Source precedence: CLI content/source, MD_CONTENT, MD_URL, MD_PATH, README.md."""
        if "content" in self.cli_config:
            return InlineSource(self.cli_config["content"])
        if "source" in self.cli_config:
            return parse_source(self.cli_config["source"])
        if self.environ.get("MD_CONTENT"):
            return InlineSource(self.environ["MD_CONTENT"], label="$MD_CONTENT")
        if self.environ.get("MD_URL"):
            return parse_source(self.environ["MD_URL"])
        return FileSource(self.environ.get("MD_PATH") or DEFAULT_SOURCE)

    def get_output_dir(self) -> str:
        return str(self._get("output_dir", "OUTPUT_DIR", DEFAULT_OUTPUT_DIR))

    def get_margins(self) -> Dict[str, str]:
        return parse_margins(str(self._get("margins", "PDF_MARGINS", DEFAULT_MARGINS)))

    def get_timeout_ms(self) -> int:
        raw = self._get("timeout_ms", "RENDER_TIMEOUT_MS", DEFAULT_TIMEOUT_MS)
        try:
            timeout_ms = int(raw)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid render timeout: '{raw}'. Use a whole number of milliseconds.")
        if timeout_ms <= 0:
            raise ValueError(f"Render timeout must be positive, got {timeout_ms}")
        return timeout_ms

    def get_print_endpoint(self) -> Optional[str]:
        return self._get("print_endpoint", "PRINT_SERVER_URL")

    def get_printer_name(self) -> Optional[str]:
        return self._get("printer_name", "PRINTER_NAME")

    def get_print_token(self) -> Optional[str]:
        return self._get("print_token", "PRINT_SERVER_TOKEN")

    def get_debug(self) -> bool:
        if self.cli_config.get("debug"):
            return True
        return _env_flag(self.environ.get("RENDER_DEBUG"))

    def resolve(self) -> PipelineConfig:
        """Freeze the current settings into a PipelineConfig. Raises ValueError on bad values."""
        return PipelineConfig(
            source=self.get_source(),
            output_dir=self.get_output_dir(),
            margins=self.get_margins(),
            timeout_ms=self.get_timeout_ms(),
            print_endpoint=self.get_print_endpoint(),
            printer_name=self.get_printer_name(),
            print_token=self.get_print_token(),
            debug=self.get_debug(),
            show_progress=bool(self.cli_config.get("show_progress", True)),
        )
