"""
Value types passed between the render pipeline stages.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

HTML_NAME = "rendered.html"
PNG_NAME = "rendered.png"
PDF_NAME = "rendered.pdf"
ERROR_NAME = "error.txt"
FALLBACK_NAME = "README_render_failed.txt"


class Stage(enum.Enum):
    INIT = "init"
    LOAD_SOURCE = "load_source"
    COMPOSE_HTML = "compose_html"
    RENDER = "render"
    WRITE_ARTIFACTS = "write_artifacts"
    SUBMIT_PRINT = "submit_print"
    CAPTURE_ERROR = "capture_error"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FileSource:
    """Markdown read from a path, resolved against the working directory."""

    path: str
    kind: str = field(default="file", init=False)

    def describe(self) -> str:
        return self.path


@dataclass(frozen=True)
class UrlSource:
    """Markdown fetched with a single HTTP GET."""

    url: str
    kind: str = field(default="url", init=False)

    def describe(self) -> str:
        return self.url


@dataclass(frozen=True)
class InlineSource:
    """Markdown passed directly as text."""

    text: str
    label: str = "<inline>"
    kind: str = field(default="inline", init=False)

    def describe(self) -> str:
        return self.label


SourceDescriptor = Union[FileSource, UrlSource, InlineSource]


def parse_source(value: str) -> SourceDescriptor:
    """Classify a source string: http(s) URLs are fetched, anything else is a file path."""
    stripped = value.strip()
    if stripped.lower().startswith(("http://", "https://")):
        return UrlSource(stripped)
    return FileSource(stripped)


@dataclass(frozen=True)
class RenderedDocument:
    html: str
    title: str


@dataclass(frozen=True)
class ArtifactSet:
    """Fixed artifact locations under one output directory."""

    output_dir: Path
    html_path: Path
    png_path: Path
    pdf_path: Path
    error_path: Path
    fallback_path: Path

    @classmethod
    def for_directory(cls, output_dir: Union[str, Path]) -> "ArtifactSet":
        root = Path(output_dir)
        if not root.is_absolute():
            root = Path.cwd() / root
        root = root.resolve()
        return cls(
            output_dir=root,
            html_path=root / HTML_NAME,
            png_path=root / PNG_NAME,
            pdf_path=root / PDF_NAME,
            error_path=root / ERROR_NAME,
            fallback_path=root / FALLBACK_NAME,
        )

    def outputs(self) -> List[Path]:
        """Primary outputs in the order they are produced."""
        return [self.html_path, self.png_path, self.pdf_path]

    def all_paths(self) -> List[Path]:
        return self.outputs() + [self.error_path, self.fallback_path]


@dataclass(frozen=True)
class ErrorRecord:
    stage: Stage
    message: str
    timestamp: datetime
    source: SourceDescriptor
    stack: Optional[str] = None


@dataclass(frozen=True)
class PrintAck:
    """Print server reply to an accepted submission."""

    status_code: int
    body: str


@dataclass(frozen=True)
class Success:
    artifacts: List[Path]
    print_ack: Optional[PrintAck] = None
    print_warning: Optional[str] = None

    ok = True
    exit_code = 0


@dataclass(frozen=True)
class Failure:
    stage: Stage
    error: ErrorRecord
    artifacts: List[Path] = field(default_factory=list)

    ok = False
    exit_code = 1


PipelineResult = Union[Success, Failure]
