"""Render Markdown to PDF through headless Chromium with diagnostic artifacts."""

from .config import Config, PipelineConfig
from .errors import (
    ArtifactWriteFailure,
    PipelineError,
    PrintSubmissionFailure,
    RenderFailure,
    SourceUnavailable,
)
from .models import (
    ArtifactSet,
    Failure,
    FileSource,
    InlineSource,
    Success,
    UrlSource,
    parse_source,
)
from .pipeline import DiagnosticPipeline

__all__ = [
    "ArtifactSet",
    "ArtifactWriteFailure",
    "Config",
    "DiagnosticPipeline",
    "Failure",
    "FileSource",
    "InlineSource",
    "PipelineConfig",
    "PipelineError",
    "PrintSubmissionFailure",
    "RenderFailure",
    "SourceUnavailable",
    "Success",
    "UrlSource",
    "parse_source",
]
