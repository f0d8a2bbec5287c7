"""
Failure types raised by the render pipeline stages.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""


class PipelineError(Exception):
    """Base class for render pipeline failures."""


class SourceUnavailable(PipelineError):
    """The Markdown source could not be read or fetched."""


class RenderFailure(PipelineError):
    """The browser could not load the document or produce an output."""


class ArtifactWriteFailure(PipelineError):
    """An artifact could not be persisted to the output directory."""


class PrintSubmissionFailure(PipelineError):
    """The print server rejected the PDF or could not be reached. Non-fatal."""
