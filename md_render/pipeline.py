"""
Markdown render-and-diagnose pipeline.

Stages run strictly in order:

    INIT -> LOAD_SOURCE -> COMPOSE_HTML -> RENDER -> WRITE_ARTIFACTS -> [SUBMIT_PRINT] -> DONE

Any failure jumps to CAPTURE_ERROR, which writes error.txt, removes any partial PDF,
writes a fallback placeholder, and ends the run as FAILED (exit code 1).
A failed print submission is only a warning: the PDF is already on disk.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import asyncio
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .artifacts import ArtifactWriter, environment_fingerprint
from .composer import HtmlComposer
from .config import PipelineConfig
from .console import ConsoleLog
from .errors import ArtifactWriteFailure, PrintSubmissionFailure
from .models import ArtifactSet, ErrorRecord, Failure, PipelineResult, Stage, Success
from .printing import PrintSubmitter
from .renderer import RenderEngine
from .source import SourceLoader

RENDER_STEPS = 5


class DiagnosticPipeline:
    """Runs one Markdown source through to PDF, leaving evidence behind on every exit path."""

    def __init__(self, config: PipelineConfig, *, loader: Optional[SourceLoader] = None,
                 composer: Optional[HtmlComposer] = None, engine: Optional[RenderEngine] = None,
                 printer: Optional[PrintSubmitter] = None, log: Optional[ConsoleLog] = None):
        """Initialize the pipeline.

        Args:
            config: Resolved settings for this run.
            loader, composer, engine: Stage implementations; defaults are built from ``config``.
            printer: Print stage. When omitted, one is built only if ``config.print_endpoint`` is set.
        """
        self.config = config
        self.log = log or ConsoleLog(config.debug)
        self.artifacts = ArtifactSet.for_directory(config.output_dir)
        self.writer = ArtifactWriter(self.artifacts, self.log)
        self.loader = loader or SourceLoader(self.log)
        self.composer = composer or HtmlComposer()
        self.engine = engine or RenderEngine(
            margins=config.page_margins(),
            timeout_ms=config.timeout_ms,
            log=self.log,
        )
        if printer is None and config.print_endpoint:
            printer = PrintSubmitter(
                config.print_endpoint,
                printer_name=config.printer_name,
                token=config.print_token,
                log=self.log,
            )
        self.printer = printer
        self.stage = Stage.INIT

    def execute(self) -> PipelineResult:
        """Run the pipeline on a fresh event loop."""
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(self.run())
        finally:
            loop.close()

    async def run(self) -> PipelineResult:
        source = self.config.source
        self.log.info(f"Rendering {source.kind} source: {source.describe()}")
        self.log.info(f"Output directory: {self.artifacts.output_dir}")

        total = RENDER_STEPS + (1 if self.printer else 0)
        with tqdm(total=total, desc="  render", unit="step", leave=False,
                  disable=not self.config.show_progress) as pbar:
            try:
                self._enter(Stage.INIT, pbar)
                self.writer.ensure_dir()
                self.writer.discard_stale()
                pbar.update(1)

                self._enter(Stage.LOAD_SOURCE, pbar)
                markdown_text = await self.loader.load(source)
                pbar.update(1)

                self._enter(Stage.COMPOSE_HTML, pbar)
                document = self.composer.compose(markdown_text, fallback_title=source.describe())
                # Saved before rendering so it survives a browser failure
                self.writer.write(self.artifacts.html_path, document.html)
                self.log.info(f"Saved intermediate HTML to {self.artifacts.html_path}")
                pbar.update(1)

                self._enter(Stage.RENDER, pbar)
                await self.engine.render(document.html, self.artifacts, self.writer.write)
                pbar.update(1)

                self._enter(Stage.WRITE_ARTIFACTS, pbar)
                self._verify_pdf()
                pbar.update(1)
            except Exception as e:
                return self._capture_failure(e)

            print_ack = None
            print_warning = None
            if self.printer is not None:
                self._enter(Stage.SUBMIT_PRINT, pbar)
                try:
                    print_ack = await self.printer.submit(self.artifacts.pdf_path)
                except PrintSubmissionFailure as e:
                    print_warning = str(e)
                    self.log.warning(f"Print submission failed: {e}")
                    self._report(self._record(e, Stage.SUBMIT_PRINT))
                pbar.update(1)

        self.stage = Stage.DONE
        self.log.success(f"Done. PDF saved to {self.artifacts.pdf_path}")
        return Success(artifacts=self._produced(), print_ack=print_ack, print_warning=print_warning)

    def _enter(self, stage: Stage, pbar: tqdm) -> None:
        self.stage = stage
        pbar.set_description(f"  render - {stage.value}")
        self.log.debug(f"Stage: {stage.value}")

    def _pdf_usable(self) -> bool:
        pdf_path = self.artifacts.pdf_path
        return pdf_path.is_file() and pdf_path.stat().st_size > 0

    def _verify_pdf(self) -> None:
        if not self._pdf_usable():
            raise ArtifactWriteFailure(f"PDF missing or empty after render: {self.artifacts.pdf_path}")

    def _produced(self) -> List[Path]:
        return [path for path in self.artifacts.outputs() if path.is_file()]

    def _record(self, error: BaseException, stage: Stage) -> ErrorRecord:
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        return ErrorRecord(
            stage=stage,
            message=str(error) or type(error).__name__,
            timestamp=datetime.now(timezone.utc),
            source=self.config.source,
            stack=stack,
        )

    def _report(self, record: ErrorRecord) -> None:
        try:
            self.writer.ensure_dir()
            self.writer.write_error_report(record, environment_fingerprint())
        except ArtifactWriteFailure as e:
            self.log.error(f"Failed to write error file: {e}")

    def _capture_failure(self, error: Exception) -> Failure:
        failed_stage = self.stage
        self.stage = Stage.CAPTURE_ERROR
        self.log.error(f"Fatal error during {failed_stage.value}: {error}")

        record = self._record(error, failed_stage)
        self._report(record)
        try:
            # The PDF is written last, so one left behind by a fatal failure is empty or truncated
            if self.writer.remove(self.artifacts.pdf_path):
                self.log.warning(f"Removed unusable PDF {self.artifacts.pdf_path}")
            self.writer.write_fallback(record.message)
        except ArtifactWriteFailure as e:
            self.log.error(f"Failed to write fallback artifact: {e}")

        self.stage = Stage.FAILED
        return Failure(stage=failed_stage, error=record, artifacts=self._produced())
