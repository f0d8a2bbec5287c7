"""
Command-line entry point: resolve configuration once, run the pipeline, exit 0 or 1.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import argparse
import sys
from typing import List, Optional

from .config import Config
from .console import ConsoleLog
from .dependencies import check_dependencies
from .pipeline import DiagnosticPipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a Markdown document to PDF with headless Chromium, leaving HTML, screenshot and error diagnostics in the output directory")
    parser.add_argument("source", nargs="?", default=None, help="Markdown file path or http(s) URL (default: $MD_URL, $MD_PATH or README.md)")
    parser.add_argument("--content", default=None, help="Inline Markdown text to render instead of a file or URL")
    parser.add_argument("--output-dir", default=None, help="Output directory for rendered.html/png/pdf and error.txt (default: $OUTPUT_DIR or out)")
    parser.add_argument("--margins", default=None, help="PDF page margins in CSS format (default: '12mm'). Range: 0-3 inches. Use 1, 2, or 4 values. Units: in, cm, mm, pt, px")
    parser.add_argument("--timeout", type=int, default=None, dest="timeout_ms", help="Maximum page load wait in milliseconds (default: 60000)")
    parser.add_argument("--print-url", default=None, dest="print_endpoint", help="Print server base URL; the PDF is POSTed to <url>/print (default: $PRINT_SERVER_URL)")
    parser.add_argument("--printer", default=None, dest="printer_name", help="Printer name sent with the print job (default: $PRINTER_NAME)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging for detailed output")
    parser.add_argument("--no-progress", action="store_true", help="Hide the step progress bar")
    parser.add_argument("--skip-checks", action="store_true", help="Skip the Chromium installation check")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    cli_config = {
        "source": args.source,
        "content": args.content,
        "output_dir": args.output_dir,
        "margins": args.margins,
        "timeout_ms": args.timeout_ms,
        "print_endpoint": args.print_endpoint,
        "printer_name": args.printer_name,
        "debug": args.debug or None,
        "show_progress": False if args.no_progress else None,
    }
    try:
        config = Config(cli_config).resolve()
    except ValueError as e:
        parser.error(str(e))

    log = ConsoleLog(config.debug)
    if not args.skip_checks:
        check_dependencies(log)

    result = DiagnosticPipeline(config, log=log).execute()
    if result.ok and result.print_warning:
        log.warning(f"PDF produced, but printing failed: {result.print_warning}")
    sys.exit(result.exit_code)


if __name__ == "__main__":
    main()
