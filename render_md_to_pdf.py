#!/usr/bin/env python3
"""
Render a Markdown document to PDF with headless Chromium (Playwright).

Usage:
    python render_md_to_pdf.py [source] [--output-dir out] [--print-url URL]

Without arguments the source comes from $MD_URL or $MD_PATH (default README.md).
Exit code 0 means rendered.pdf exists; 1 means the run failed and out/error.txt
explains why.
"""

from md_render.cli import main


if __name__ == "__main__":
    main()
