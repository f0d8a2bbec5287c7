"""
Wrap Markdown-derived HTML in a styled, self-contained document shell.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import html
import re
from typing import Callable, Optional

import markdown

from .models import RenderedDocument

MARKDOWN_EXTENSIONS = ["fenced_code", "tables"]

STYLESHEET = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
            margin: 28px;
            color: #222;
            line-height: 1.4;
        }

        pre, code {
            font-family: monospace;
            background: #f6f8fa;
            padding: 4px 6px;
            border-radius: 4px;
        }

        pre code {
            padding: 0;
        }

        h1, h2, h3 {
            color: #0b3d91;
        }

        img {
            max-width: 100%;
        }

        /* Ensure tables fit within page width */
        table {
            max-width: 100%;
            border-collapse: collapse;
        }

        th, td {
            border: 1px solid #d0d7de;
            padding: 4px 8px;
        }
"""


def markdown_to_html(text: str) -> str:
    """Default Markdown parser: Python-Markdown with fenced code and tables."""
    return markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)


def extract_title(content: str, fallback: str = "Document") -> str:
    """Extract the document title from markdown content.

    Preference order:
    1) First ATX H1 heading starting with '# '
    2) Setext H1 style (line followed by '===')
    3) ``fallback``
    """
    # 1) ATX H1: lines that start with '# ' but not '## '
    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith('# '):
            heading_text = stripped[2:].strip().rstrip('#').strip()
            if heading_text:
                return heading_text

    # 2) Setext H1: a line followed by a line of '=' (at least 3)
    lines = content.splitlines()
    for i in range(len(lines) - 1):
        current_line = lines[i].strip()
        underline = lines[i + 1].strip()
        if current_line and re.fullmatch(r"={3,}", underline):
            return current_line

    return fallback


class HtmlComposer:
    """Turns Markdown text into a complete HTML document. Never fails and never sanitizes."""

    def __init__(self, parser: Optional[Callable[[str], str]] = None):
        self._to_html = parser or markdown_to_html

    def compose(self, markdown_text: str, fallback_title: str = "Document") -> RenderedDocument:
        title = extract_title(markdown_text, fallback_title)
        body = self._to_html(markdown_text)
        document = f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    <style>{STYLESHEET}    </style>
</head>
<body>
{body}
</body>
</html>
"""
        return RenderedDocument(html=document, title=title)
