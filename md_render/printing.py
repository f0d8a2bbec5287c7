"""
Optional hand-off of the finished PDF to a remote print server.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

from pathlib import Path
from typing import Optional

import httpx

from .console import ConsoleLog
from .errors import PrintSubmissionFailure
from .models import PrintAck


class PrintSubmitter:
    """Posts a PDF as multipart form data to ``<endpoint>/print``."""

    def __init__(self, endpoint: str, printer_name: Optional[str] = None, token: Optional[str] = None,
                 log: Optional[ConsoleLog] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.endpoint = endpoint
        self.printer_name = printer_name
        self.token = token
        self.log = log or ConsoleLog()
        self._transport = transport

    @property
    def print_url(self) -> str:
        return self.endpoint.rstrip('/') + '/print'

    async def submit(self, pdf_path: Path) -> PrintAck:
        try:
            payload = Path(pdf_path).read_bytes()
        except OSError as e:
            raise PrintSubmissionFailure(f"Cannot read PDF for printing {pdf_path}: {e}") from e

        files = {"file": (Path(pdf_path).name, payload, "application/pdf")}
        data = {"printer": self.printer_name} if self.printer_name else None
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}

        self.log.info(f"Submitting {Path(pdf_path).name} to {self.print_url}")
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(self.print_url, files=files, data=data, headers=headers)
        except httpx.HTTPError as e:
            raise PrintSubmissionFailure(f"Print server unreachable at {self.print_url}: {e}") from e

        if not response.is_success:
            raise PrintSubmissionFailure(f"Print server responded {response.status_code}: {response.text}")

        self.log.success(f"Print server response: {response.text}")
        return PrintAck(status_code=response.status_code, body=response.text)
