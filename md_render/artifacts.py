"""
Persist pipeline outputs and diagnostics under one output directory.

MIT License - Copyright (c) 2025 Markdown Render Diagnostics
"""

import json
import os
import platform
import sys
from importlib import metadata
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .console import ConsoleLog
from .errors import ArtifactWriteFailure
from .models import ArtifactSet, ErrorRecord

FINGERPRINT_PACKAGES = ("playwright", "markdown", "httpx", "colorama", "tqdm")


def environment_fingerprint() -> Dict[str, Any]:
    """Describe the runtime so a failed run can be diagnosed from error.txt alone."""
    packages = {}
    for name in FINGERPRINT_PACKAGES:
        try:
            packages[name] = metadata.version(name)
        except metadata.PackageNotFoundError:
            packages[name] = "not installed"
    return {
        "python": platform.python_version(),
        "implementation": platform.python_implementation(),
        "platform": platform.platform(),
        "executable": sys.executable,
        "cwd": os.getcwd(),
        "packages": packages,
    }


class ArtifactWriter:
    """Writes artifacts to the paths of an ArtifactSet, overwriting previous files."""

    def __init__(self, artifacts: ArtifactSet, log: Optional[ConsoleLog] = None):
        self.artifacts = artifacts
        self.log = log or ConsoleLog()

    def ensure_dir(self) -> Path:
        """Create the output directory (and parents) if it is missing."""
        try:
            self.artifacts.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArtifactWriteFailure(f"Cannot create output directory {self.artifacts.output_dir}: {e}") from e
        return self.artifacts.output_dir

    def discard_stale(self) -> None:
        """Remove artifacts a previous run left in the output directory."""
        for path in self.artifacts.all_paths():
            if self.remove(path):
                self.log.debug(f"Removed stale artifact {path}")

    def remove(self, path: Path) -> bool:
        """Delete ``path`` if present; returns whether a file was removed."""
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise ArtifactWriteFailure(f"Cannot remove artifact {path}: {e}") from e
        return True

    def write(self, path: Path, data: Union[bytes, str]) -> Path:
        """Write bytes, or text as UTF-8, to ``path``."""
        try:
            if isinstance(data, bytes):
                path.write_bytes(data)
            else:
                with open(path, 'w', encoding='utf-8') as f:
                    f.write(data)
        except OSError as e:
            raise ArtifactWriteFailure(f"Cannot write {path}: {e}") from e
        self.log.debug(f"Wrote {path}")
        return path

    def write_fallback(self, reason: str) -> Path:
        """Leave a placeholder proving the run happened when no PDF was produced."""
        text = "\n".join([
            "Render failed. See error.txt for details.",
            "",
            f"Reason: {reason}",
            "",
        ])
        return self.write(self.artifacts.fallback_path, text)

    def write_error_report(self, record: ErrorRecord, environment: Optional[Dict[str, Any]] = None) -> Path:
        """Write error.txt: time, source, stage, message, stack and runtime environment."""
        if environment is None:
            environment = environment_fingerprint()
        lines = [
            f"TIME: {record.timestamp.isoformat()}",
            f"SOURCE ({record.source.kind}): {record.source.describe()}",
            f"STAGE: {record.stage.value}",
            "",
            "ERROR:",
            record.message,
            "",
            "ERROR STACK:",
            record.stack or record.message,
            "",
            "ENVIRONMENT:",
            json.dumps(environment, indent=2, sort_keys=True),
            "",
        ]
        path = self.write(self.artifacts.error_path, "\n".join(lines))
        self.log.error(f"Wrote error details to {path}")
        return path
