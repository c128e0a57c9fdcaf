"""The incoming directory: where uploaded reports are stored and managed."""

import os
import tempfile
from pathlib import Path
from typing import Optional

from loguru import logger

from lmreport.catalog import tool_name_for
from lmreport.exceptions import DuplicateReportError, InvalidUploadError, ReportNotFoundError

TEXT_CONTENT_TYPE = "text/plain"
REPORT_SUFFIX = ".txt"


class IncomingStore:
    """File operations on the incoming report directory."""

    def __init__(self, directory: Path, max_upload_bytes: int = 5 * 1024 * 1024):
        self.directory = Path(directory)
        self.max_upload_bytes = max_upload_bytes

    def _checked_name(self, file_name: str) -> str:
        name = (file_name or "").strip()
        if not name or name in (".", "..") or Path(name).name != name or "\\" in name:
            raise InvalidUploadError(f"Invalid file name: {file_name!r}")
        return name

    def save_upload(
        self,
        file_name: str,
        content: bytes,
        content_type: Optional[str] = None,
        tool: Optional[str] = None,
    ) -> tuple[Path, str]:
        """Validate and store an uploaded report; returns its path and tool.

        Nothing is written unless every check passes, and the file only
        appears under its final name once fully written.
        """
        name = self._checked_name(file_name)
        if not name.lower().endswith(REPORT_SUFFIX) and content_type != TEXT_CONTENT_TYPE:
            raise InvalidUploadError("Only .txt files are allowed")
        if not content:
            raise InvalidUploadError("Uploaded file is empty")
        if len(content) > self.max_upload_bytes:
            raise InvalidUploadError(
                f"Uploaded file exceeds the {self.max_upload_bytes} byte limit"
            )
        if b"\x00" in content:
            raise InvalidUploadError("Uploaded file is not a text file")

        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / name
        if target.exists():
            raise DuplicateReportError(name)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".upload-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            # link() refuses an existing target, so concurrent uploads cannot overwrite
            os.link(tmp_name, target)
        except FileExistsError:
            raise DuplicateReportError(name) from None
        finally:
            Path(tmp_name).unlink(missing_ok=True)

        tool = (tool or "").strip() or tool_name_for(name)
        logger.info(f"Saved upload {name} ({len(content)} bytes) as tool {tool}")
        return target, tool

    def files_for_tool(self, tool: str) -> list[str]:
        if not self.directory.is_dir():
            raise ReportNotFoundError("Incoming directory not found")
        prefix = tool.lower()
        return sorted(
            p.name for p in self.directory.iterdir()
            if p.is_file() and p.name.lower().startswith(prefix)
        )

    def delete_tool(self, tool: str) -> list[str]:
        """Delete every .txt report attributed to ``tool``; returns the deleted names."""
        if not self.directory.is_dir():
            raise ReportNotFoundError("Incoming directory not found")
        wanted = tool.lower()
        doomed = sorted(
            p for p in self.directory.iterdir()
            if p.is_file() and p.name.endswith(REPORT_SUFFIX) and tool_name_for(p.name) == wanted
        )
        if not doomed:
            raise ReportNotFoundError(f"No license files found for tool: {tool}")

        for path in doomed:
            path.unlink()
            logger.info(f"Deleted {path}")
        return [p.name for p in doomed]

    def delete_file(self, file_name: str) -> None:
        name = self._checked_name(file_name)
        path = self.directory / name
        if not path.is_file():
            raise ReportNotFoundError(f"File not found: {name}")
        path.unlink()
        logger.info(f"Deleted {path}")
