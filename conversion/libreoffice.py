"""
conversion/libreoffice.py

Document-to-PDF conversion through a headless LibreOffice process.

Each conversion runs in its own work directory under the temp root:

    <temp_root>/report-<random>/
        <uuid>.docx     input written from the in-memory document
        <uuid>.pdf      output produced by LibreOffice
        profile/        throwaway LibreOffice user profile

The work directory is removed on every exit path, including timeouts and
failed launches.  A separate profile per call lets concurrent conversions
run without fighting over LibreOffice's profile lock.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
import time
import uuid
from pathlib import Path

from reports.errors import ConversionError

logger = logging.getLogger(__name__)

WORK_DIR_PREFIX = "report-"
_PROBE_PAYLOAD = b"availability probe"
_STDERR_TAIL_CHARS = 500


class LibreOfficeConverter:
    """
    Converts documents to PDF with ``soffice --headless --convert-to pdf``.
    """

    def __init__(
        self,
        binary: str = "soffice",
        *,
        timeout_seconds: float = 120.0,
        temp_root: str | Path = "temp",
    ) -> None:
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        self.temp_root = Path(temp_root)

    def convert(self, document: bytes, *, source_suffix: str = ".docx") -> bytes:
        """
        Convert *document* to PDF and return the PDF bytes.

        Raises
        ------
        ConversionError: When the binary is missing, the process fails or
            times out, or no PDF is produced.  The underlying error is
            chained as ``__cause__``.
        """
        executable = shutil.which(self.binary)
        if executable is None:
            raise ConversionError(f"Document converter '{self.binary}' is not installed or not on PATH.")

        self.temp_root.mkdir(parents=True, exist_ok=True)
        started = time.perf_counter()
        with tempfile.TemporaryDirectory(
            prefix=WORK_DIR_PREFIX,
            dir=self.temp_root,
            ignore_cleanup_errors=True,
        ) as work_dir_name:
            work_dir = Path(work_dir_name)
            stem = uuid.uuid4().hex
            source_path = work_dir / f"{stem}{source_suffix}"
            output_path = work_dir / f"{stem}.pdf"

            try:
                source_path.write_bytes(document)
            except OSError as exc:
                raise ConversionError("Unable to write document for conversion.") from exc

            command = [
                executable,
                f"-env:UserInstallation={(work_dir / 'profile').resolve().as_uri()}",
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                str(work_dir),
                str(source_path),
            ]
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    timeout=self.timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise ConversionError(
                    f"Document conversion timed out after {self.timeout_seconds:g} seconds."
                ) from exc
            except OSError as exc:
                raise ConversionError(f"Unable to start document converter '{self.binary}'.") from exc

            if result.returncode != 0:
                stderr = result.stderr.decode("utf-8", errors="replace").strip()
                logger.warning("Converter exited with %d: %s", result.returncode, stderr[-_STDERR_TAIL_CHARS:])
                raise ConversionError(
                    f"Document converter exited with status {result.returncode}."
                ) from subprocess.CalledProcessError(result.returncode, command, result.stdout, result.stderr)

            try:
                pdf = output_path.read_bytes()
            except OSError as exc:
                raise ConversionError("Document converter did not produce a PDF.") from exc

        logger.debug(
            "Converted %d-byte document to %d-byte PDF in %.2fs",
            len(document),
            len(pdf),
            time.perf_counter() - started,
        )
        return pdf

    def is_available(self) -> bool:
        """Run a trivial conversion; True when it yields a PDF."""
        try:
            self.convert(_PROBE_PAYLOAD, source_suffix=".txt")
        except ConversionError as exc:
            logger.warning("Document converter unavailable: %s", exc)
            return False
        return True


def sweep_stale_work_dirs(temp_root: str | Path, *, max_age_seconds: float, now: float | None = None) -> int:
    """
    Remove conversion work directories older than *max_age_seconds*.

    Only directories carrying the converter's prefix are touched.  Returns
    the number removed.
    """
    root = Path(temp_root)
    if not root.is_dir():
        return 0

    cutoff = (time.time() if now is None else now) - max_age_seconds
    removed = 0
    for entry in root.iterdir():
        if not entry.is_dir() or not entry.name.startswith(WORK_DIR_PREFIX):
            continue
        try:
            if entry.stat().st_mtime >= cutoff:
                continue
            shutil.rmtree(entry)
        except OSError:
            logger.warning("Could not remove stale conversion directory %s", entry, exc_info=True)
            continue
        removed += 1
    return removed
