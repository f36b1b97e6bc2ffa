"""
Check that the report service can run in this environment.

Creates the template and temp directories if missing, then probes the
database and the document converter.  Prints a JSON report and exits 0 only
when every check passes.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.config import get_report_settings
from conversion.libreoffice import LibreOfficeConverter
from db.row_source import RowSource


def _ensure_directory(path: str) -> dict[str, object]:
    target = Path(path)
    existed = target.is_dir()
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return {"path": str(target), "ok": False, "error": str(exc)}
    return {"path": str(target), "ok": True, "created": not existed}


def main() -> int:
    parser = argparse.ArgumentParser(description="Probe the database and document converter.")
    parser.add_argument(
        "--skip-converter",
        action="store_true",
        help="Do not run the converter probe (it starts LibreOffice once).",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    settings = get_report_settings()

    checks: dict[str, object] = {
        "template_directory": _ensure_directory(settings.template_upload_path),
        "temp_directory": _ensure_directory(settings.temp_files_path),
        "database": {"ok": RowSource().ping()},
    }
    if not args.skip_converter:
        converter = LibreOfficeConverter(
            settings.libreoffice_binary,
            timeout_seconds=settings.converter_timeout_seconds,
            temp_root=settings.temp_files_path,
        )
        checks["converter"] = {"binary": settings.libreoffice_binary, "ok": converter.is_available()}

    print(json.dumps(checks, indent=2))
    return 0 if all(check["ok"] for check in checks.values()) else 1


if __name__ == "__main__":
    raise SystemExit(main())
