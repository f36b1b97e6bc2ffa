"""
templating/registry.py

Template registry: the catalog of uploaded report templates.

The registry is the sole owner of template files.  It writes them through a
storage backend on ``save`` and unlinks them on ``delete``; nothing else
moves or removes them.

Concurrency
-----------
Records live in an immutable tuple that is swapped on every write.  Writers
serialize on one lock; readers take the current tuple without locking and so
always see a consistent snapshot.

Durability
----------
A JSON index beside the stored files is rewritten (atomically) on every save
and delete and read back by :meth:`TemplateRegistry.load` at startup.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from collections.abc import Iterable
from pathlib import Path

from reports.errors import ReportError, ReportValidationError, TemplateNotFoundError
from reports.registry import is_valid_report_type_name
from templating.storage import LocalTemplateStorage, TemplateStorageBackend, TemplateStorageError
from templating.types import TemplateRecord

logger = logging.getLogger(__name__)

INDEX_FILE_NAME = "index.json"


class TemplateRegistryError(ReportError):
    """Raised when a template cannot be stored or the index cannot be written."""


class TemplateRegistry:
    """
    In-memory template catalog backed by files on disk.
    """

    def __init__(
        self,
        storage: TemplateStorageBackend | None = None,
        *,
        index_path: str | Path | None = None,
    ) -> None:
        self._storage = storage or LocalTemplateStorage()
        if index_path is None and isinstance(self._storage, LocalTemplateStorage):
            index_path = self._storage.root_dir / INDEX_FILE_NAME
        self._index_path = Path(index_path) if index_path is not None else None
        self._records: tuple[TemplateRecord, ...] = ()
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> int:
        """
        Populate the registry from the persisted index.

        Entries whose file no longer exists are dropped.  Returns the number
        of templates loaded.
        """
        if self._index_path is None or not self._index_path.exists():
            return 0

        try:
            payload = json.loads(self._index_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise TemplateRegistryError(f"Unable to read template index {self._index_path}.") from exc

        loaded: list[TemplateRecord] = []
        for entry in payload.get("templates", []):
            try:
                record = TemplateRecord.from_dict(entry)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed template index entry: %r", entry)
                continue
            if not self._storage.resolve(storage_path=record.storage_path).exists():
                logger.warning(
                    "Dropping template %s (%s): file %s is missing",
                    record.id,
                    record.template_name,
                    record.storage_path,
                )
                continue
            loaded.append(record)

        with self._write_lock:
            self._records = tuple(loaded)
            self._write_index(self._records)

        self._warn_about_orphans()
        logger.info("Loaded %d template(s) from %s", len(loaded), self._index_path)
        return len(loaded)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(
        self,
        *,
        content: bytes,
        report_type: str,
        original_name: str,
        template_name: str | None = None,
    ) -> TemplateRecord:
        """
        Store *content* and register it for *report_type*.

        The display name defaults to *original_name* without its extension.
        """
        if not is_valid_report_type_name(report_type):
            raise ReportValidationError(["Invalid report type format"], report_type=report_type)

        template_id = uuid.uuid4().hex
        try:
            stored = self._storage.save(
                report_type=report_type,
                template_id=template_id,
                file_name=original_name,
                content=content,
            )
        except TemplateStorageError as exc:
            raise TemplateRegistryError(str(exc), report_type=report_type) from exc

        record = TemplateRecord(
            id=template_id,
            report_type=report_type,
            template_name=(template_name or "").strip() or Path(original_name).stem,
            file_name=stored.file_name,
            storage_path=stored.storage_path,
            original_name=original_name,
            size=stored.file_size_bytes,
            upload_date=stored.stored_at,
            checksum=stored.checksum,
        )

        try:
            with self._write_lock:
                updated = (*self._records, record)
                self._write_index(updated)
                self._records = updated
        except Exception:
            self._delete_file_quietly(record.storage_path)
            raise

        logger.info(
            "Template saved: %s for report type %s with name %r",
            record.file_name,
            record.report_type,
            record.template_name,
        )
        return record

    def delete(self, template_id: str) -> TemplateRecord:
        """
        Remove the template file, then its metadata.

        Raises
        ------
        TemplateNotFoundError: When *template_id* is not registered.
        """
        with self._write_lock:
            record = next((r for r in self._records if r.id == template_id), None)
            if record is None:
                raise TemplateNotFoundError(f"Template not found: {template_id}")

            try:
                self._storage.delete(storage_path=record.storage_path)
            except TemplateStorageError as exc:
                raise TemplateRegistryError(str(exc), report_type=record.report_type) from exc

            updated = tuple(r for r in self._records if r.id != template_id)
            self._records = updated
            self._write_index(updated)

        logger.info("Template deleted: %s", record.file_name)
        return record

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def resolve(self, report_type: str, template_name: str | None = None) -> TemplateRecord:
        """
        Return the first template registered for *report_type*, optionally
        narrowed to *template_name*.
        """
        candidates = self.list_by_report_type(report_type)
        if template_name:
            for record in candidates:
                if record.template_name == template_name:
                    return record
            raise TemplateNotFoundError(
                f"No template found for report type: {report_type} with name: {template_name}",
                report_type=report_type,
            )
        if candidates:
            return candidates[0]
        raise TemplateNotFoundError(
            f"No template found for report type: {report_type}",
            report_type=report_type,
        )

    def get(self, template_id: str) -> TemplateRecord:
        for record in self._records:
            if record.id == template_id:
                return record
        raise TemplateNotFoundError(f"Template not found: {template_id}")

    def list_all(self) -> list[TemplateRecord]:
        return list(self._records)

    def list_by_report_type(self, report_type: str) -> list[TemplateRecord]:
        return [record for record in self._records if record.report_type == report_type]

    def names_by_report_type(self, report_type: str) -> list[str]:
        return [record.template_name for record in self.list_by_report_type(report_type)]

    def report_types(self) -> list[str]:
        """Distinct report types with at least one template, in upload order."""
        return list(dict.fromkeys(record.report_type for record in self._records))

    def read_content(self, record: TemplateRecord) -> bytes:
        """Raw bytes of a registered template file."""
        try:
            return self._storage.read(storage_path=record.storage_path)
        except TemplateStorageError as exc:
            raise TemplateRegistryError(str(exc), report_type=record.report_type) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _write_index(self, records: Iterable[TemplateRecord]) -> None:
        if self._index_path is None:
            return
        payload = {"templates": [record.to_dict() for record in records]}
        tmp_path = self._index_path.with_suffix(".json.tmp")
        try:
            self._index_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(self._index_path)
        except OSError as exc:
            raise TemplateRegistryError("Failed to write template index.") from exc

    def _warn_about_orphans(self) -> None:
        if self._index_path is None:
            return
        known = {Path(record.storage_path).name for record in self._records}
        for path in self._index_path.parent.iterdir():
            if not path.is_file() or path.name == INDEX_FILE_NAME or path.suffix == ".tmp":
                continue
            if path.name not in known:
                logger.warning("Template file %s has no index entry; leaving it untouched", path.name)

    def _delete_file_quietly(self, storage_path: str) -> None:
        try:
            self._storage.delete(storage_path=storage_path)
        except TemplateStorageError:
            logger.warning("Could not remove template file %s after failed save", storage_path)
