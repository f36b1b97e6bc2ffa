"""
Storage backend for uploaded template files.
"""

from __future__ import annotations

import hashlib
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

from templating.types import StoredTemplateFile


class TemplateStorageError(RuntimeError):
    """Raised when storing, reading or deleting a template file fails."""


class TemplateStorageBackend(Protocol):
    """
    Abstract storage backend used by the template registry.
    """

    def save(
        self,
        *,
        report_type: str,
        template_id: str,
        file_name: str,
        content: bytes,
    ) -> StoredTemplateFile:
        ...

    def read(self, *, storage_path: str) -> bytes:
        ...

    def resolve(self, *, storage_path: str) -> Path:
        ...

    def delete(self, *, storage_path: str) -> None:
        ...


def _extension_of(file_name: str) -> str:
    safe_name = Path(file_name).name.strip()
    if not safe_name:
        raise TemplateStorageError("Invalid file name.")
    return Path(safe_name).suffix.lower()


class LocalTemplateStorage:
    """
    Local filesystem storage backend.

    Files are stored flat under the root as ``<report_type>_<template_id><ext>``.
    """

    def __init__(self, root_dir: str | Path = "uploads/templates") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def save(
        self,
        *,
        report_type: str,
        template_id: str,
        file_name: str,
        content: bytes,
    ) -> StoredTemplateFile:
        extension = _extension_of(file_name)
        stored_at = datetime.now(timezone.utc)

        stored_name = f"{report_type}_{template_id}{extension}"
        absolute_path = self._root_dir / stored_name
        absolute_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = absolute_path.with_suffix(f"{absolute_path.suffix}.tmp")
        try:
            with tmp_path.open("wb") as handle:
                handle.write(content)
            tmp_path.replace(absolute_path)
        except OSError as exc:
            raise TemplateStorageError("Failed to write template file to storage.") from exc
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

        return StoredTemplateFile(
            file_name=stored_name,
            storage_path=stored_name,
            file_size_bytes=len(content),
            checksum=hashlib.sha256(content).hexdigest(),
            stored_at=stored_at,
        )

    def resolve(self, *, storage_path: str) -> Path:
        target = (self._root_dir / Path(storage_path)).resolve()
        if self._root_dir.resolve() not in target.parents:
            raise TemplateStorageError(f"Storage path {storage_path!r} escapes the template root.")
        return target

    def read(self, *, storage_path: str) -> bytes:
        try:
            return self.resolve(storage_path=storage_path).read_bytes()
        except OSError as exc:
            raise TemplateStorageError("Failed to read template file from storage.") from exc

    def delete(self, *, storage_path: str) -> None:
        target = self.resolve(storage_path=storage_path)
        if not target.exists():
            return
        try:
            target.unlink()
        except OSError as exc:
            raise TemplateStorageError("Failed to delete template file from storage.") from exc
