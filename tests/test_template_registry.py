from __future__ import annotations

import json
import tempfile
import threading
import unittest
from pathlib import Path

from reports.errors import ReportValidationError, TemplateNotFoundError
from templating.registry import INDEX_FILE_NAME, TemplateRegistry
from templating.storage import LocalTemplateStorage


class TestTemplateRegistry(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name) / "templates"
        self.registry = TemplateRegistry(LocalTemplateStorage(self.root))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _save(self, report_type: str = "sales", original_name: str = "Monthly Sales.docx", **kwargs):
        return self.registry.save(
            content=b"docx-bytes",
            report_type=report_type,
            original_name=original_name,
            **kwargs,
        )

    def test_save_persists_file_and_defaults_name(self) -> None:
        record = self._save()

        self.assertEqual(record.template_name, "Monthly Sales")
        self.assertEqual(record.original_name, "Monthly Sales.docx")
        self.assertEqual(record.size, len(b"docx-bytes"))
        self.assertTrue(record.file_name.startswith("sales_"))
        self.assertTrue(record.file_name.endswith(".docx"))
        self.assertEqual((self.root / record.storage_path).read_bytes(), b"docx-bytes")

    def test_save_generates_unique_ids(self) -> None:
        first = self._save()
        second = self._save()

        self.assertNotEqual(first.id, second.id)
        self.assertNotEqual(first.file_name, second.file_name)

    def test_save_rejects_unsafe_report_type(self) -> None:
        with self.assertRaises(ReportValidationError):
            self._save(report_type="../outside")

        self.assertEqual(self.registry.list_all(), [])

    def test_resolve_first_match_and_by_name(self) -> None:
        first = self._save(template_name="Summary")
        second = self._save(template_name="Detailed")

        self.assertEqual(self.registry.resolve("sales"), first)
        self.assertEqual(self.registry.resolve("sales", "Detailed"), second)

    def test_resolve_messages_distinguish_missing_type_and_missing_name(self) -> None:
        self._save(template_name="Summary")

        with self.assertRaises(TemplateNotFoundError) as no_type:
            self.registry.resolve("inventory")
        with self.assertRaises(TemplateNotFoundError) as no_name:
            self.registry.resolve("sales", "Quarterly")

        self.assertEqual(str(no_type.exception), "No template found for report type: inventory")
        self.assertEqual(
            str(no_name.exception),
            "No template found for report type: sales with name: Quarterly",
        )
        self.assertNotEqual(str(no_type.exception), str(no_name.exception))

    def test_listing(self) -> None:
        self._save(template_name="Summary")
        self._save(report_type="inventory", template_name="Stock")
        self._save(template_name="Detailed")

        self.assertEqual(len(self.registry.list_all()), 3)
        self.assertEqual(self.registry.names_by_report_type("sales"), ["Summary", "Detailed"])
        self.assertEqual(self.registry.report_types(), ["sales", "inventory"])
        self.assertEqual(self.registry.list_by_report_type("customers"), [])

    def test_delete_removes_file_then_metadata(self) -> None:
        record = self._save()
        path = self.root / record.storage_path

        deleted = self.registry.delete(record.id)

        self.assertEqual(deleted, record)
        self.assertFalse(path.exists())
        self.assertEqual(self.registry.list_all(), [])
        with self.assertRaises(TemplateNotFoundError):
            self.registry.get(record.id)

    def test_delete_unknown_id(self) -> None:
        with self.assertRaises(TemplateNotFoundError) as ctx:
            self.registry.delete("missing")

        self.assertEqual(str(ctx.exception), "Template not found: missing")

    def test_read_content(self) -> None:
        record = self._save()

        self.assertEqual(self.registry.read_content(record), b"docx-bytes")

    def test_index_survives_restart(self) -> None:
        kept = self._save(template_name="Summary")
        removed = self._save(template_name="Detailed")
        self.registry.delete(removed.id)

        reloaded = TemplateRegistry(LocalTemplateStorage(self.root))
        self.assertEqual(reloaded.load(), 1)

        self.assertEqual(reloaded.list_all(), [kept])
        self.assertEqual(reloaded.resolve("sales", "Summary").id, kept.id)

    def test_load_drops_entries_whose_file_is_missing(self) -> None:
        kept = self._save(template_name="Summary")
        lost = self._save(template_name="Detailed")
        (self.root / lost.storage_path).unlink()

        reloaded = TemplateRegistry(LocalTemplateStorage(self.root))
        reloaded.load()

        self.assertEqual([record.id for record in reloaded.list_all()], [kept.id])
        payload = json.loads((self.root / INDEX_FILE_NAME).read_text(encoding="utf-8"))
        self.assertEqual([entry["id"] for entry in payload["templates"]], [kept.id])

    def test_load_without_index_is_empty(self) -> None:
        self.assertEqual(self.registry.load(), 0)
        self.assertEqual(self.registry.list_all(), [])

    def test_concurrent_saves_and_deletes_keep_every_write(self) -> None:
        threads_count, saves_per_thread = 8, 20
        start = threading.Barrier(threads_count)
        saved: list[list[str]] = [[] for _ in range(threads_count)]
        failures: list[Exception] = []

        def save_batch(slot: int) -> None:
            try:
                start.wait()
                for n in range(saves_per_thread):
                    record = self._save(template_name=f"t{slot}-{n}")
                    saved[slot].append(record.id)
            except Exception as exc:
                failures.append(exc)

        def delete_batch(ids: list[str]) -> None:
            try:
                start.wait()
                for template_id in ids:
                    self.registry.delete(template_id)
            except Exception as exc:
                failures.append(exc)

        workers = [threading.Thread(target=save_batch, args=(slot,)) for slot in range(threads_count)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
        self.assertEqual(failures, [])

        all_ids = [template_id for ids in saved for template_id in ids]
        self.assertEqual(len(all_ids), threads_count * saves_per_thread)
        self.assertEqual(len(set(all_ids)), len(all_ids))
        self.assertEqual(len(self.registry.list_all()), len(all_ids))

        # Every thread deletes the first half of its own saves.
        workers = [
            threading.Thread(target=delete_batch, args=(ids[: saves_per_thread // 2],)) for ids in saved
        ]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join()
        self.assertEqual(failures, [])

        expected = {template_id for ids in saved for template_id in ids[saves_per_thread // 2 :]}
        self.assertEqual({record.id for record in self.registry.list_all()}, expected)

        reloaded = TemplateRegistry(LocalTemplateStorage(self.root))
        self.assertEqual(reloaded.load(), len(expected))
        self.assertEqual({record.id for record in reloaded.list_all()}, expected)


if __name__ == "__main__":
    unittest.main()
