"""
Tests for the JSON file record store.

Covers file initialization, persistence across instances, atomic writes,
data directory selection and serialized concurrent writers.
"""

import json
import threading
import pytest
from invoicevault.core.config import Settings
from invoicevault.models.invoice import InvoicePatch, InvoiceRecord
from invoicevault.services.errors import StorageUnavailable
from invoicevault.services.storage import JsonFileRecordStore, build_record_store
from invoicevault.services.storage.records_json import resolve_data_dir


def test_missing_file_is_created_empty(tmp_path):
    path = tmp_path / "nested" / "invoices.json"

    JsonFileRecordStore(path)

    assert json.loads(path.read_text()) == []


def test_existing_file_is_not_overwritten(tmp_path):
    path = tmp_path / "invoices.json"
    path.write_text(json.dumps([{"id": "keep-me"}]))

    store = JsonFileRecordStore(path)

    assert store.find_by_id("keep-me") == {"id": "keep-me"}


def test_persistence_across_instances(tmp_path, invoice_factory):
    """Test that data written by one store is visible to a new instance"""
    path = tmp_path / "invoices.json"
    JsonFileRecordStore(path).insert_if_absent(InvoiceRecord.model_validate(invoice_factory()))

    reopened = JsonFileRecordStore(path)

    assert reopened.find_by_id("inv-001")["clientName"] == "ACME Corp"


def test_file_holds_array_newest_first(json_store, invoice_factory):
    json_store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory(invoice_id="old")))
    json_store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory(invoice_id="new")))

    on_disk = json.loads(json_store.path.read_text())

    assert [r["id"] for r in on_disk] == ["new", "old"]


def test_writes_leave_no_temp_files(json_store, invoice_factory):
    json_store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory()))
    json_store.update_by_id("inv-001", InvoicePatch.model_validate({"tax": 1}))
    json_store.delete_by_id("inv-001")

    assert [p.name for p in json_store.path.parent.iterdir()] == ["invoices.json"]


def test_delete_of_unknown_id_does_not_rewrite_file(json_store, invoice_factory):
    json_store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory()))
    mtime = json_store.path.stat().st_mtime_ns

    json_store.delete_by_id("missing")

    assert json_store.path.stat().st_mtime_ns == mtime


def test_corrupt_file_raises_storage_unavailable(tmp_path):
    path = tmp_path / "invoices.json"
    path.write_text("{not json")
    store = JsonFileRecordStore(path)

    with pytest.raises(StorageUnavailable):
        store.list_all()


def test_non_array_file_raises_storage_unavailable(tmp_path):
    path = tmp_path / "invoices.json"
    path.write_text('{"id": "x"}')
    store = JsonFileRecordStore(path)

    with pytest.raises(StorageUnavailable):
        store.count()


def test_corrupt_file_is_not_clobbered_by_insert(tmp_path, invoice_factory):
    path = tmp_path / "invoices.json"
    path.write_text("{not json")
    store = JsonFileRecordStore(path)

    with pytest.raises(StorageUnavailable):
        store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory()))

    assert path.read_text() == "{not json"


def test_concurrent_inserts_lose_nothing(json_store, invoice_factory):
    """Test that parallel writers are serialized instead of racing"""
    errors = []

    def insert(n):
        try:
            json_store.insert_if_absent(InvoiceRecord.model_validate(invoice_factory(invoice_id=f"inv-{n}")))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=insert, args=(n,)) for n in range(25)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert json_store.count() == 25


def test_resolve_data_dir_skips_unusable_candidates(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    good = tmp_path / "good"

    assert resolve_data_dir([blocker / "data", good]) == good
    assert good.is_dir()


def test_resolve_data_dir_fails_when_nothing_usable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")

    with pytest.raises(StorageUnavailable):
        resolve_data_dir([blocker / "data"])


def test_build_record_store_json(tmp_path):
    settings = Settings(storage_backend="json", data_dir=str(tmp_path), data_file_name="records.json")

    store = build_record_store(settings)

    assert isinstance(store, JsonFileRecordStore)
    assert store.path == tmp_path / "records.json"
    assert store.describe() == {"backend": "json", "dataDir": str(tmp_path), "fileExists": True}


def test_build_record_store_unknown_backend():
    with pytest.raises(ValueError):
        build_record_store(Settings(storage_backend="sqlite"))
