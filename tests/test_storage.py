import threading
from datetime import datetime

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from portfolio_ingest.core.config import DEFAULT_SEED_ADDRESSES
from portfolio_ingest.core.errors import StorageError
from portfolio_ingest.models import IngestionRecord, Wallet
from portfolio_ingest.services.storage import Storage

from conftest import WALLET_A, WALLET_B, WALLET_C


def test_open_bootstraps_seed_wallets_once(store_path):
    storage = Storage(store_path)
    for _ in range(3):
        assert storage.open(DEFAULT_SEED_ADDRESSES) is storage

    wallets = storage.list_wallets()
    assert [w.address for w in wallets] == DEFAULT_SEED_ADDRESSES
    assert len(wallets) == 8
    storage.close()


def test_reopening_existing_store_does_not_reseed(store_path):
    Storage(store_path).open(DEFAULT_SEED_ADDRESSES).close()

    reopened = Storage(store_path).open(DEFAULT_SEED_ADDRESSES + [WALLET_C])
    try:
        addresses = [w.address for w in reopened.list_wallets()]
    finally:
        reopened.close()

    assert len(addresses) == 8
    assert WALLET_C not in addresses


def test_existing_empty_file_gets_schema_but_no_seed(store_path):
    store_path.parent.mkdir(parents=True)
    store_path.touch()

    storage = Storage(store_path).open([WALLET_A])
    try:
        assert storage.list_wallets() == []
        assert storage.latest_report() == []
    finally:
        storage.close()


def test_duplicate_seed_addresses_are_ignored(store_path):
    storage = Storage(store_path).open([WALLET_A, WALLET_A, WALLET_B])
    try:
        assert [w.address for w in storage.list_wallets()] == [WALLET_A, WALLET_B]
    finally:
        storage.close()


def test_add_wallet_does_not_duplicate_address(storage):
    existing = storage.list_wallets()[0]

    again = storage.add_wallet(existing.address)

    assert again.id == existing.id
    assert len(storage.list_wallets()) == 2


def test_add_wallet_assigns_new_id(storage):
    wallet = storage.add_wallet(WALLET_C)

    assert wallet.address == WALLET_C
    assert wallet.id not in {w.id for w in storage.list_wallets()[:2]}
    assert storage.list_wallets()[-1].address == WALLET_C


def test_append_record_only_grows(storage):
    wallet = storage.list_wallets()[0]
    first = storage.append_record(wallet.id, "one", datetime(2024, 1, 1, 0, 0))
    second = storage.append_record(wallet.id, "two", datetime(2024, 1, 1, 4, 0))

    assert second.id > first.id
    assert storage.count_records(wallet.id) == 2
    assert storage.count_records() == 2
    assert [r.payload for r in storage.list_records(wallet.id)] == ["two", "one"]
    assert [r.payload for r in storage.list_records(wallet.id, limit=1)] == ["two"]


def test_latest_report_has_one_row_per_wallet(storage):
    wallet_a, wallet_b = storage.list_wallets()
    storage.append_record(wallet_a.id, "old", datetime(2024, 1, 1, 0, 0))
    storage.append_record(wallet_a.id, "new", datetime(2024, 1, 1, 8, 0))

    report = storage.latest_report()

    assert [row.address for row in report] == [WALLET_A, WALLET_B]
    assert report[0].created_at == datetime(2024, 1, 1, 8, 0)
    assert report[1].created_at is None


def test_latest_report_is_stable_between_queries(storage):
    wallet_a, wallet_b = storage.list_wallets()
    storage.append_record(wallet_b.id, "x", datetime(2024, 2, 1))

    assert storage.latest_report() == storage.latest_report()


def test_append_record_for_unknown_wallet_fails(storage):
    with pytest.raises(StorageError):
        storage.append_record(9999, "orphan", datetime(2024, 1, 1))
    assert storage.count_records() == 0


def test_operations_on_closed_store_raise(storage):
    wallet = storage.list_wallets()[0]
    storage.close()

    with pytest.raises(StorageError):
        storage.append_record(wallet.id, "late", datetime(2024, 1, 1))
    with pytest.raises(StorageError):
        storage.list_wallets()


def test_open_reports_unusable_path(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file", encoding="utf-8")

    with pytest.raises(StorageError):
        Storage(blocker / "store.db").open([WALLET_A])


def test_concurrent_first_open_bootstraps_once(store_path):
    storage = Storage(store_path)
    barrier = threading.Barrier(6)
    results = []
    errors = []

    def worker():
        barrier.wait()
        try:
            results.append(storage.open(DEFAULT_SEED_ADDRESSES))
        except Exception as exc:
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        assert len(results) == 6
        assert all(result is storage for result in results)
        assert [w.address for w in storage.list_wallets()] == DEFAULT_SEED_ADDRESSES
    finally:
        storage.close()


def test_failed_bootstrap_leaves_no_store_behind(store_path, monkeypatch):
    def failing_seed(self, session_factory, addresses):
        raise OperationalError("INSERT INTO address", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Storage, "_seed", failing_seed)
    with pytest.raises(StorageError):
        Storage(store_path).open([WALLET_A, WALLET_B])
    assert not store_path.exists()

    monkeypatch.undo()
    storage = Storage(store_path).open([WALLET_A, WALLET_B])
    try:
        assert [w.address for w in storage.list_wallets()] == [WALLET_A, WALLET_B]
    finally:
        storage.close()


def test_models_declare_plain_columns_only():
    assert list(inspect(Wallet).relationships) == []
    assert list(inspect(IngestionRecord).relationships) == []
    assert [fk.target_fullname for fk in IngestionRecord.__table__.c.address_id.foreign_keys] == ["address.id"]
