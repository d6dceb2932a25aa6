from datetime import date
import json
import threading

from fbd.reducers import add_income, duplicate_previous_income, remove_income
from fbd.schema import IncomeEntry, load_snapshot
from fbd.store import DebouncedSaver, Store, save_snapshot


def test_save_snapshot_round_trips(tmp_path, sample_snapshot):
    path = tmp_path / "nested" / "snapshot.json"
    save_snapshot(path, sample_snapshot)

    assert not (tmp_path / "nested" / "snapshot.json.tmp").exists()
    assert load_snapshot(path).to_dict() == sample_snapshot.to_dict()
    json.loads(path.read_text(encoding="utf-8"))


def test_store_dispatch_replaces_snapshot_and_notifies(sample_snapshot):
    store = Store(sample_snapshot)
    seen = []
    unsubscribe = store.subscribe(seen.append)

    new_id = store.new_id()
    updated = store.dispatch(add_income, "2025-3", IncomeEntry(new_id, 1, 10.0))

    assert store.snapshot is updated
    assert seen == [updated]
    assert sample_snapshot.months["2025-3"].taxed_income[-1].id != new_id

    unsubscribe()
    store.dispatch(remove_income, "2025-3", new_id)
    assert len(seen) == 1


def test_store_ids_are_never_reused(sample_snapshot):
    store = Store(sample_snapshot)
    first = store.new_id()
    store.dispatch(add_income, "2025-3", IncomeEntry(first, 1, 10.0))
    store.dispatch(remove_income, "2025-3", first)

    second = store.new_id()
    assert first == 107
    assert second == 108


def test_store_can_issue_ids_inside_a_dispatch(sample_snapshot):
    store = Store(sample_snapshot)
    updated = store.dispatch(duplicate_previous_income, "2025-2", store.new_id, date(2025, 2, 3))
    assert [e.id for e in updated.months["2025-2"].taxed_income] == [104, 107, 108]


def test_noop_dispatch_does_not_notify(sample_snapshot):
    store = Store(sample_snapshot)
    seen = []
    store.subscribe(seen.append)
    store.dispatch(duplicate_previous_income, "2025-1", store.new_id, date(2025, 1, 3))
    assert seen == []


def test_debounced_saver_coalesces_bursts(sample_snapshot):
    saved = []
    done = threading.Event()

    def _save(snapshot):
        saved.append(snapshot)
        done.set()

    saver = DebouncedSaver(_save, delay=0.05)
    for _ in range(5):
        saver.schedule(sample_snapshot)

    assert done.wait(2.0)
    assert saved == [sample_snapshot]
    assert not saver.pending


def test_debounced_saver_flush_and_cancel(sample_snapshot):
    saved = []
    saver = DebouncedSaver(saved.append, delay=60)

    saver.schedule(sample_snapshot)
    assert saver.pending
    saver.flush()
    assert saved == [sample_snapshot]

    saver.schedule(sample_snapshot)
    saver.cancel()
    saver.flush()
    assert saved == [sample_snapshot]


def test_store_with_saver_writes_latest(tmp_path, sample_snapshot):
    path = tmp_path / "snapshot.json"
    saver = DebouncedSaver(lambda snapshot: save_snapshot(path, snapshot), delay=60)
    store = Store(sample_snapshot)
    store.subscribe(saver.schedule)

    store.dispatch(add_income, "2025-3", IncomeEntry(store.new_id(), 1, 10.0))
    store.dispatch(add_income, "2025-3", IncomeEntry(store.new_id(), 2, 20.0))
    saver.flush()

    reloaded = load_snapshot(path)
    assert [e.id for e in reloaded.months["2025-3"].taxed_income] == [105, 106, 107, 108]
