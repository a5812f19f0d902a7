from __future__ import annotations

import threading
from datetime import timedelta

from src.ot_dashboard.ot_dashboard.core.constants import SESSION_EXPIRES_KEY, TOKEN_KEY
from src.ot_dashboard.ot_dashboard.core.enums import SessionPhase
from src.ot_dashboard.ot_dashboard.session.manager import SessionManager
from src.ot_dashboard.ot_dashboard.session.runtime import SessionRuntime
from src.ot_dashboard.ot_dashboard.session.sources import PollingSource, StorageEventSource
from src.ot_dashboard.ot_dashboard.session.store import JsonFileSessionStore, MemorySessionStore
from src.ot_dashboard.ot_dashboard.session.watcher import SessionFileWatcher, changed_keys


def test_json_store_is_shared_between_instances(tmp_path):
    path = tmp_path / "session.json"
    first = JsonFileSessionStore(path)
    second = JsonFileSessionStore(path)

    first.set(TOKEN_KEY, "tok")
    first.set(SESSION_EXPIRES_KEY, "2025-03-03T10:00:00Z")

    assert second.get(TOKEN_KEY) == "tok"
    assert sorted(second.keys()) == [SESSION_EXPIRES_KEY, TOKEN_KEY]

    second.remove(TOKEN_KEY)
    assert first.get(TOKEN_KEY) is None

    second.clear()
    assert first.keys() == []


def test_json_store_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    store = JsonFileSessionStore(path)

    assert store.get(TOKEN_KEY) is None
    store.set(TOKEN_KEY, "tok")
    assert store.get(TOKEN_KEY) == "tok"


def test_json_store_survives_concurrent_writers(tmp_path):
    path = tmp_path / "session.json"
    stores = [JsonFileSessionStore(path), JsonFileSessionStore(path)]
    errors = []

    def hammer(store, name):
        try:
            for i in range(100):
                store.set(name, str(i))
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=hammer, args=(s, f"writer-{n}")) for n, s in enumerate(stores)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    assert stores[0].snapshot() == {"writer-0": "99", "writer-1": "99"}
    assert not list(tmp_path.glob("*.tmp"))


def test_changed_keys():
    assert changed_keys({}, {TOKEN_KEY: "t"}) == [TOKEN_KEY]
    assert changed_keys({TOKEN_KEY: "t", "theme": "dark"}, {TOKEN_KEY: "t", "theme": "light"}) == ["theme"]
    assert changed_keys({TOKEN_KEY: "t"}, {}) == [None]
    assert changed_keys({}, {}) == []


def test_watcher_dispatches_only_watched_keys(tmp_path):
    path = tmp_path / "session.json"
    ours, theirs = JsonFileSessionStore(path), JsonFileSessionStore(path)
    events = StorageEventSource()
    notified = []
    events.on_change(lambda: notified.append(True))
    watcher = SessionFileWatcher(ours, events)

    theirs.set("theme", "dark")
    assert watcher.refresh() == ["theme"]
    assert notified == []

    theirs.set(SESSION_EXPIRES_KEY, "2025-03-03T10:00:00Z")
    assert watcher.refresh() == [SESSION_EXPIRES_KEY]
    assert notified == [True]

    assert watcher.refresh() == []


def test_other_process_write_arrives_as_storage_event(tmp_path, scheduler, fixed_now):
    path = tmp_path / "session.json"
    ours, theirs = JsonFileSessionStore(path), JsonFileSessionStore(path)
    manager = SessionManager(ours, scheduler)
    events = StorageEventSource()
    manager.watch(events)
    scheduled = threading.Event()
    manager.subscribe(lambda phase, _mgr: phase == SessionPhase.SCHEDULED and scheduled.set())
    watcher = SessionFileWatcher(ours, events)
    watcher.start()
    try:
        theirs.set(SESSION_EXPIRES_KEY, (fixed_now + timedelta(minutes=5)).isoformat())

        assert scheduled.wait(timeout=5)
        assert manager.expires_at == fixed_now + timedelta(minutes=5)
    finally:
        watcher.stop()


def test_poll_picks_up_write_from_another_process(scheduler, fixed_now):
    backing = MemorySessionStore()
    manager = SessionManager(backing, scheduler)
    polling = PollingSource(scheduler, interval=2)
    manager.watch(polling)
    polling.start()

    # written directly, bypassing any interception
    backing.set(SESSION_EXPIRES_KEY, (fixed_now + timedelta(minutes=5)).isoformat())
    assert manager.phase == SessionPhase.IDLE

    scheduler.advance(2)
    assert manager.phase == SessionPhase.SCHEDULED

    polling.stop()
    assert all(t.interval is None for t in scheduler.pending)


def test_runtime_runs_inline_until_started():
    runtime = SessionRuntime()
    calls = []

    runtime.submit(lambda: calls.append(threading.current_thread().name))

    assert calls == [threading.current_thread().name]
    assert runtime.call(lambda: 42) == 42


def test_runtime_hops_onto_loop_thread():
    runtime = SessionRuntime(name="timers-test")
    runtime.start()
    try:
        assert runtime.call(lambda: threading.current_thread().name) == "timers-test"

        fired = threading.Event()
        runtime.submit(lambda: runtime.scheduler.call_later(0.01, fired.set))
        assert fired.wait(timeout=2)
    finally:
        runtime.stop()


def test_offload_runs_off_the_loop_thread():
    runtime = SessionRuntime(name="timers-offload")
    runtime.start()
    try:
        ran_on = []
        done = threading.Event()
        release = threading.Event()

        def slow():
            release.wait(timeout=5)
            ran_on.append(threading.current_thread().name)
            done.set()

        runtime.call(lambda: runtime.offload(slow))
        # the loop is still responsive while the offloaded call blocks
        assert runtime.call(lambda: "alive") == "alive"

        release.set()
        assert done.wait(timeout=5)
        assert ran_on[0].startswith("timers-offload-io")
    finally:
        runtime.stop()
