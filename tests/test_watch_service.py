import json
import logging
import os

import pytest

from services import catalog_service
from services.watch_service import (
    SourceWatcher, file_signature, refresh_and_reload, watched_paths,
)
from tests.factories import make_mapping


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _touch(path, content):
    path.write_text(content, encoding="utf-8")
    st = os.stat(path)
    # Force a distinct mtime even on coarse-grained filesystems
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))


def _watcher(paths, calls, clock, debounce=0.5):
    return SourceWatcher(lambda: [str(p) for p in paths], calls.append,
                         interval=0.1, debounce=debounce, clock=clock)


def test_file_signature(tmp_path):
    path = tmp_path / "a.csv"
    assert file_signature(str(path)) is None
    path.write_text("ID\n", encoding="utf-8")
    assert file_signature(str(path))[1] == 3


def test_first_poll_only_records_a_baseline(tmp_path):
    path = tmp_path / "a.csv"
    path.write_text("x", encoding="utf-8")
    calls, clock = [], FakeClock()
    watcher = _watcher([path], calls, clock)
    assert watcher.poll() == []
    clock.now += 10
    assert watcher.poll() == []
    assert calls == []


def test_burst_of_changes_fires_once_after_quiet_period(tmp_path):
    path = tmp_path / "a.csv"
    path.write_text("x", encoding="utf-8")
    calls, clock = [], FakeClock()
    watcher = _watcher([path], calls, clock)
    watcher.poll()

    for content in ("xy", "xyz", "xyzw"):
        _touch(path, content)
        clock.now += 0.2
        assert watcher.poll() == []

    clock.now += 1.0
    assert watcher.poll() == [str(path)]
    clock.now += 5
    assert watcher.poll() == []
    assert calls == [[str(path)]]


def test_deleted_file_is_forgotten(tmp_path):
    path = tmp_path / "a.csv"
    path.write_text("x", encoding="utf-8")
    paths = [path]
    calls, clock = [], FakeClock()
    watcher = _watcher(paths, calls, clock)
    watcher.poll()

    paths.clear()
    clock.now += 1
    assert watcher.poll() == []

    # Re-adding the file only records a new baseline
    paths.append(path)
    assert watcher.poll() == []
    assert calls == []


def test_callback_failure_is_logged_and_watching_continues(tmp_path, caplog):
    path = tmp_path / "a.csv"
    path.write_text("x", encoding="utf-8")
    clock = FakeClock()

    def broken(paths):
        raise RuntimeError("reload failed")

    watcher = SourceWatcher(lambda: [str(path)], broken, debounce=0.0, clock=clock)
    watcher.poll()
    _touch(path, "changed")
    with caplog.at_level(logging.ERROR, logger="services.watch_service"):
        assert watcher.poll() == [str(path)]
    assert "reload failed" in caplog.text


def test_refresh_and_reload_rebuilds_catalog(write_csv, store_factory):
    path = write_csv([["R1", "10k"]], name="res.csv")
    store = store_factory([make_mapping(path, "res", "Resistors",
                                        columns={"ID": 1, "PartNumber": 2})])
    catalog_service.init_catalog(store)
    assert [p.name for p in catalog_service.get_catalog().parts_for_category("resistors")] == ["10k"]

    write_csv([["R1", "22k"], ["R2", "47k"]], name="res.csv")
    refresh_and_reload([str(path)])

    names = [p.name for p in catalog_service.get_catalog().parts_for_category("resistors")]
    assert names == ["22k", "47k"]
    assert store.path.exists()


# ── config.json edits ─────────────────────────────────────────────────

def _bump(path):
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))


@pytest.fixture
def live(write_csv, store_factory, client_factory):
    """Saved store, Flask client and a watcher wired like start_watcher, on a fake clock."""
    path = write_csv([["R1", "10k", "R_0603"]], name="res.csv")
    store = store_factory([make_mapping(path, "res", "Resistors",
                                        columns={"ID": 1, "PartNumber": 2, "Symbol": 3})])
    store.save()
    client = client_factory(store)
    clock = FakeClock()
    calls = []

    def on_change(paths):
        calls.append(paths)
        refresh_and_reload(paths, watcher.acknowledge)

    watcher = SourceWatcher(lambda: watched_paths(store), on_change, clock=clock)
    watcher.poll()
    return store, client, watcher, clock, calls, path


def test_watched_paths_include_config_file(live):
    store, *_ = live
    assert watched_paths(store)[-1] == str(store.path)


def test_config_edit_rebuilds_catalog_and_prefixes(live):
    store, client, watcher, clock, _calls, _path = live
    data = json.loads(store.path.read_text(encoding="utf-8"))
    data["SheetMappings"][0]["CategoryLabel"] = "Res Renamed"
    data["SymbolPrefix"] = "newsym"
    store.path.write_text(json.dumps(data), encoding="utf-8")
    _bump(store.path)

    clock.now += 1
    assert watcher.poll() == [str(store.path)]

    base = "/kicad-api/v1"
    ids = [c["id"] for c in client.get(f"{base}/categories.json").get_json()]
    assert ids == ["res-renamed"]
    parts = client.get(f"{base}/parts/category/res-renamed.json").get_json()
    assert parts[0]["symbolIdStr"] == "newsym:R_0603"


def test_own_save_after_source_change_does_not_fire_again(live, write_csv):
    store, _client, watcher, clock, calls, path = live
    write_csv([["R1", "22k", "R_0603"]], name="res.csv")
    _bump(path)

    clock.now += 1
    assert watcher.poll() == [str(path)]
    clock.now += 5
    assert watcher.poll() == []
    assert calls == [[str(path)]]
    assert [p.name for p in catalog_service.get_catalog().parts_for_category("resistors")] == ["22k"]


def test_malformed_config_edit_keeps_serving(live):
    store, _client, watcher, clock, _calls, _path = live
    store.path.write_text("{ half written", encoding="utf-8")
    _bump(store.path)

    clock.now += 1
    watcher.poll()
    assert [c.id for c in catalog_service.get_catalog().categories()] == ["resistors"]
    assert store.snapshot().sheet_mappings[0].category_label == "Resistors"
