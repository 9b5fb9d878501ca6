"""Unit tests for favorites/store.py -- FavoriteStore list and toggle.

Covers:
- toggle() flips absent -> present -> absent -> present
- list_for_user() is scoped to the owner and empty for strangers
- an IntegrityError on insert (lost race) is retried, not surfaced
- FavoriteConflictError after every attempt loses
- concurrent toggles on a file-backed DB never leave more than one row and
  end in the same state as running them one after another
"""

import threading

import pytest
from sqlalchemy.exc import IntegrityError

from core.db import create_db_engine
from favorites.store import _TOGGLE_ATTEMPTS, FavoriteConflictError, FavoriteStore

FLAG = "https://flagcdn.com/fr.svg"


@pytest.fixture
def store():
    engine = create_db_engine("sqlite:///:memory:")
    yield FavoriteStore(engine)
    engine.dispose()


def test_toggle_cycle(store):
    assert store.toggle(1, "FR", "France", FLAG) is True
    assert store.count_for_pair(1, "FR") == 1
    assert store.toggle(1, "FR", "France", FLAG) is False
    assert store.count_for_pair(1, "FR") == 0
    assert store.toggle(1, "FR", "France", FLAG) is True
    assert store.count_for_pair(1, "FR") == 1


def test_list_for_user_is_scoped(store):
    store.toggle(1, "FR", "France", FLAG)
    store.toggle(1, "de", "Germany", "https://flagcdn.com/de.svg")
    store.toggle(2, "FR", "France", FLAG)

    mine = store.list_for_user(1)
    assert [f.country_code for f in mine] == ["FR", "DE"]
    assert all(f.user_id == 1 for f in mine)
    assert mine[0].created_at
    assert [f.country_code for f in store.list_for_user(2)] == ["FR"]
    assert store.list_for_user(3) == []


def test_toggle_keeps_display_fields(store):
    store.toggle(7, "JP", "Japan", "https://flagcdn.com/jp.svg")
    (fav,) = store.list_for_user(7)
    assert fav.country_name == "Japan"
    assert fav.flag_url == "https://flagcdn.com/jp.svg"


def test_lost_insert_race_is_retried(store, monkeypatch):
    real_toggle_once = store._toggle_once
    calls = {"n": 0}

    def flaky(user_id, code, name, flag):
        calls["n"] += 1
        if calls["n"] == 1:
            raise IntegrityError("INSERT INTO favorites", {}, Exception("UNIQUE constraint failed"))
        return real_toggle_once(user_id, code, name, flag)

    monkeypatch.setattr(store, "_toggle_once", flaky)
    assert store.toggle(1, "FR", "France", FLAG) is True
    assert calls["n"] == 2
    assert store.count_for_pair(1, "FR") == 1


def test_conflict_error_after_all_attempts(store, monkeypatch):
    def always_conflict(*args):
        raise IntegrityError("INSERT INTO favorites", {}, Exception("UNIQUE constraint failed"))

    monkeypatch.setattr(store, "_toggle_once", always_conflict)
    with pytest.raises(FavoriteConflictError):
        store.toggle(1, "FR", "France", FLAG)
    assert _TOGGLE_ATTEMPTS > 1


@pytest.mark.parametrize("workers", [2, 6])
def test_concurrent_toggles_match_serial_result(tmp_path, workers):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'favorites.db'}")
    store = FavoriteStore(engine)
    barrier = threading.Barrier(workers)
    results: list[bool] = []
    errors: list[BaseException] = []
    lock = threading.Lock()

    def worker():
        barrier.wait()
        try:
            added = store.toggle(1, "FR", "France", FLAG)
        except BaseException as exc:  # collected and asserted below
            with lock:
                errors.append(exc)
            return
        with lock:
            results.append(added)

    threads = [threading.Thread(target=worker) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    try:
        assert errors == []
        rows = store.count_for_pair(1, "FR")
        assert rows <= 1
        # Each toggle flips the state once, so the outcome is the parity of the count.
        assert rows == workers % 2
        assert results.count(True) - results.count(False) == rows
    finally:
        engine.dispose()
