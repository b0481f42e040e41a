from __future__ import annotations

import json
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from ingestion.records import RecordStore, load_records


def test_push_assigns_sequential_ids():
    store = RecordStore("Email", ["subject", "body"])
    assert store.push({"subject": "a"}) == 0
    assert store.push_many([{"subject": "b"}, {"subject": "c", "extra": 1}]) == [1, 2]
    assert len(store) == 3
    assert store.get(2).get("extra") == 1
    assert [r.id for r in store.all_records()] == [0, 1, 2]


def test_get_unknown_id():
    store = RecordStore("Email")
    with pytest.raises(KeyError):
        store.get(0)


def test_load_json_array(tmp_path: Path):
    p = tmp_path / "emails.json"
    p.write_text(json.dumps([{"subject": "hi", "spam": False}, {"subject": "win money"}]))
    rows = load_records(p)
    assert rows[1]["subject"] == "win money"


def test_load_json_lines(tmp_path: Path):
    p = tmp_path / "emails.jsonl"
    p.write_text('{"subject": "one"}\n\n{"subject": "two"}\n')
    rows = load_records(str(p))
    assert [r["subject"] for r in rows] == ["one", "two"]


def test_load_rejects_non_objects(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_records(p)


def test_concurrent_pushes_get_unique_ids():
    store = RecordStore("Email")
    old = sys.getswitchinterval()
    sys.setswitchinterval(1e-6)
    try:

        def worker(n: int) -> None:
            for i in range(500):
                store.push({"subject": f"w{n}-{i}"})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
    finally:
        sys.setswitchinterval(old)

    ids = [r.id for r in store.all_records()]
    assert len(ids) == 4000
    assert ids == list(range(4000))


def test_push_many_batches_are_contiguous():
    store = RecordStore("Email")
    batches = [[{"subject": f"b{n}-{i}"} for i in range(50)] for n in range(10)]
    with ThreadPoolExecutor(max_workers=10) as pool:
        results = list(pool.map(store.push_many, batches))
    for ids in results:
        assert ids == list(range(ids[0], ids[0] + 50))
    assert len(store) == 500
