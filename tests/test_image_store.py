import threading

import pytest

from mazegen_lib.errors import ImageNotFound
from mazegen_lib.services.image_store import ImageStore


def test_store_and_fetch():
    store = ImageStore()
    image_id = store.store(b"abc", "a.png")
    assert store.exists(image_id)
    assert store.fetch(image_id) == b"abc"
    assert store.filename(image_id) == "a.png"
    assert len(store) == 1


def test_handles_are_unique_for_identical_data():
    store = ImageStore()
    assert store.store(b"same") != store.store(b"same")
    assert len(store) == 2


def test_unknown_handle():
    store = ImageStore()
    assert not store.exists("missing")
    assert store.filename("missing") is None
    with pytest.raises(ImageNotFound) as exc:
        store.fetch("missing")
    assert exc.value.kind == "ImageNotFound"
    assert "missing" in exc.value.message


def test_empty_data_is_rejected():
    with pytest.raises(ValueError):
        ImageStore().store(b"")


def test_concurrent_inserts():
    store = ImageStore()
    ids = []
    ids_lock = threading.Lock()

    def worker(n):
        for i in range(50):
            image_id = store.store(f"{n}-{i}".encode())
            with ids_lock:
                ids.append(image_id)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(store) == 400
    assert len(set(ids)) == 400
    assert all(store.exists(i) for i in ids)
