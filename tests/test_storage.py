import asyncio
import re

import pytest
from botocore.exceptions import ClientError

from catalog.exceptions import AssetCleanupError, AssetStorageError
from catalog.utils.storage import (
    LocalImageStore,
    R2ImageStore,
    object_key_from_url,
    photo_path,
    unique_filename,
)

PUBLIC = "https://media.example.com"


# ==================== Reference helpers ====================

def test_unique_filename_is_timestamp_prefixed():
    name = unique_filename("poster.png", now=1700000000.123)
    assert re.fullmatch(r"1700000000123-[0-9a-f]{8}-poster\.png", name)


def test_unique_filename_never_repeats():
    names = {unique_filename("same.png", now=1.0) for _ in range(50)}
    assert len(names) == 50


def test_unique_filename_strips_directories_and_odd_characters():
    name = unique_filename("../../etc/mi foto (1).png")
    assert "/" not in name
    assert name.endswith("-mi_foto__1_.png")


def test_unique_filename_without_name():
    assert unique_filename(None).endswith("-image")


def test_photo_path_resolves_bare_filename(tmp_path):
    assert photo_path(tmp_path, "1-abc-x.png") == tmp_path / "1-abc-x.png"


@pytest.mark.parametrize("reference", ["", ".", "..", "../x.png", "sub/x.png", "/etc/passwd", "a\\b.png"])
def test_photo_path_rejects_path_components(tmp_path, reference):
    with pytest.raises(ValueError):
        photo_path(tmp_path, reference)


def test_object_key_from_url():
    url = f"{PUBLIC}/images/1700000000000-ab12cd34-poster.png"
    assert object_key_from_url(url, PUBLIC) == "images/1700000000000-ab12cd34-poster.png"


def test_object_key_from_url_ignores_query_and_trailing_slash():
    url = f"{PUBLIC}/images/a.png?v=2"
    assert object_key_from_url(url, PUBLIC + "/") == "images/a.png"


@pytest.mark.parametrize(
    "url",
    ["", "https://elsewhere.example.com/images/a.png", f"{PUBLIC}/", f"{PUBLIC}images/a.png"],
)
def test_object_key_from_url_rejects_foreign_urls(url):
    with pytest.raises(ValueError):
        object_key_from_url(url, PUBLIC)


# ==================== Local store ====================

def test_local_save_and_delete(tmp_path):
    store = LocalImageStore(tmp_path)
    reference = asyncio.run(store.save(b"data", "poster.png", "image/png"))

    assert (tmp_path / reference).read_bytes() == b"data"
    assert store.public_url(reference) == f"/photos/{reference}"

    assert asyncio.run(store.delete(reference)) is True
    assert not (tmp_path / reference).exists()


def test_local_delete_is_idempotent(tmp_path):
    store = LocalImageStore(tmp_path)
    reference = asyncio.run(store.save(b"data", "poster.png", "image/png"))
    asyncio.run(store.delete(reference))
    assert asyncio.run(store.delete(reference)) is False


def test_local_delete_rejects_traversal(tmp_path):
    store = LocalImageStore(tmp_path / "photos")
    outside = tmp_path / "keep.txt"
    outside.write_text("x")
    with pytest.raises(AssetCleanupError):
        asyncio.run(store.delete("../keep.txt"))
    assert outside.exists()


def test_local_save_never_overwrites(tmp_path, monkeypatch):
    store = LocalImageStore(tmp_path)
    (tmp_path / "fixed-name.png").write_bytes(b"original")
    monkeypatch.setattr("catalog.utils.storage.unique_filename", lambda *a, **k: "fixed-name.png")

    with pytest.raises(AssetStorageError):
        asyncio.run(store.save(b"new", "x.png", "image/png"))
    assert (tmp_path / "fixed-name.png").read_bytes() == b"original"


def test_local_save_failure_leaves_nothing(tmp_path):
    store = LocalImageStore(tmp_path / "photos")
    (tmp_path / "photos").rmdir()
    with pytest.raises(AssetStorageError):
        asyncio.run(store.save(b"data", "x.png", "image/png"))


# ==================== R2 store ====================

class FakeS3:
    def __init__(self, fail=False):
        self.objects = {}
        self.fail = fail
        self.put_calls = []

    def put_object(self, Bucket, Key, Body, IfNoneMatch=None, **kwargs):
        self.put_calls.append({"Bucket": Bucket, "Key": Key, "IfNoneMatch": IfNoneMatch, **kwargs})
        if self.fail or (IfNoneMatch == "*" and Key in self.objects):
            raise ClientError({"Error": {"Code": "PreconditionFailed", "Message": "nope"}}, "PutObject")
        self.objects[Key] = Body

    def delete_object(self, Bucket, Key):
        if self.fail:
            raise ClientError({"Error": {"Code": "InternalError", "Message": "nope"}}, "DeleteObject")
        self.objects.pop(Key, None)


@pytest.fixture
def r2():
    client = FakeS3()
    store = R2ImageStore(client, "bucket", PUBLIC + "/")
    yield store, client
    store.close()


def test_r2_save_returns_public_url(r2):
    store, client = r2
    url = asyncio.run(store.save(b"data", "poster.png", "image/png"))

    assert url.startswith(f"{PUBLIC}/images/")
    key = object_key_from_url(url, PUBLIC)
    assert client.objects[key] == b"data"
    assert client.put_calls[0]["IfNoneMatch"] == "*"
    assert client.put_calls[0]["ContentType"] == "image/png"
    assert store.public_url(url) == url


def test_r2_delete_derives_key_and_is_idempotent(r2):
    store, client = r2
    url = asyncio.run(store.save(b"data", "poster.png", "image/png"))
    assert asyncio.run(store.delete(url)) is True
    assert client.objects == {}
    assert asyncio.run(store.delete(url)) is True


def test_r2_delete_rejects_foreign_url(r2):
    store, _ = r2
    with pytest.raises(AssetCleanupError):
        asyncio.run(store.delete("https://elsewhere.example.com/images/a.png"))


def test_r2_failures_map_to_asset_errors():
    store = R2ImageStore(FakeS3(fail=True), "bucket", PUBLIC)
    try:
        with pytest.raises(AssetStorageError):
            asyncio.run(store.save(b"data", "a.png", "image/png"))
        with pytest.raises(AssetCleanupError):
            asyncio.run(store.delete(f"{PUBLIC}/images/a.png"))
    finally:
        store.close()
