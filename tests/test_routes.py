import logging
import os
import sys

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.domain.resource import ResourceReadError
from app.domain.store import Store
from app.main import create_app


def test_health(client, expected):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True, "resources": len(expected)}
    assert r.headers["X-Request-ID"]


def test_request_id_is_propagated(client):
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"


def test_every_fixture_round_trips_byte_exact(client, expected):
    for path, data in expected.items():
        r = client.get(f"/{path}")
        assert r.status_code == 200, path
        assert r.content == data, path
        assert r.headers["content-length"] == str(len(data))


def test_utf8_text_file(client, expected):
    r = client.get("/foo/bar/text.txt")
    assert r.status_code == 200
    assert r.headers["content-type"] == "text/plain; charset=utf-8"
    assert r.headers["X-Resource-Classification"] == "text"
    assert r.content.decode("utf-8") == expected["foo/bar/text.txt"].decode("utf-8")


def test_binary_jpeg_file(client, expected):
    r = client.get("/foo/bar/rm.jpg")
    assert r.status_code == 200
    assert r.headers["content-type"] == "image/jpeg"
    assert r.headers["X-Resource-Classification"] == "binary"
    assert r.content == expected["foo/bar/rm.jpg"]


def test_binary_with_octet_stream_accept(client, expected):
    r = client.get("/foo/bar/rm.jpg", headers={"Accept": "application/octet-stream"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/octet-stream"
    assert r.content == expected["foo/bar/rm.jpg"]


def test_wildcard_accept_keeps_classification(client):
    r = client.get("/foo/bar/rm.jpg", headers={"Accept": "text/html,*/*;q=0.8"})
    assert r.headers["content-type"] == "image/jpeg"


def test_content_type_query_override(client, expected):
    r = client.get("/foo/bar/text.txt", params={"content_type": "application/octet-stream"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/octet-stream"
    assert r.content == expected["foo/bar/text.txt"]


def test_query_override_beats_accept(client):
    r = client.get(
        "/foo/bar/rm.jpg",
        params={"content_type": "image/x-custom"},
        headers={"Accept": "application/octet-stream"},
    )
    assert r.headers["content-type"] == "image/x-custom"


def test_invalid_content_type_override_is_400(client):
    r = client.get("/foo/bar/rm.jpg", params={"content_type": "nonsense"})
    assert r.status_code == 400
    assert r.json()["detail"]["error_code"] == "invalid_media_type"


def test_repeated_gets_are_identical(client, expected):
    bodies = {client.get("/blobs/crlf-and-nul.bin").content for _ in range(5)}
    assert bodies == {expected["blobs/crlf-and-nul.bin"]}


def test_unknown_path_is_404_with_empty_body(client):
    r = client.get("/foo/bar/missing.jpg")
    assert r.status_code == 404
    assert r.content == b""


@pytest.mark.parametrize(
    "url",
    [
        "/foo/%2e%2e/foo/bar/text.txt",
        "/foo%5Cbar%5Ctext.txt",
        "/foo/bar/text.txt%00",
        "/",
    ],
)
def test_malformed_paths_are_400(client, url):
    r = client.get(url)
    assert r.status_code == 400
    assert r.json()["detail"]["error_code"] == "invalid_path"


def test_redundant_slashes_resolve(client, expected):
    r = client.get("/foo//bar/rm.jpg")
    assert r.status_code == 200
    assert r.content == expected["foo/bar/rm.jpg"]


def test_etag_and_conditional_get(client):
    r = client.get("/foo/bar/pixel.png")
    etag = r.headers["ETag"]
    r2 = client.get("/foo/bar/pixel.png", headers={"If-None-Match": etag})
    assert r2.status_code == 304
    assert r2.content == b""
    assert r2.headers["ETag"] == etag

    r3 = client.get("/foo/bar/pixel.png", headers={"If-None-Match": '"stale"'})
    assert r3.status_code == 200


def test_read_failure_is_500_and_never_partial(make_client, caplog, lazy_store, resource_root):
    caplog.set_level(logging.INFO, logger="service.resources")
    client = make_client(lazy_store, resource_root)
    (resource_root / "foo" / "bar" / "rm.jpg").unlink()
    r = client.get("/foo/bar/rm.jpg")
    assert r.status_code == 500
    assert r.json()["detail"]["error_code"] == "read_failed"

    failed = [rec for rec in caplog.records if rec.getMessage() == "resource.read_failed"]
    assert len(failed) == 1
    assert failed[0].levelno == logging.ERROR
    assert failed[0].resource_path == "foo/bar/rm.jpg"
    assert failed[0].exc_info is not None
    assert failed[0].exc_info[0] is ResourceReadError

    (resource_root / "foo" / "bar" / "text.txt").write_bytes(b"truncated")
    r = client.get("/foo/bar/text.txt")
    assert r.status_code == 500


def test_list_resources(client, expected):
    r = client.get("/_resources")
    assert r.status_code == 200
    items = r.json()["items"]
    assert [it["path"] for it in items] == sorted(expected)
    by_path = {it["path"]: it for it in items}
    assert by_path["foo/bar/rm.jpg"] == {
        "path": "foo/bar/rm.jpg",
        "classification": "binary",
        "media_type": "image/jpeg",
        "size": len(expected["foo/bar/rm.jpg"]),
    }


def test_in_memory_store_served_verbatim(make_client, tmp_path):
    payloads = {
        "latin1.txt": "café".encode("latin-1"),
        "bom.txt": b"\xef\xbb\xbfhello",
        "utf16.txt": "hi".encode("utf-16"),
        "empty.bin": b"",
    }
    client = make_client(Store.from_mapping(payloads), tmp_path)
    for path, data in payloads.items():
        r = client.get(f"/{path}")
        assert r.status_code == 200
        assert r.content == data


def test_missing_store_is_503(tmp_path):
    app = create_app(settings=Settings(resource_root=tmp_path / "unused"))
    r = TestClient(app).get("/foo.txt")
    assert r.status_code == 503


def test_lifespan_loads_store_from_settings(resource_root, expected):
    app = create_app(settings=Settings(resource_root=resource_root, preload=False))
    with TestClient(app) as client:
        assert client.get("/health").json()["resources"] == len(expected)
        assert client.get("/foo/bar/rm.jpg").content == expected["foo/bar/rm.jpg"]


@pytest.mark.parametrize(
    "header",
    [
        "*",
        '"other", {etag}',
        "W/{etag}",
        ' "a" ,W/{etag} ',
    ],
)
def test_if_none_match_lists_wildcard_and_weak(client, header):
    etag = client.get("/foo/bar/rm.jpg").headers["ETag"]
    r = client.get("/foo/bar/rm.jpg", headers={"If-None-Match": header.format(etag=etag)})
    assert r.status_code == 304
    assert r.content == b""


def test_if_none_match_without_current_tag_is_200(client, expected):
    r = client.get("/foo/bar/rm.jpg", headers={"If-None-Match": '"a", "b"'})
    assert r.status_code == 200
    assert r.content == expected["foo/bar/rm.jpg"]


@pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem accepting raw bytes")
def test_listing_survives_non_utf8_file_name(make_client, resource_root, expected):
    with open(os.path.join(os.fsencode(resource_root), b"caf\xe9.jpg"), "wb") as fh:
        fh.write(b"\xff\xd8\xff\xd9")
    client = make_client(Store.from_directory(resource_root), resource_root)
    r = client.get("/_resources")
    assert r.status_code == 200
    assert [it["path"] for it in r.json()["items"]] == sorted(expected)
