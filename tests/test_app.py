import io
import json
import time
from urllib.parse import parse_qs, urlparse

import pytest

from fileshare.app import create_app, main, share_url
from fileshare.auth import decode_token
from fileshare.cache import MemoryCache
from fileshare.database import Database

EMAIL = "user@example.com"
SECRET = "secret"


@pytest.fixture
def env(tmp_path):
    db = Database(":memory:")
    cache = MemoryCache()
    app = create_app(db, cache, SECRET, tmp_path / "uploads")
    app.config["TESTING"] = True
    yield app.test_client(), db, cache, tmp_path / "uploads"
    db.close()


def _register(client, email=EMAIL):
    return client.post("/register", json={"email": email, "password": "password"})


def _token(client, email=EMAIL):
    _register(client, email)
    resp = client.post("/login", json={"email": email, "password": "password"})
    return resp.get_json()["token"]


def _upload(client, token, name, content):
    return client.post(
        "/upload",
        data={"file": (io.BytesIO(content), name)},
        headers={"Authorization": token},
        content_type="multipart/form-data",
    )


def test_share_url_format():
    assert share_url(3, 100) == "http://localhost:8080/download/3?expires=100"


def test_register_and_duplicate(env):
    client, db, _, _ = env
    resp = _register(client)
    assert resp.status_code == 201
    assert resp.get_json() == {"message": "User registered successfully"}
    assert db.get_password(EMAIL) is not None
    again = _register(client)
    assert again.status_code == 500
    assert again.get_json() == {"error": "Could not register user"}


def test_register_invalid_input(env):
    client, _, _, _ = env
    resp = client.post("/register", data="not json", content_type="application/json")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid input"}


def test_login_returns_token_for_user(env):
    client, _, _, _ = env
    token = _token(client)
    assert decode_token(token, SECRET) == EMAIL


def test_login_rejects_bad_credentials(env):
    client, _, _, _ = env
    _register(client)
    wrong = client.post("/login", json={"email": EMAIL, "password": "secret"})
    assert wrong.status_code == 401
    assert wrong.get_json() == {"error": "Invalid credentials"}
    unknown = client.post("/login", json={"email": "other@example.com", "password": "password"})
    assert unknown.status_code == 401


def test_protected_requires_token(env):
    client, _, _, _ = env
    missing = client.get("/protected")
    assert missing.status_code == 401
    assert missing.get_json() == {"error": "Token required"}
    bad = client.get("/protected", headers={"Authorization": "token"})
    assert bad.status_code == 401
    assert bad.get_json() == {"error": "Invalid token"}


def test_protected_with_token(env):
    client, _, _, _ = env
    token = _token(client)
    resp = client.get("/protected", headers={"Authorization": token})
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Protected content", "user": EMAIL}


def test_upload_saves_file_and_metadata(env):
    client, db, _, upload_dir = env
    token = _token(client)
    resp = _upload(client, token, "notes.txt", b"hello")
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "File uploaded successfully", "url": "/uploads/notes.txt"}
    assert (upload_dir / "notes.txt").read_bytes() == b"hello"
    records = db.files_for_user(EMAIL)
    assert [(r.file_name, r.size, r.url) for r in records] == [("notes.txt", 5, "/uploads/notes.txt")]
    served = client.get("/uploads/notes.txt")
    assert served.data == b"hello"


def test_upload_without_file(env):
    client, _, _, _ = env
    token = _token(client)
    resp = client.post("/upload", data={}, headers={"Authorization": token},
                       content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid file"}


def test_upload_requires_auth(env):
    client, _, _, _ = env
    resp = client.post("/upload", data={"file": (io.BytesIO(b"x"), "a.txt")},
                       content_type="multipart/form-data")
    assert resp.status_code == 401


def test_files_empty_then_listed_and_cached(env):
    client, _, cache, _ = env
    token = _token(client)
    empty = client.get("/files", headers={"Authorization": token})
    assert empty.get_json() == {"message": "No files found"}
    _upload(client, token, "notes.txt", b"hello")
    listed = client.get("/files", headers={"Authorization": token}).get_json()
    assert [f["file_name"] for f in listed] == ["notes.txt"]
    assert listed[0]["user_email"] == EMAIL
    assert json.loads(cache.get("files:" + EMAIL)) == listed


def test_files_served_from_cache(env):
    client, _, cache, _ = env
    token = _token(client)
    cached = [{"id": 9, "file_name": "cached.bin"}]
    cache.set("files:" + EMAIL, json.dumps(cached))
    resp = client.get("/files", headers={"Authorization": token})
    assert resp.get_json() == cached


def test_share_and_download(env):
    client, db, _, _ = env
    token = _token(client)
    _upload(client, token, "notes.txt", b"hello")
    file_id = db.files_for_user(EMAIL)[0].id
    body = client.get(f"/share/{file_id}", headers={"Authorization": token}).get_json()
    assert body["file_name"] == "notes.txt"
    link = urlparse(body["share_url"])
    assert link.path == f"/download/{file_id}"
    expires = int(parse_qs(link.query)["expires"][0])
    assert expires > time.time()
    assert body["share_url"] == share_url(file_id, expires)
    resp = client.get(f"{link.path}?{link.query}", headers={"Authorization": token})
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/uploads/notes.txt")


def test_share_unknown_file(env):
    client, _, _, _ = env
    token = _token(client)
    resp = client.get("/share/42", headers={"Authorization": token})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "File not found"}


def test_download_expired_or_invalid_link(env):
    client, db, _, _ = env
    token = _token(client)
    _upload(client, token, "notes.txt", b"hello")
    file_id = db.files_for_user(EMAIL)[0].id
    headers = {"Authorization": token}
    past = client.get(f"/download/{file_id}?expires=1", headers=headers)
    assert past.status_code == 401
    assert past.get_json() == {"error": "Link expired"}
    garbage = client.get(f"/download/{file_id}?expires=soon", headers=headers)
    assert garbage.status_code == 401
    future = int(time.time()) + 3600
    missing = client.get(f"/download/999?expires={future}", headers=headers)
    assert missing.status_code == 404


def test_search_filters(env):
    client, db, cache, _ = env
    token = _token(client)
    headers = {"Authorization": token}
    _upload(client, token, "report.pdf", b"pdf")
    _upload(client, token, "notes.txt", b"hello")

    def names(query):
        return [f["file_name"] for f in client.get(f"/search?{query}", headers=headers).get_json()]

    assert names("fname=REP") == ["report.pdf"]
    assert names("fname=pdf") == []
    assert names("type=txt") == ["notes.txt"]
    day = db.files_for_user(EMAIL)[0].upload_at.date().isoformat()
    assert names(f"date={day}") == ["report.pdf", "notes.txt"]
    assert json.loads(cache.get(f"search:{EMAIL}:REP::")) == [
        r.to_dict() for r in db.files_for_user(EMAIL) if r.file_name == "report.pdf"
    ]


def test_search_only_own_files(env):
    client, _, _, _ = env
    owner = _token(client)
    other = _token(client, "other@example.com")
    _upload(client, owner, "notes.txt", b"hello")
    resp = client.get("/search?type=txt", headers={"Authorization": other})
    assert resp.get_json() == []


def test_main_help_exits_cleanly():
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0