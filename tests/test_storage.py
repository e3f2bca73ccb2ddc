import io

import pytest

from fileshare.storage import save_locally


def test_writes_content(tmp_path):
    payload = b"hello world\x00\x01"
    save_locally(io.BytesIO(payload), "data.bin", tmp_path)
    assert (tmp_path / "data.bin").read_bytes() == payload


def test_returns_uploads_url(tmp_path):
    url = save_locally(io.BytesIO(b"x"), "report.txt", tmp_path)
    assert url == "/uploads/report.txt"


def test_creates_missing_directory(tmp_path):
    target = tmp_path / "nested" / "uploads"
    save_locally(io.BytesIO(b"abc"), "a.txt", target)
    assert (target / "a.txt").read_bytes() == b"abc"


def test_overwrites_existing_file(tmp_path):
    save_locally(io.BytesIO(b"first"), "same.txt", tmp_path)
    save_locally(io.BytesIO(b"second"), "same.txt", tmp_path)
    assert (tmp_path / "same.txt").read_bytes() == b"second"


def test_unwritable_target_raises(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_bytes(b"")
    with pytest.raises(OSError):
        save_locally(io.BytesIO(b"x"), "f.txt", blocker)