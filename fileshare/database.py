"""SQLite storage for users and file metadata."""

from __future__ import annotations

import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import FileRecord

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    token TEXT
);
CREATE TABLE IF NOT EXISTS files (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_email TEXT NOT NULL,
    file_name TEXT NOT NULL,
    size INTEGER NOT NULL,
    url TEXT NOT NULL,
    upload_at TEXT NOT NULL
);
"""

_FILE_COLUMNS = "id, user_email, file_name, size, url, upload_at"


def _stem(name: str) -> str:
    """File name without its last extension."""
    head, dot, _ = name.rpartition(".")
    return head if dot else name


def _record(row: sqlite3.Row) -> FileRecord:
    return FileRecord(
        id=row["id"],
        user_email=row["user_email"],
        file_name=row["file_name"],
        size=row["size"],
        url=row["url"],
        upload_at=datetime.fromisoformat(row["upload_at"]),
    )


class Database:
    """Users and uploaded files kept in one SQLite database."""

    def __init__(self, path: str | Path = ":memory:") -> None:
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.create_function("file_stem", 1, _stem, deterministic=True)
        self._lock = threading.Lock()
        with self._lock, self._conn:
            self._conn.executescript(_SCHEMA)

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def create_user(self, email: str, password_hash: str) -> int:
        """Add a user; raises sqlite3.IntegrityError if the e-mail is taken."""
        with self._lock, self._conn:
            cur = self._conn.execute(
                "INSERT INTO users (email, password) VALUES (?, ?)", (email, password_hash)
            )
            return cur.lastrowid

    def get_password(self, email: str) -> Optional[str]:
        """Return the stored password hash, or None for an unknown user."""
        with self._lock:
            row = self._conn.execute(
                "SELECT password FROM users WHERE email = ?", (email,)
            ).fetchone()
        return row["password"] if row else None

    def set_token(self, email: str, token: str) -> bool:
        """Store the user's latest token; tell whether a user was updated."""
        with self._lock, self._conn:
            cur = self._conn.execute("UPDATE users SET token = ? WHERE email = ?", (token, email))
            return cur.rowcount > 0

    def add_file(
        self, file_name: str, size: int, url: str, upload_at: datetime, user_email: str
    ) -> int:
        """Record an uploaded file and return its id."""
        with self._lock, self._conn:
            cur = self._conn.execute(
                "INSERT INTO files (file_name, size, url, upload_at, user_email)"
                " VALUES (?, ?, ?, ?, ?)",
                (file_name, size, url, upload_at.isoformat(), user_email),
            )
            return cur.lastrowid

    def files_for_user(self, email: str) -> list[FileRecord]:
        """All files uploaded by the user."""
        with self._lock:
            rows = self._conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE user_email = ? ORDER BY id", (email,)
            ).fetchall()
        return [_record(row) for row in rows]

    def get_file(self, file_id: int | str) -> Optional[FileRecord]:
        """Return the file with the given id, or None."""
        try:
            key = int(file_id)
        except (TypeError, ValueError):
            return None
        with self._lock:
            row = self._conn.execute(
                f"SELECT {_FILE_COLUMNS} FROM files WHERE id = ?", (key,)
            ).fetchone()
        return _record(row) if row else None

    def search_files(
        self, email: str, fname: str = "", upload_date: str = "", file_type: str = ""
    ) -> list[FileRecord]:
        """Search a user's files by name part, upload date (YYYY-MM-DD) and extension.

        Empty criteria are ignored; name and extension match case-insensitively.
        """
        clauses = ["user_email = ?"]
        params: list[object] = [email]
        if fname:
            clauses.append("file_stem(file_name) LIKE ?")
            params.append(f"%{fname}%")
        if upload_date:
            clauses.append("substr(upload_at, 1, 10) = ?")
            params.append(upload_date)
        if file_type:
            clauses.append("file_name LIKE ?")
            params.append(f"%.{file_type}")
        query = f"SELECT {_FILE_COLUMNS} FROM files WHERE {' AND '.join(clauses)} ORDER BY id"
        with self._lock:
            rows = self._conn.execute(query, params).fetchall()
        return [_record(row) for row in rows]

    def close(self) -> None:
        """Close the connection."""
        self._conn.close()