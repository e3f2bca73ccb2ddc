"""HTTP service for registering users and uploading, listing and sharing files."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sqlite3
import time
from datetime import datetime, timedelta
from functools import wraps
from pathlib import Path
from typing import Any, Callable

from flask import Flask, g, jsonify, redirect, request, send_from_directory

from .auth import AuthError, decode_token, hash_password, issue_token, verify_password
from .cache import MemoryCache, connect_redis
from .database import Database
from .storage import save_locally

log = logging.getLogger(__name__)

SHARE_LIFETIME = timedelta(hours=24)
SEARCH_CACHE_TTL = timedelta(minutes=5)
SHARE_BASE_URL = "http://localhost:8080"


def share_url(file_id: int, expires: int) -> str:
    """Public download link for a file, valid until the given Unix time."""
    return f"{SHARE_BASE_URL}/download/{int(file_id)}?expires={int(expires)}"


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _credentials() -> tuple[str, str] | None:
    """Read an e-mail and password from the JSON body, or None if malformed."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    email = data.get("email", "")
    password = data.get("password", "")
    if not isinstance(email, str) or not isinstance(password, str):
        return None
    return email, password


def create_app(db: Database, cache: Any, secret: str | bytes, upload_dir: str | Path = "uploads") -> Flask:
    """Build the web application on top of the given database and cache."""
    app = Flask(__name__)
    upload_path = Path(upload_dir).resolve()

    def authenticated(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                g.email = decode_token(request.headers.get("Authorization", ""), secret)
            except AuthError as exc:
                return _error(str(exc), 401)
            return view(*args, **kwargs)

        return wrapper

    @app.post("/register")
    def register():
        creds = _credentials()
        if creds is None:
            return _error("Invalid input", 400)
        email, password = creds
        try:
            hashed = hash_password(password)
        except ValueError:
            return _error("Error hashing password", 500)
        try:
            db.create_user(email, hashed)
        except sqlite3.Error:
            return _error("Could not register user", 500)
        return jsonify({"message": "User registered successfully"}), 201

    @app.post("/login")
    def login():
        creds = _credentials()
        if creds is None:
            return _error("Invalid input", 400)
        email, password = creds
        stored = db.get_password(email)
        if stored is None or not verify_password(password, stored):
            return _error("Invalid credentials", 401)
        token = issue_token(email, secret)
        try:
            db.set_token(email, token)
        except sqlite3.Error:
            return _error("Could not store token", 500)
        return jsonify({"token": token})

    @app.get("/protected")
    @authenticated
    def protected():
        return jsonify({"message": "Protected content", "user": g.email})

    @app.get("/uploads/<path:name>")
    def uploaded(name: str):
        return send_from_directory(upload_path, name)

    @app.post("/upload")
    @authenticated
    def upload():
        incoming = request.files.get("file")
        file_name = Path(incoming.filename or "").name if incoming is not None else ""
        if not file_name:
            return _error("Invalid file", 400)
        upload_time = datetime.now().astimezone()
        try:
            url = save_locally(incoming.stream, file_name, upload_path)
            size = (upload_path / file_name).stat().st_size
        except OSError:
            return _error("File upload failed", 500)
        log.info("Saving file metadata to DB %s", g.email)
        try:
            db.add_file(file_name, size, url, upload_time, g.email)
        except sqlite3.Error:
            return _error("Could not save file metadata", 500)
        return jsonify({"message": "File uploaded successfully", "url": url})

    @app.get("/files")
    @authenticated
    def files():
        cache_key = "files:" + g.email
        cached = cache.get(cache_key)
        if cached is not None and cached != "null":
            try:
                return jsonify(json.loads(cached))
            except ValueError:
                pass
        try:
            records = db.files_for_user(g.email)
        except sqlite3.Error:
            return _error("Could not fetch files", 500)
        if not records:
            return jsonify({"message": "No files found"})
        payload = [record.to_dict() for record in records]
        cache.set(cache_key, json.dumps(payload), None)
        return jsonify(payload)

    @app.get("/share/<file_id>")
    @authenticated
    def share(file_id: str):
        record = db.get_file(file_id)
        if record is None:
            return _error("File not found", 404)
        expires = int(time.time() + SHARE_LIFETIME.total_seconds())
        return jsonify({"file_name": record.file_name, "share_url": share_url(record.id, expires)})

    @app.get("/download/<file_id>")
    @authenticated
    def download(file_id: str):
        try:
            expires = int(request.args.get("expires", ""))
        except ValueError:
            return _error("Link expired", 401)
        if int(time.time()) > expires:
            return _error("Link expired", 401)
        record = db.get_file(file_id)
        if record is None:
            return _error("File not found", 404)
        return redirect(record.url, code=302)

    @app.get("/search")
    @authenticated
    def search():
        fname = request.args.get("fname", "")
        upload_date = request.args.get("date", "")
        file_type = request.args.get("type", "")
        cache_key = f"search:{g.email}:{fname}:{upload_date}:{file_type}"
        cached = cache.get(cache_key)
        if cached is not None:
            try:
                return jsonify(json.loads(cached))
            except ValueError:
                return jsonify(None)
        try:
            records = db.search_files(g.email, fname, upload_date, file_type)
        except sqlite3.Error:
            return _error("Could not fetch files", 500)
        payload = [record.to_dict() for record in records]
        cache.set(cache_key, json.dumps(payload), SEARCH_CACHE_TTL)
        return jsonify(payload)

    return app


def main(argv: list[str] | None = None) -> int:
    """Start the file sharing server."""
    parser = argparse.ArgumentParser(description="File sharing HTTP server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--database", default="fileshare.db", help="SQLite database file")
    parser.add_argument("--upload-dir", default="uploads")
    parser.add_argument("--redis-host", default="localhost")
    parser.add_argument("--redis-port", type=int, default=6379)
    parser.add_argument("--redis-db", type=int, default=0)
    parser.add_argument("--memory-cache", action="store_true", help="use an in-process cache instead of Redis")
    parser.add_argument("--secret", default=os.environ.get("FILESHARE_SECRET", "secret"))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    db = Database(args.database)
    try:
        if args.memory_cache:
            cache: Any = MemoryCache()
        else:
            try:
                cache = connect_redis(args.redis_host, args.redis_port, args.redis_db)
            except ConnectionError as exc:
                parser.exit(1, f"{exc}\n")
            log.info("Connected to Redis successfully")
        log.info("Database connected successfully")
        app = create_app(db, cache, args.secret, args.upload_dir)
        app.run(host=args.host, port=args.port)
    finally:
        db.close()
    return 0