# fileshare

A small HTTP service for sharing files. Users register and log in with an
e-mail address and password, receive a signed token, and use it to upload
files, list and search their own uploads, and create share links that expire
after 24 hours.

User accounts and file metadata live in a SQLite database, uploaded files are
stored on local disk under an uploads directory, and file listings and search
results are cached (in Redis, or in an in-process cache).

## Running the server

Once the package is installed, start the service with:

    fileshare

By default it listens on `0.0.0.0:8080`, keeps its data in `fileshare.db`,
stores uploads in `./uploads` and connects to Redis at `localhost:6379`. If
Redis cannot be reached the command exits with an error. Options:

| Option            | Default                                  | Meaning                                   |
|-------------------|------------------------------------------|-------------------------------------------|
| `--host`          | `0.0.0.0`                                | Address to listen on                      |
| `--port`          | `8080`                                   | Port to listen on                         |
| `--database`      | `fileshare.db`                           | SQLite database file                      |
| `--upload-dir`    | `uploads`                                | Directory for uploaded files              |
| `--redis-host`    | `localhost`                              | Redis host                                |
| `--redis-port`    | `6379`                                   | Redis port                                |
| `--redis-db`      | `0`                                      | Redis database number                     |
| `--memory-cache`  | off                                      | Use an in-process cache instead of Redis  |
| `--secret`        | `FILESHARE_SECRET` from the environment  | Key used to sign tokens                   |

For local use without Redis:

    fileshare --memory-cache

## Endpoints

| Method | Path              | Auth | Purpose                                                    |
|--------|-------------------|------|------------------------------------------------------------|
| POST   | `/register`       | no   | Create an account from `{"email": ..., "password": ...}`   |
| POST   | `/login`          | no   | Check credentials and return `{"token": ...}` (valid 72 h) |
| GET    | `/protected`      | yes  | Return the e-mail address the token belongs to             |
| POST   | `/upload`         | yes  | Upload a multipart form field named `file`                 |
| GET    | `/files`          | yes  | List the caller's files                                    |
| GET    | `/share/<id>`     | yes  | Return a share link that expires in 24 hours               |
| GET    | `/download/<id>`  | yes  | Redirect to the file if `expires` has not passed           |
| GET    | `/search`         | yes  | Filter by `fname`, `date` (YYYY-MM-DD) and `type`          |
| GET    | `/uploads/<name>` | no   | Serve a stored upload                                      |

Authenticated requests carry the token itself in the `Authorization` header:

    Authorization: token

A missing header yields `401 {"error": "Token required"}`; a bad or expired
token yields `401 {"error": "Invalid token"}`.

Uploads are stored under their base file name, so a second upload with the
same name overwrites the stored file. `/files` answers
`{"message": "No files found"}` when the caller has no uploads.

Search matches `fname` case-insensitively against the name without its
extension, `date` against the upload day, and `type` against the extension.
Search results are cached for five minutes. A file listing, once cached, is
served from the cache with no expiry of its own, so uploads made afterwards
do not show in `/files` until that cache entry is removed.

## Using it from Python

The application is built by `fileshare.app.create_app`, which takes its
database, cache, signing secret and upload directory, so it can be embedded or
tested without external services:

```python
from fileshare.app import create_app
from fileshare.cache import MemoryCache
from fileshare.database import Database

app = create_app(Database("fileshare.db"), MemoryCache(), "secret", "uploads")
client = app.test_client()

client.post("/register", json={"email": "alice@example.com", "password": "password"})
response = client.post("/login", json={"email": "alice@example.com", "password": "password"})
login_reply = response.get_json()
```

The login reply holds the token to send in the `Authorization` header.
`fileshare.cache.connect_redis(host, port, db)` returns a cache backed by a
Redis server, checked with a ping; it raises `ConnectionError` when the server
cannot be reached.

The building blocks are usable on their own:

- `fileshare.auth` — `hash_password`, `verify_password`, `issue_token`,
  `decode_token` (raises `AuthError` for a missing or invalid token).
- `fileshare.storage.save_locally` — write an uploaded stream to a directory
  and return its `/uploads/...` URL.
- `fileshare.database.Database` — users and file metadata in SQLite; usable
  as a context manager.
- `fileshare.cache.MemoryCache` — in-process cache with optional expiry.
- `fileshare.models.FileRecord` — a stored file, with `to_dict()` for JSON.
- `fileshare.app.share_url` — build the expiring download link for a file.

## What it does not do

- Files are only stored on local disk; there is no cloud object storage.
- There is no way to delete a file or an account.
- Share links always point at `http://localhost:8080`, whatever host and port
  the server runs on, and following one still needs a valid token.