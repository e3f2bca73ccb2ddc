"""Saving uploaded files on the local disk."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import BinaryIO

URL_PREFIX = "/uploads/"


def save_locally(stream: BinaryIO, file_name: str, directory: str | Path = "uploads") -> str:
    """Write the stream to ``directory/file_name`` and return its public URL."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)
    with open(target_dir / file_name, "wb") as out:
        shutil.copyfileobj(stream, out)
    return URL_PREFIX + file_name