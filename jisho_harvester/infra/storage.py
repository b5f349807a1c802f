"""Crash-safe file persistence shared by the fetch cache and the audio store."""

from __future__ import annotations

import hashlib
import os
import tempfile
from pathlib import Path
from typing import Iterable
from urllib.parse import quote

TEMP_PREFIX = "tmp_"
# well under NAME_MAX (255 bytes) on common filesystems
MAX_NAME_LENGTH = 200
DIGEST_LENGTH = 64


def escaped_name(address: str) -> str:
    """File name for an address: the whole string percent-escaped, ``/`` included.

    Names longer than ``MAX_NAME_LENGTH`` keep a readable escaped prefix and
    end in the sha256 digest of the full address.
    """
    name = quote(address, safe="")
    if len(name) <= MAX_NAME_LENGTH:
        return name
    digest = hashlib.sha256(address.encode("utf-8")).hexdigest()
    return f"{name[: MAX_NAME_LENGTH - DIGEST_LENGTH - 1]}~{digest}"


def atomic_write(directory: Path, name: str, chunks: Iterable[bytes]) -> Path:
    """Stream ``chunks`` to a unique temporary file and rename it to ``name``.

    A partially written file is never visible under the final name. On any
    failure the temporary is removed and the raised exception propagates.
    """
    directory.mkdir(parents=True, exist_ok=True)
    final_path = directory / name
    fd, tmp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, dir=directory)
    try:
        with os.fdopen(fd, "wb") as stream:
            for chunk in chunks:
                stream.write(chunk)
        os.replace(tmp_name, final_path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    return final_path


def list_records(directory: Path) -> list[Path]:
    """Final-name files in a storage directory, skipping in-flight temporaries."""
    if not directory.exists():
        return []
    return sorted(
        path for path in directory.iterdir() if path.is_file() and not path.name.startswith(TEMP_PREFIX)
    )


__all__ = ["MAX_NAME_LENGTH", "TEMP_PREFIX", "atomic_write", "escaped_name", "list_records"]
