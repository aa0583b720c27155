"""Readers turn an open binary file handle into a comparable snapshot.

A reader must consume the handle to EOF and return ``bytes``.  Snapshots
are compared for exact equality and never interpreted.
"""

import hashlib
from collections.abc import Callable
from typing import BinaryIO

Reader = Callable[[BinaryIO], bytes]

_HASH_CHUNK = 256 * 1024  # 256 KiB read chunks for hashing


def read_file(fh: BinaryIO) -> bytes:
    """Return the full contents of *fh*."""
    return fh.read()


def _digest(fh: BinaryIO, algorithm: str) -> bytes:
    h = hashlib.new(algorithm)
    while chunk := fh.read(_HASH_CHUNK):
        h.update(chunk)
    return h.digest()


def md5_checksum(fh: BinaryIO) -> bytes:
    """Return the 16-byte MD5 digest of *fh*."""
    return _digest(fh, "md5")


def sha256_checksum(fh: BinaryIO) -> bytes:
    """Return the 32-byte SHA-256 digest of *fh*."""
    return _digest(fh, "sha256")


READERS: dict[str, Reader] = {
    "raw": read_file,
    "md5": md5_checksum,
    "sha256": sha256_checksum,
}


def get_reader(name: str) -> Reader:
    """Look up a reader by its configuration name."""
    try:
        return READERS[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown reader {name!r} (expected one of: {', '.join(READERS)})"
        ) from None
