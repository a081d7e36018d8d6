"""File, hashing and repository-discovery helpers."""

from __future__ import annotations

import hashlib
import os
import zlib
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]
Data = Union[str, bytes, bytearray, memoryview]

REPO_DIR_NAME = ".minigit"


class MiniGitError(Exception):
    """Raised when a repository operation cannot be carried out."""


def _as_bytes(data: Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def sha1(data: Data) -> str:
    """Return the hexadecimal SHA-1 digest of ``data``."""
    return hashlib.sha1(_as_bytes(data)).hexdigest()


def read_file(path: PathLike) -> bytes:
    """Return the whole content of ``path``, or empty bytes if it cannot be read."""
    try:
        return Path(path).read_bytes()
    except OSError:
        return b""


def write_file(path: PathLike, content: Data) -> None:
    """Write ``content`` to ``path``, creating missing parent directories."""
    target = Path(path)
    parent = target.parent
    if not parent.exists():
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MiniGitError(
                f"Could not create parent directories for file: {target} - {exc}"
            ) from exc
    try:
        target.write_bytes(_as_bytes(content))
    except OSError as exc:
        raise MiniGitError(f"Could not open file for writing: {target}") from exc


def create_directory(path: PathLike) -> None:
    """Create ``path`` and its parents unless something already exists there."""
    target = Path(path)
    if target.exists():
        return
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise MiniGitError(f"Could not create directory: {target} - {exc}") from exc


def compress(data: Data) -> bytes:
    """Compress ``data`` with zlib at the best compression level."""
    return zlib.compress(_as_bytes(data), zlib.Z_BEST_COMPRESSION)


def decompress(data: Data) -> bytes:
    """Inverse of :func:`compress`."""
    try:
        return zlib.decompress(_as_bytes(data))
    except zlib.error as exc:
        raise MiniGitError(f"Could not decompress data: {exc}") from exc


def is_minigit_repo(start: PathLike | None = None) -> bool:
    """Tell whether ``start`` (default: the current directory) or a parent holds a repository."""
    base = Path(start) if start is not None else Path.cwd()
    base = base.resolve()
    return any((candidate / REPO_DIR_NAME).is_dir() for candidate in (base, *base.parents))