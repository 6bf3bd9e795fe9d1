"""
Filesystem collaborator - directory listings and file reads as Futures.

Uses ``pyarrow.fs`` so the same calls work against a local disk or any other
Arrow filesystem (S3, GCS, HDFS, in-memory mocks).

Usage:
    from forkable import fs

    fs.read_dir("/etc").map(len).fork(
        on_rejected=print,
        on_resolved=lambda n: print(n, "entries"),
    )

Failures reject with FileAccessError; nothing is raised from fork.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor
from typing import List, Optional, Union

import pyarrow.fs as pafs

from ._executor import io_future
from .exceptions import FileAccessError
from .future import Future
from .result import Result

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def _resolve(path: PathLike, filesystem: Optional[pafs.FileSystem]) -> tuple:
    if filesystem is None:
        filesystem = pafs.LocalFileSystem()
    target = os.fspath(path)
    if isinstance(filesystem, pafs.LocalFileSystem):
        target = os.path.abspath(target)
    return filesystem, target


def _list_names(filesystem: pafs.FileSystem, path: str) -> List[str]:
    info = filesystem.get_file_info(path)
    if info.type == pafs.FileType.NotFound:
        raise FileNotFoundError(f"No such directory: {path}")
    if info.type != pafs.FileType.Directory:
        raise NotADirectoryError(f"Not a directory: {path}")
    entries = filesystem.get_file_info(pafs.FileSelector(path, recursive=False))
    return sorted(entry.base_name for entry in entries)


def _read_bytes(filesystem: pafs.FileSystem, path: str) -> bytes:
    info = filesystem.get_file_info(path)
    if info.type == pafs.FileType.NotFound:
        raise FileNotFoundError(f"No such file: {path}")
    if info.type == pafs.FileType.Directory:
        raise IsADirectoryError(f"Is a directory: {path}")
    with filesystem.open_input_stream(path) as stream:
        return stream.read()


def read_dir(
    path: PathLike,
    *,
    filesystem: Optional[pafs.FileSystem] = None,
    executor: Optional[Executor] = None,
) -> Future[FileAccessError, List[str]]:
    """Future resolving with the sorted base names of the entries in ``path``."""
    filesystem, target = _resolve(path, filesystem)

    def work() -> Result:
        logger.debug("Listing %s", target, extra={"path": target})
        try:
            return Result.ok(_list_names(filesystem, target))
        except (OSError, ValueError) as exc:
            return Result.err(FileAccessError(target, exc))

    return io_future(work, executor)


def read_file(
    path: PathLike,
    *,
    encoding: Optional[str] = "utf-8",
    filesystem: Optional[pafs.FileSystem] = None,
    executor: Optional[Executor] = None,
) -> Future[FileAccessError, Union[str, bytes]]:
    """Future resolving with the contents of ``path``.

    Contents are decoded with ``encoding``; pass ``encoding=None`` for bytes.
    Undecodable contents reject like any other read failure.
    """
    filesystem, target = _resolve(path, filesystem)

    def work() -> Result:
        logger.debug("Reading %s", target, extra={"path": target})
        try:
            data = _read_bytes(filesystem, target)
            return Result.ok(data if encoding is None else data.decode(encoding))
        except (OSError, ValueError) as exc:
            return Result.err(FileAccessError(target, exc))

    return io_future(work, executor)


__all__ = [
    'read_dir',
    'read_file',
]
